"""Submit OFT sends and extract the LayerZero GUID from their receipts."""

from __future__ import annotations

import logging
import warnings
from typing import Any, Iterable, Mapping

from hexbytes import HexBytes

from .abi import OFT_SENT_TOPIC
from .codec import to_checksum
from .errors import TrackingIdentifierMissing, TransactionError, TransferFailed
from .model import EMPTY_TRACKING_ID, MessagingFee, TransferParam, TransferResult

logger = logging.getLogger(__name__)


def extract_tracking_id(logs: Iterable[Mapping[str, Any]]) -> bytes:
    """Return the GUID of the first ``OFTSent`` log, or ``EMPTY_TRACKING_ID``."""

    for log in logs:
        topics = log.get("topics") or []
        if len(topics) < 2:
            continue
        if bytes(HexBytes(topics[0])) == OFT_SENT_TOPIC:
            return bytes(HexBytes(topics[1]))
    return EMPTY_TRACKING_ID


def execute_transfer(
    client: Any,
    oft_address: str,
    param: TransferParam,
    fee: MessagingFee,
    refund_address: str,
) -> TransferResult:
    """Send ``param`` through ``oft_address`` and wait for one confirmation.

    ``fee.native_fee`` is attached as the transaction value. A confirmed send
    without an ``OFTSent`` log still succeeds; its result carries an empty
    tracking id and a :class:`TrackingIdentifierMissing` warning is emitted.
    """

    try:
        tx_hash = client.send(
            oft_address, param.as_abi_tuple(), fee.as_abi_tuple(), to_checksum(refund_address)
        )
        receipt = client.wait_for_receipt(tx_hash)
    except TransactionError as exc:
        raise TransferFailed(f"Transfer failed: {exc}") from exc

    tracking_id = extract_tracking_id(receipt.get("logs") or [])
    if tracking_id == EMPTY_TRACKING_ID:
        logger.warning("No OFTSent event in receipt for %s; GUID unavailable", tx_hash)
        warnings.warn(
            f"transaction {tx_hash} confirmed without an OFTSent event",
            TrackingIdentifierMissing,
            stacklevel=2,
        )
    else:
        logger.info("Transfer %s has GUID 0x%s", tx_hash, tracking_id.hex())

    return TransferResult(tx_hash=tx_hash, tracking_id=tracking_id)
