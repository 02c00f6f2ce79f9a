"""Delivery status lookups against the LayerZero scan API.

Each lookup is resolved from the indexer's current view; nothing is cached
and no local state machine is kept between calls.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

import requests
from requests import RequestException

from .chains import ChainRegistry
from .config import NetworkMode, TransferConfig
from .errors import RemoteReadFailure
from .model import ChainEvent, DeliveryState, NormalizedStatus

logger = logging.getLogger(__name__)

SCAN_API_URLS = {
    NetworkMode.MAINNET: "https://scan.layerzero-api.com/v1",
    NetworkMode.TESTNET: "https://scan-testnet.layerzero-api.com/v1",
}
SCAN_UI_URLS = {
    NetworkMode.MAINNET: "https://layerzeroscan.com",
    NetworkMode.TESTNET: "https://testnet.layerzeroscan.com",
}
HTTP_TIMEOUT_SECONDS = 30

_STATE_BY_NAME = {
    "INFLIGHT": DeliveryState.PENDING,
    "PENDING": DeliveryState.PENDING,
    "CONFIRMING": DeliveryState.CONFIRMING,
    "DELIVERED": DeliveryState.DELIVERED,
    "FAILED": DeliveryState.FAILED,
    "PAYLOAD_STORED": DeliveryState.FAILED,
    "UNRESOLVABLE_COMMAND": DeliveryState.FAILED,
    "MALFORMED_COMMAND": DeliveryState.FAILED,
    "BLOCKED": DeliveryState.BLOCKED,
    "APPLICATION_BURNED": DeliveryState.BLOCKED,
    "APPLICATION_SKIPPED": DeliveryState.BLOCKED,
}

_DEFAULT_MESSAGES = {
    DeliveryState.PENDING: "Message is in flight",
    DeliveryState.CONFIRMING: "Waiting for source chain confirmations",
    DeliveryState.DELIVERED: "Message delivered on the destination chain",
    DeliveryState.FAILED: "Message execution failed on the destination chain",
    DeliveryState.BLOCKED: "Message is blocked and needs manual intervention",
    DeliveryState.UNKNOWN: "Transaction not indexed yet; try again shortly",
}


def scan_tx_url(tx_hash: str, network_mode: NetworkMode = NetworkMode.MAINNET) -> str:
    return f"{SCAN_UI_URLS[network_mode]}/tx/{tx_hash}"


def map_state(status_name: str | None) -> DeliveryState:
    if not status_name:
        return DeliveryState.UNKNOWN
    return _STATE_BY_NAME.get(str(status_name).upper(), DeliveryState.UNKNOWN)


def _parse_timestamp(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    try:
        if isinstance(raw, (int, float)) or str(raw).isdigit():
            return datetime.fromtimestamp(int(raw), tz=timezone.utc)
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        logger.debug("Unparseable blockTimestamp: %s", raw)
        return None


def _mapping_field(record: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = record.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        logger.debug("Ignoring non-object %r field in scan API message: %r", name, value)
        return {}
    return value


def _party_address(party: Any) -> str | None:
    if isinstance(party, Mapping):
        return party.get("address")
    return party if isinstance(party, str) else None


def _chain_event(side: Mapping[str, Any] | None, chain_label: str) -> ChainEvent | None:
    if not isinstance(side, Mapping):
        return None
    tx = side.get("tx") or {}
    if not isinstance(tx, Mapping) or not tx.get("txHash"):
        return None
    return ChainEvent(
        chain=chain_label,
        tx_hash=tx.get("txHash"),
        timestamp=_parse_timestamp(tx.get("blockTimestamp")),
    )


def normalize_message(
    message: Mapping[str, Any], chains: ChainRegistry | None = None
) -> NormalizedStatus:
    """Map one scan API message record to a :class:`NormalizedStatus`."""

    def label(eid: Any) -> str:
        if chains is not None:
            return chains.label_for_eid(eid)
        return f"eid:{eid}"

    if not isinstance(message, Mapping):
        raise RemoteReadFailure(
            f"Scan API message record is not an object: {type(message).__name__}"
        )
    pathway = _mapping_field(message, "pathway")
    status = _mapping_field(message, "status")
    raw_status = status.get("name")
    state = map_state(raw_status)

    return NormalizedStatus(
        state=state,
        message=status.get("message") or _DEFAULT_MESSAGES[state],
        tracking_id=message.get("guid"),
        source=_chain_event(message.get("source"), label(pathway.get("srcEid"))),
        destination=_chain_event(message.get("destination"), label(pathway.get("dstEid"))),
        raw_status=raw_status,
        extra={
            "sender": _party_address(pathway.get("sender")),
            "receiver": _party_address(pathway.get("receiver")),
        },
    )


def _unknown() -> NormalizedStatus:
    return NormalizedStatus(
        state=DeliveryState.UNKNOWN, message=_DEFAULT_MESSAGES[DeliveryState.UNKNOWN]
    )


class StatusClient:
    """Query the scan API for messages created by a source transaction."""

    def __init__(
        self,
        base_url: str,
        *,
        chains: ChainRegistry | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.chains = chains
        self._session = session or requests.Session()

    @classmethod
    def from_config(
        cls, config: TransferConfig, chains: ChainRegistry | None = None
    ) -> "StatusClient":
        return cls(config.scan_api_url or SCAN_API_URLS[config.network_mode], chains=chains)

    def get_status(self, source_tx_hash: str) -> NormalizedStatus:
        """Return the delivery status of the first message sent by ``source_tx_hash``.

        Unindexed transactions (HTTP 404 or an empty ``messages`` list) yield
        ``DeliveryState.UNKNOWN``; callers are expected to poll again later.
        """

        url = f"{self.base_url}/messages/tx/{source_tx_hash}"
        logger.debug("GET %s", url)
        try:
            response = self._session.get(
                url, headers={"accept": "application/json"}, timeout=HTTP_TIMEOUT_SECONDS
            )
        except RequestException as exc:
            logger.error(
                "Status lookup failed: %s", exc, exc_info=logger.isEnabledFor(logging.DEBUG)
            )
            raise RemoteReadFailure(f"Status lookup for {source_tx_hash} failed: {exc}") from exc

        if response.status_code == 404:
            logger.debug("Scan API has no record of %s", source_tx_hash)
            return _unknown()
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            logger.error("Scan API HTTP %s for %s", response.status_code, source_tx_hash)
            raise RemoteReadFailure(
                f"Scan API returned HTTP {response.status_code} for {source_tx_hash}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.debug("Scan API JSON parse error: %s", response.text, exc_info=True)
            raise RemoteReadFailure("Scan API returned malformed JSON") from exc

        messages = payload.get("messages") if isinstance(payload, dict) else None
        if messages is not None and not isinstance(messages, list):
            raise RemoteReadFailure("Scan API response has a non-list 'messages' field")
        if not messages:
            return _unknown()
        if len(messages) > 1:
            logger.debug(
                "Transaction %s produced %d messages; using the first",
                source_tx_hash,
                len(messages),
            )
        return normalize_message(messages[0], self.chains)
