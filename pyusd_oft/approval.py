"""Spending approval for OFT adapters."""

from __future__ import annotations

import logging
from typing import Any

from .abi import MAX_UINT256
from .balances import get_allowance, resolve_underlying_token
from .errors import ApprovalFailed, TransactionError
from .model import ApprovalResult

logger = logging.getLogger(__name__)


def ensure_approval(client: Any, oft_address: str, amount: int) -> ApprovalResult:
    """Make sure ``oft_address`` may pull ``amount`` from the signer.

    An approval transaction is only submitted when the current allowance is
    provably below ``amount``. When one is needed the allowance is set to
    ``MAX_UINT256`` so later transfers skip this step, which leaves the OFT
    with an unlimited allowance over the signer's tokens.

    The function returns only after the approval is confirmed on-chain, so
    a following send never races it.
    """

    if not client.approval_required(oft_address):
        logger.debug("OFT %s does not require approval", oft_address)
        return ApprovalResult(approved=False)

    token_address = resolve_underlying_token(client, oft_address)
    owner = client.account_address
    current = get_allowance(client, token_address, owner, oft_address)
    if current >= amount:
        logger.info("Existing allowance %d covers %d; no approval needed", current, amount)
        return ApprovalResult(approved=False)

    logger.info(
        "Allowance %d below %d; approving %s to spend %s", current, amount, oft_address, token_address
    )
    try:
        tx_hash = client.approve(token_address, oft_address, MAX_UINT256)
        client.wait_for_receipt(tx_hash)
    except TransactionError as exc:
        raise ApprovalFailed(f"Approval failed: {exc}") from exc

    return ApprovalResult(approved=True, tx_hash=tx_hash)
