"""Sequenced balance, approval, quote, and send workflow for one transfer.

Steps run strictly in order and each one gates the next: any exception stops
the workflow and nothing after the failing step executes. Confirmed approvals
and sends are never rolled back or resubmitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .approval import ensure_approval
from .balances import get_balance, resolve_underlying_token
from .chains import ChainRegistry
from .codec import format_amount, format_native_fee
from .config import TransferConfig
from .errors import InsufficientBalance
from .executor import execute_transfer
from .model import ApprovalResult, ChainConfig, QuoteResult, TransferParam, TransferResult
from .quote import get_quote
from .rpc_client import OFTChainClient

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
TOTAL_STEPS = 4


@dataclass
class WorkflowReport:
    """What each step of a transfer produced."""

    source: ChainConfig
    param: TransferParam
    sender: str
    token_address: str
    balance: int
    quote: QuoteResult
    approval: Optional[ApprovalResult] = None
    transfer: Optional[TransferResult] = None

    @property
    def dry_run(self) -> bool:
        return self.transfer is None


def _log_progress(message: str) -> None:
    logger.info(message)


class TransferWorkflow:
    """Run a transfer from ``source`` using ``client`` as the signer."""

    def __init__(
        self,
        client: Any,
        source: ChainConfig,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.client = client
        self.source = source
        self._progress = progress or _log_progress

    @classmethod
    def from_config(
        cls,
        config: TransferConfig,
        chains: ChainRegistry,
        source_key: str,
        *,
        progress: ProgressCallback | None = None,
    ) -> "TransferWorkflow":
        source = chains.get(source_key)
        return cls(OFTChainClient.from_config(source, config), source, progress=progress)

    def _step(self, index: int, message: str) -> None:
        self._progress(f"Step {index}/{TOTAL_STEPS}: {message}")

    def quote(self, param: TransferParam) -> QuoteResult:
        """Quote ``param`` without touching balances or allowances."""

        return get_quote(self.client, self.source.oft_address, param)

    def run(
        self,
        param: TransferParam,
        *,
        dry_run: bool = False,
        refund_address: str | None = None,
    ) -> WorkflowReport:
        """Check balance, ensure approval, quote, then send ``param``.

        With ``dry_run`` only the read-only steps execute: the approval is
        neither checked nor submitted and nothing is sent.
        """

        oft_address = self.source.oft_address
        sender = self.client.account_address

        self._step(1, "Checking balance...")
        token_address = resolve_underlying_token(self.client, oft_address)
        balance = get_balance(self.client, token_address, sender)
        if balance < param.amount:
            raise InsufficientBalance(
                balance,
                param.amount,
                f"Insufficient balance: have {format_amount(balance)} PYUSD, "
                f"need {format_amount(param.amount)} PYUSD",
            )
        self._progress(f"  Balance: {format_amount(balance)} PYUSD")

        approval: ApprovalResult | None = None
        if dry_run:
            self._step(2, "Dry run (skipping approval)")
        else:
            self._step(2, "Checking approval...")
            approval = ensure_approval(self.client, oft_address, param.amount)
            if approval.approved:
                self._progress(f"  Approved (tx: {approval.tx_hash})")
            else:
                self._progress("  Sufficient allowance (no approval needed)")

        self._step(3, "Getting quote...")
        quote = get_quote(self.client, oft_address, param)
        self._progress(
            "  Fee: "
            + format_native_fee(quote.messaging_fee.native_fee, self.source.native_currency.symbol)
        )
        self._progress(
            f"  Will receive: {format_amount(quote.receipt.amount_received)} PYUSD"
        )

        report = WorkflowReport(
            source=self.source,
            param=param,
            sender=sender,
            token_address=token_address,
            balance=balance,
            quote=quote,
            approval=approval,
        )
        if dry_run:
            self._step(4, "Dry run (skipping send)")
            return report

        self._step(4, "Sending transaction...")
        report.transfer = execute_transfer(
            self.client,
            oft_address,
            param,
            quote.messaging_fee,
            refund_address or sender,
        )
        self._progress(f"  Transaction sent: {report.transfer.tx_hash}")
        return report
