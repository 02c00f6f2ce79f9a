"""Domain models for PYUSD OFT transfers.

Everything here is an immutable value: chain descriptors are loaded once per
process, transfer parameters are built fresh for each quote or send, and
quote, transfer, and status results describe a single remote round-trip.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple

WIRE_SIZE = 32
EMPTY_TRACKING_ID = b""


@dataclass(frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


@dataclass(frozen=True)
class ChainConfig:
    """Static descriptor of a chain where the OFT is deployed."""

    key: str
    name: str
    chain_id: int
    eid: int
    oft_address: str
    rpc_url: str
    block_explorer: str
    native_currency: NativeCurrency

    def explorer_tx_url(self, tx_hash: str) -> str:
        return f"{self.block_explorer.rstrip('/')}/tx/{tx_hash}"

    def to_jsonable(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "chainId": self.chain_id,
            "eid": self.eid,
            "oftAddress": self.oft_address,
            "rpcUrl": self.rpc_url,
            "blockExplorer": self.block_explorer,
            "nativeCurrency": {
                "name": self.native_currency.name,
                "symbol": self.native_currency.symbol,
                "decimals": self.native_currency.decimals,
            },
        }


@dataclass(frozen=True)
class TransferParam:
    """The ``SendParam`` struct passed to ``quoteSend``, ``quoteOFT`` and ``send``."""

    amount: int
    min_amount: int
    destination_id: int
    recipient: bytes
    execution_options: bytes
    compose_message: bytes = b""
    custom_command: bytes = b""

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"amount must be positive, got {self.amount}")
        if not 0 <= self.min_amount <= self.amount:
            raise ValueError(
                f"min_amount {self.min_amount} must be between 0 and amount {self.amount}"
            )
        if len(self.recipient) != WIRE_SIZE:
            raise ValueError(f"recipient must be {WIRE_SIZE} bytes, got {len(self.recipient)}")

    def as_abi_tuple(self) -> Tuple[int, bytes, int, int, bytes, bytes, bytes]:
        """Return the struct in ABI field order (dstEid, to, amountLD, ...)."""

        return (
            self.destination_id,
            self.recipient,
            self.amount,
            self.min_amount,
            self.execution_options,
            self.compose_message,
            self.custom_command,
        )


@dataclass(frozen=True)
class MessagingFee:
    native_fee: int
    alt_fee: int = 0

    def as_abi_tuple(self) -> Tuple[int, int]:
        return (self.native_fee, self.alt_fee)


@dataclass(frozen=True)
class OFTLimit:
    min_amount: int
    max_amount: int


@dataclass(frozen=True)
class OFTFeeDetail:
    description: str
    amount: int


@dataclass(frozen=True)
class OFTReceipt:
    amount_sent: int
    amount_received: int


@dataclass(frozen=True)
class QuoteResult:
    """Fee and receipt preview for one ``TransferParam``; never cached."""

    messaging_fee: MessagingFee
    limit: OFTLimit
    fee_details: Tuple[OFTFeeDetail, ...]
    receipt: OFTReceipt


@dataclass(frozen=True)
class ApprovalResult:
    approved: bool
    tx_hash: Optional[str] = None


@dataclass(frozen=True)
class TransferResult:
    tx_hash: str
    tracking_id: bytes = EMPTY_TRACKING_ID

    @property
    def has_tracking_id(self) -> bool:
        return self.tracking_id != EMPTY_TRACKING_ID

    @property
    def tracking_id_hex(self) -> str:
        return "0x" + self.tracking_id.hex()


class DeliveryState(str, Enum):
    PENDING = "PENDING"
    CONFIRMING = "CONFIRMING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    BLOCKED = "BLOCKED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ChainEvent:
    """One side (source or destination) of a cross-chain message."""

    chain: str
    tx_hash: Optional[str]
    timestamp: Optional[datetime]

    def to_jsonable(self) -> dict[str, Any]:
        return {
            "chain": self.chain,
            "txHash": self.tx_hash,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class NormalizedStatus:
    state: DeliveryState
    message: str
    tracking_id: Optional[str] = None
    source: Optional[ChainEvent] = None
    destination: Optional[ChainEvent] = None
    raw_status: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_jsonable(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "message": self.message,
            "trackingId": self.tracking_id,
            "rawStatus": self.raw_status,
            "source": self.source.to_jsonable() if self.source else None,
            "destination": self.destination.to_jsonable() if self.destination else None,
        }
