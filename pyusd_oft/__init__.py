"""PYUSD cross-chain transfers over LayerZero OFT."""

from .approval import ensure_approval
from .balances import get_allowance, get_balance, is_adapter, resolve_underlying_token
from .chains import ChainRegistry, load_chain_registry, registry_from_config
from .codec import (
    PYUSD_DECIMALS,
    address_to_wire,
    compute_min_amount,
    format_amount,
    parse_amount,
    wire_to_address,
)
from .config import NetworkMode, TransferConfig, load_transfer_config
from .errors import (
    ApprovalFailed,
    ConfigurationError,
    InsufficientBalance,
    InvalidAddress,
    InvalidAmount,
    RemoteReadFailure,
    TrackingIdentifierMissing,
    TransferError,
    TransferFailed,
    UnknownChain,
)
from .executor import execute_transfer, extract_tracking_id
from .model import (
    ApprovalResult,
    ChainConfig,
    DeliveryState,
    MessagingFee,
    NormalizedStatus,
    QuoteResult,
    TransferParam,
    TransferResult,
)
from .options import DEFAULT_GAS_LIMIT, build_execution_options, decode_execution_options
from .params import build_transfer_param
from .quote import get_quote
from .status import StatusClient
from .workflow import TransferWorkflow, WorkflowReport

__all__ = [
    "ApprovalFailed",
    "ApprovalResult",
    "ChainConfig",
    "ChainRegistry",
    "ConfigurationError",
    "DEFAULT_GAS_LIMIT",
    "DeliveryState",
    "InsufficientBalance",
    "InvalidAddress",
    "InvalidAmount",
    "MessagingFee",
    "NetworkMode",
    "NormalizedStatus",
    "PYUSD_DECIMALS",
    "QuoteResult",
    "RemoteReadFailure",
    "StatusClient",
    "TrackingIdentifierMissing",
    "TransferConfig",
    "TransferError",
    "TransferFailed",
    "TransferParam",
    "TransferResult",
    "TransferWorkflow",
    "UnknownChain",
    "WorkflowReport",
    "address_to_wire",
    "build_execution_options",
    "build_transfer_param",
    "compute_min_amount",
    "decode_execution_options",
    "ensure_approval",
    "execute_transfer",
    "extract_tracking_id",
    "format_amount",
    "get_allowance",
    "get_balance",
    "get_quote",
    "is_adapter",
    "load_chain_registry",
    "load_transfer_config",
    "parse_amount",
    "registry_from_config",
    "resolve_underlying_token",
    "wire_to_address",
]
