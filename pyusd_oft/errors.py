"""Error taxonomy shared by the PYUSD OFT transfer helpers."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration or the chain table is invalid."""


class TransferError(RuntimeError):
    """Base class for failures raised by the transfer workflow."""


class InvalidAmount(TransferError, ValueError):
    """Raised when a human amount or slippage value cannot be used."""


class InvalidAddress(TransferError, ValueError):
    """Raised when an address or its 32-byte wire form is malformed."""


class UnknownChain(TransferError):
    """Raised when a chain key or endpoint id is not configured."""

    def __init__(self, key: str, supported: list[str] | None = None) -> None:
        self.key = key
        self.supported = list(supported or [])
        message = f'Chain "{key}" not supported'
        if self.supported:
            message += f". Supported chains: {', '.join(self.supported)}"
        super().__init__(message)


class InsufficientBalance(TransferError):
    """Raised when the sender cannot cover the requested amount."""

    def __init__(self, balance: int, required: int, message: str) -> None:
        super().__init__(message)
        self.balance = balance
        self.required = required


class RemoteReadFailure(TransferError):
    """Raised when a chain read or indexer query fails."""


class TransactionError(RuntimeError):
    """Raised when a signed transaction fails to submit, confirm, or execute."""

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class ApprovalFailed(TransferError):
    """Raised when the spending approval could not be committed on-chain."""


class TransferFailed(TransferError):
    """Raised when the cross-chain send transaction failed."""


class TrackingIdentifierMissing(UserWarning):
    """Emitted when a confirmed send carries no ``OFTSent`` event."""


class OptionsDecodeError(ValueError):
    """Raised when an execution-options payload cannot be parsed."""
