"""Amount and address conversions for PYUSD OFT transfers.

Human amounts are decimal strings; on-chain amounts are integers scaled by the
token's local decimals. Addresses travel across the messaging layer as 32-byte
values, with EVM addresses left-padded by twelve zero bytes.
"""

from __future__ import annotations

import re
from decimal import ROUND_DOWN, ROUND_FLOOR, Decimal, InvalidOperation

from hexbytes import HexBytes
from web3 import Web3

from .abi import MAX_UINT256
from .errors import InvalidAddress, InvalidAmount

PYUSD_DECIMALS = 6
NATIVE_DECIMALS = 18
BPS_DENOMINATOR = 10_000
WIRE_ADDRESS_SIZE = 32
EVM_ADDRESS_SIZE = 20

_AMOUNT_PATTERN = re.compile(r"^(\d+(\.\d*)?|\.\d+)$")


def parse_amount(value: str, decimals: int = PYUSD_DECIMALS) -> int:
    """Return ``value`` as an integer scaled by ``decimals``.

    Only plain, non-negative decimal notation is accepted. Inputs carrying
    more fractional digits than the token supports are rejected rather than
    rounded, as are amounts that do not fit in a uint256.
    """

    raw = str(value).strip()
    if not _AMOUNT_PATTERN.match(raw):
        raise InvalidAmount(f"invalid amount: {value!r}")

    whole, _, fraction = raw.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InvalidAmount(
            f"amount {value} has more than {decimals} decimal places"
        )
    amount = int(whole or "0") * 10 ** decimals + int(fraction.ljust(decimals, "0") or "0")
    if amount > MAX_UINT256:
        raise InvalidAmount(f"amount {value} exceeds the uint256 range")
    return amount


def format_amount(amount: int, decimals: int = PYUSD_DECIMALS) -> str:
    """Render a scaled integer as its shortest decimal string."""

    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(int(amount)), 10 ** decimals)
    if decimals == 0 or fraction == 0:
        return f"{sign}{whole}"
    digits = f"{fraction:0{decimals}d}".rstrip("0")
    return f"{sign}{whole}.{digits}"


def slippage_to_bps(slippage_percent: str | float | Decimal) -> int:
    """Convert a percent value to whole basis points, truncating toward zero."""

    try:
        percent = Decimal(str(slippage_percent).strip())
    except InvalidOperation as exc:
        raise InvalidAmount(f"invalid slippage: {slippage_percent!r}") from exc
    if not percent.is_finite() or percent < 0 or percent > 100:
        raise InvalidAmount(
            f"slippage must be between 0 and 100 percent, got {slippage_percent}"
        )
    return int((percent * 100).to_integral_value(rounding=ROUND_FLOOR))


def compute_min_amount(amount: int, slippage_percent: str | float | Decimal) -> int:
    """Return the smallest receivable amount tolerated for ``slippage_percent``."""

    if amount < 0:
        raise InvalidAmount(f"amount must not be negative, got {amount}")
    bps = slippage_to_bps(slippage_percent)
    return amount - (amount * bps) // BPS_DENOMINATOR


def _address_bytes(address: str | bytes) -> bytes:
    if isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
    else:
        if not Web3.is_address(address):
            raise InvalidAddress(f"invalid EVM address: {address!r}")
        raw = bytes(HexBytes(address))
    if len(raw) != EVM_ADDRESS_SIZE:
        raise InvalidAddress(
            f"expected a {EVM_ADDRESS_SIZE}-byte address, got {len(raw)} bytes"
        )
    return raw


def to_checksum(address: str | bytes) -> str:
    """Return the EIP-55 form of ``address``."""

    return Web3.to_checksum_address(_address_bytes(address))


def address_to_wire(address: str | bytes) -> bytes:
    """Left-pad a 20-byte address to the 32-byte cross-chain form."""

    return _address_bytes(address).rjust(WIRE_ADDRESS_SIZE, b"\x00")


def wire_to_address(value: str | bytes) -> str:
    """Recover a checksummed EVM address from its 32-byte wire form.

    Wire values whose leading twelve bytes are not zero belong to non-EVM
    address spaces and are rejected.
    """

    try:
        raw = bytes(HexBytes(value))
    except ValueError as exc:
        raise InvalidAddress(f"invalid wire address: {value!r}") from exc
    if len(raw) != WIRE_ADDRESS_SIZE:
        raise InvalidAddress(
            f"expected a {WIRE_ADDRESS_SIZE}-byte value, got {len(raw)} bytes"
        )
    prefix = raw[: WIRE_ADDRESS_SIZE - EVM_ADDRESS_SIZE]
    if any(prefix):
        raise InvalidAddress("wire address is not a left-padded EVM address")
    return Web3.to_checksum_address(raw[-EVM_ADDRESS_SIZE:])


def format_native_fee(fee_wei: int, symbol: str) -> str:
    """Render a native-currency amount with at most six decimals."""

    value = Decimal(int(fee_wei)).scaleb(-NATIVE_DECIMALS)
    rounded = value.quantize(Decimal("0.000001"), rounding=ROUND_DOWN)
    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {symbol}"


def truncate_address(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"
