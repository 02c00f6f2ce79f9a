"""Executor options payloads for LayerZero V2 sends.

The options blob tells the destination executor how much gas to forward to
``lzReceive``. Only the type-3 layout is produced here::

    options-version (2) | worker-id (1) | option-length (2) | option-type (1) | gas (16)

All integers are big-endian and unsigned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from hexbytes import HexBytes

from .errors import OptionsDecodeError

OPTIONS_TYPE_3 = 3
WORKER_ID_EXECUTOR = 1
OPTION_TYPE_LZRECEIVE = 1
DEFAULT_GAS_LIMIT = 200_000

_GAS_BYTES = 16
_VALUE_BYTES = 16


@dataclass(frozen=True)
class ExecutorOption:
    """A single worker option block carried by a type-3 payload."""

    worker_id: int
    option_type: int
    payload: bytes

    @property
    def is_lz_receive(self) -> bool:
        return (
            self.worker_id == WORKER_ID_EXECUTOR
            and self.option_type == OPTION_TYPE_LZRECEIVE
        )

    @property
    def gas_limit(self) -> int | None:
        if not self.is_lz_receive:
            return None
        return int.from_bytes(self.payload[:_GAS_BYTES], "big")

    @property
    def native_value(self) -> int:
        if not self.is_lz_receive or len(self.payload) <= _GAS_BYTES:
            return 0
        return int.from_bytes(self.payload[_GAS_BYTES:], "big")


def build_execution_options(gas_limit: int = DEFAULT_GAS_LIMIT) -> bytes:
    """Return the 22-byte executor options granting ``gas_limit`` to lzReceive.

    No upper bound is enforced; the destination chain applies its own limits.
    """

    if gas_limit < 0:
        raise ValueError(f"gas limit must not be negative, got {gas_limit}")
    if gas_limit >= 1 << (8 * _GAS_BYTES):
        raise ValueError(f"gas limit {gas_limit} does not fit in {_GAS_BYTES} bytes")

    option = OPTION_TYPE_LZRECEIVE.to_bytes(1, "big") + gas_limit.to_bytes(_GAS_BYTES, "big")
    return (
        OPTIONS_TYPE_3.to_bytes(2, "big")
        + WORKER_ID_EXECUTOR.to_bytes(1, "big")
        + len(option).to_bytes(2, "big")
        + option
    )


def decode_execution_options(options: bytes | str) -> List[ExecutorOption]:
    """Parse a type-3 options payload into its worker option blocks.

    ``options`` may be raw bytes or a hex string. Every block must be complete
    and carry at least its option-type byte.
    """

    try:
        data = bytes(HexBytes(options))
    except ValueError as exc:
        raise OptionsDecodeError(f"options are not valid hex: {options!r}") from exc

    if len(data) < 2:
        raise OptionsDecodeError("options payload is too short to carry a version")
    version = int.from_bytes(data[:2], "big")
    if version != OPTIONS_TYPE_3:
        raise OptionsDecodeError(f"unsupported options version {version}")

    decoded: List[ExecutorOption] = []
    cursor = 2
    while cursor < len(data):
        if cursor + 3 > len(data):
            raise OptionsDecodeError(f"truncated option header at byte {cursor}")
        worker_id = data[cursor]
        size = int.from_bytes(data[cursor + 1 : cursor + 3], "big")
        cursor += 3
        if size < 1:
            raise OptionsDecodeError(f"option at byte {cursor - 3} has no option type")
        if cursor + size > len(data):
            raise OptionsDecodeError(
                f"option at byte {cursor - 3} declares {size} bytes, "
                f"only {len(data) - cursor} remain"
            )
        block = data[cursor : cursor + size]
        cursor += size

        option = ExecutorOption(worker_id=worker_id, option_type=block[0], payload=block[1:])
        if option.is_lz_receive and len(option.payload) not in (
            _GAS_BYTES,
            _GAS_BYTES + _VALUE_BYTES,
        ):
            raise OptionsDecodeError(
                f"lzReceive option carries {len(option.payload)} bytes, "
                f"expected {_GAS_BYTES} or {_GAS_BYTES + _VALUE_BYTES}"
            )
        decoded.append(option)
    return decoded


def format_options_human_readable(options: List[ExecutorOption]) -> str:
    """Render decoded options as one line per worker option."""

    lines = ["worker | type | detail"]
    for option in options:
        if option.is_lz_receive:
            detail = f"lzReceive gas={option.gas_limit}"
            if option.native_value:
                detail += f" value={option.native_value}"
        else:
            detail = f"payload=0x{option.payload.hex()}"
        lines.append(f"{option.worker_id} | {option.option_type} | {detail}")
    return "\n".join(lines)
