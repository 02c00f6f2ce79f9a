from __future__ import annotations

import pytest

from pyusd_oft.errors import OptionsDecodeError
from pyusd_oft.options import (
    OPTION_TYPE_LZRECEIVE,
    WORKER_ID_EXECUTOR,
    build_execution_options,
    decode_execution_options,
    format_options_human_readable,
)

DEFAULT_OPTIONS_HEX = "00030100110100000000000000000000000000030d40"


def test_default_gas_options_match_known_encoding() -> None:
    options = build_execution_options(200_000)

    assert len(options) == 22
    assert options.hex() == DEFAULT_OPTIONS_HEX


def test_build_execution_options_layout() -> None:
    options = build_execution_options(1)

    assert options[:2] == b"\x00\x03"
    assert options[2] == WORKER_ID_EXECUTOR
    assert options[3:5] == b"\x00\x11"
    assert options[5] == OPTION_TYPE_LZRECEIVE
    assert int.from_bytes(options[6:], "big") == 1


def test_zero_gas_is_encoded() -> None:
    assert int.from_bytes(build_execution_options(0)[6:], "big") == 0


@pytest.mark.parametrize("gas", [-1, 1 << 128])
def test_gas_outside_uint128_is_rejected(gas) -> None:
    with pytest.raises(ValueError):
        build_execution_options(gas)


def test_decode_reads_back_gas_limit() -> None:
    decoded = decode_execution_options("0x" + DEFAULT_OPTIONS_HEX)

    assert len(decoded) == 1
    assert decoded[0].is_lz_receive
    assert decoded[0].gas_limit == 200_000
    assert decoded[0].native_value == 0


def test_decode_reads_native_value_variant() -> None:
    option = bytes([1]) + (65_000).to_bytes(16, "big") + (5).to_bytes(16, "big")
    payload = b"\x00\x03" + b"\x01" + len(option).to_bytes(2, "big") + option

    decoded = decode_execution_options(payload)

    assert decoded[0].gas_limit == 65_000
    assert decoded[0].native_value == 5


def test_decode_keeps_unrecognised_worker_options() -> None:
    payload = bytes.fromhex(DEFAULT_OPTIONS_HEX) + b"\x02\x00\x02\x01\xff"

    decoded = decode_execution_options(payload)

    assert len(decoded) == 2
    assert decoded[1].worker_id == 2
    assert decoded[1].gas_limit is None
    assert decoded[1].payload == b"\xff"


@pytest.mark.parametrize(
    "payload",
    [
        "zz",
        "00",
        "0001" + DEFAULT_OPTIONS_HEX[4:],
        DEFAULT_OPTIONS_HEX[:-2],
        "0003" + "01",
        "0003" + "010000",
        "0003" + "010002" + "0100",
    ],
)
def test_decode_rejects_malformed_payloads(payload) -> None:
    with pytest.raises(OptionsDecodeError):
        decode_execution_options(payload)


def test_human_readable_rendering() -> None:
    text = format_options_human_readable(decode_execution_options(DEFAULT_OPTIONS_HEX))

    assert "lzReceive gas=200000" in text
    assert text.splitlines()[0] == "worker | type | detail"
