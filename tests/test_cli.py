from __future__ import annotations

import json
from pathlib import Path

import pytest

from pyusd_oft import cli
from pyusd_oft.model import DeliveryState, NormalizedStatus

PRIVATE_KEY = "0x" + "11" * 32
TOKEN = "0x" + "70" * 20


class StubChainClient:
    """Stands in for OFTChainClient; reads only."""

    instances: list["StubChainClient"] = []

    def __init__(self, chain, account_address=None) -> None:
        self.chain = chain
        self.account_address = account_address
        self.calls: list[str] = []

    @classmethod
    def from_config(cls, chain, config):
        address = cli.address_from_private_key(config.private_key) if config.private_key else None
        client = cls(chain, address)
        cls.instances.append(client)
        return client

    def supports_token_accessor(self, oft_address):
        return True

    def token(self, oft_address):
        return TOKEN

    def balance_of(self, token_address, account):
        self.calls.append("balance")
        return 250_500_000

    def quote_send(self, oft_address, send_param, pay_in_alt_token=False):
        self.calls.append("quoteSend")
        return 2 * 10**14, 0

    def quote_oft(self, oft_address, send_param):
        self.calls.append("quoteOFT")
        return (1, 10**12), [(0, "OFT fee")], (send_param[2], send_param[2])

    def approval_required(self, oft_address):  # pragma: no cover - dry runs skip approval
        raise AssertionError("dry run must not check approval")

    def send(self, *args):  # pragma: no cover - dry runs never send
        raise AssertionError("dry run must not send")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pyusd_oft.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
    for name in (
        "PYUSD_PRIVATE_KEY",
        "PYUSD_NETWORK",
        "TESTNET",
        "PYUSD_CHAINS_FILE",
        "PYUSD_SCAN_API_URL",
        "PYUSD_RECEIPT_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    StubChainClient.instances = []


@pytest.fixture
def stub_clients(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pyusd_oft.cli.OFTChainClient", StubChainClient)
    monkeypatch.setattr("pyusd_oft.workflow.OFTChainClient", StubChainClient)


def test_options_encode_prints_hex(capsys) -> None:
    cli.main(["options", "encode"])

    assert capsys.readouterr().out.strip() == "0x00030100110100000000000000000000000000030d40"


def test_options_decode_prints_gas(capsys) -> None:
    cli.main(["options", "decode", "0x00030100110100000000000000000000000000030d40"])

    assert "lzReceive gas=200000" in capsys.readouterr().out


def test_options_decode_error_exits_nonzero(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["options", "decode", "0x0001"])

    assert excinfo.value.code == 1
    assert "error:" in capsys.readouterr().err


def test_chains_list_table(chain_file: Path, capsys) -> None:
    cli.main(["--chains-file", str(chain_file), "chains", "list"])

    out = capsys.readouterr().out
    assert "Supported PYUSD Chains" in out
    assert "Ethereum" in out
    assert "30110" in out
    assert "Total: 2 chains" in out


def test_chains_list_json_testnet(chain_file: Path, capsys) -> None:
    cli.main(["--chains-file", str(chain_file), "--testnet", "chains", "list", "--format", "json"])

    payload = json.loads(capsys.readouterr().out)
    assert [entry["key"] for entry in payload] == ["ethereum-sepolia"]
    assert payload[0]["eid"] == 40161


def test_missing_chain_file_is_reported(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["chains", "list"])

    assert excinfo.value.code == 1
    assert "No chain file configured" in capsys.readouterr().err


def test_unknown_chain_is_reported(chain_file: Path, capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--chains-file", str(chain_file), "balance", "solana", "--address", TOKEN])

    assert 'Chain "solana" not supported' in capsys.readouterr().err


def test_balance_requires_address_or_key(chain_file: Path, capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--chains-file", str(chain_file), "balance", "ethereum"])

    assert "--address" in capsys.readouterr().err


def test_balance_prints_formatted_amount(chain_file: Path, stub_clients, capsys) -> None:
    cli.main(["--chains-file", str(chain_file), "balance", "ethereum", "--address", TOKEN])

    assert "Balance:  250.5 PYUSD" in capsys.readouterr().out


def test_quote_prints_fee_and_min_received(chain_file: Path, stub_clients, capsys) -> None:
    cli.main(
        [
            "--chains-file",
            str(chain_file),
            "quote",
            "ethereum",
            "arbitrum",
            "100",
            "--to",
            "0x" + "cd" * 20,
        ]
    )

    out = capsys.readouterr().out
    assert "LayerZero Fee:  0.0002 ETH" in out
    assert "Min Received:    99.5 PYUSD (0.5% slippage)" in out
    assert "Protocol Fee:   0 PYUSD (OFT fee)" in out


def test_send_requires_private_key(chain_file: Path, capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--chains-file", str(chain_file), "send", "ethereum", "arbitrum", "1"])

    assert "PYUSD_PRIVATE_KEY" in capsys.readouterr().err


def test_send_dry_run_skips_approval_and_send(
    chain_file: Path, stub_clients, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setenv("PYUSD_PRIVATE_KEY", PRIVATE_KEY)

    cli.main(["--chains-file", str(chain_file), "send", "ethereum", "arbitrum", "10", "--dry-run"])

    out = capsys.readouterr().out
    assert "Step 2/4: Dry run (skipping approval)" in out
    assert "Dry run complete" in out
    assert StubChainClient.instances[0].calls == ["balance", "quoteSend", "quoteOFT"]


def test_status_json(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    class StubStatusClient:
        @classmethod
        def from_config(cls, config, chains=None):
            return cls()

        def get_status(self, tx_hash):
            return NormalizedStatus(
                state=DeliveryState.CONFIRMING,
                message="Waiting for source chain confirmations",
                raw_status="CONFIRMING",
            )

    monkeypatch.setattr("pyusd_oft.cli.StatusClient", StubStatusClient)

    cli.main(["status", "0xabc", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["state"] == "CONFIRMING"
    assert payload["source"] is None
