from __future__ import annotations

import pytest
from hexbytes import HexBytes

from pyusd_oft.abi import OFT_SENT_TOPIC
from pyusd_oft.errors import ApprovalFailed, InsufficientBalance, TransactionError, TransferFailed
from pyusd_oft.params import build_transfer_param
from pyusd_oft.workflow import TransferWorkflow

OWNER = "0x" + "0e" * 20
TOKEN = "0x" + "70" * 20
RECIPIENT = "0x" + "cd" * 20
GUID = bytes.fromhex("9a" * 32)


class RecordingClient:
    """Stub OFT client that records every read and write in order."""

    def __init__(self, *, balance: int = 500_000_000, allowance: int = 0) -> None:
        self.account_address = OWNER
        self.balance = balance
        self.current_allowance = allowance
        self.calls: list[str] = []
        self.fail_on: str | None = None

    def supports_token_accessor(self, oft_address):
        self.calls.append("accessor")
        return True

    def token(self, oft_address):
        self.calls.append("token")
        return TOKEN

    def balance_of(self, token_address, account):
        self.calls.append("balance")
        return self.balance

    def approval_required(self, oft_address):
        self.calls.append("approvalRequired")
        return True

    def allowance(self, token_address, owner, spender):
        self.calls.append("allowance")
        return self.current_allowance

    def approve(self, token_address, spender, amount):
        self.calls.append("approve")
        return "0xapprove"

    def quote_send(self, oft_address, send_param, pay_in_alt_token=False):
        self.calls.append("quoteSend")
        return 10**14, 0

    def quote_oft(self, oft_address, send_param):
        self.calls.append("quoteOFT")
        amount = send_param[2]
        return (0, 10**15), [], (amount, amount)

    def send(self, oft_address, send_param, fee, refund_address):
        self.calls.append("send")
        self.sent_fee = fee
        self.refund_address = refund_address
        return "0xsend"

    def wait_for_receipt(self, tx_hash):
        self.calls.append(f"wait:{tx_hash}")
        if self.fail_on == tx_hash:
            raise TransactionError(f"Transaction {tx_hash} reverted", tx_hash=tx_hash)
        if tx_hash == "0xapprove":
            self.current_allowance = 2**256 - 1
            return {"status": 1, "logs": []}
        return {
            "status": 1,
            "logs": [{"topics": [HexBytes(OFT_SENT_TOPIC), HexBytes(GUID)]}],
        }


@pytest.fixture
def param(registry):
    return build_transfer_param("100", "arbitrum", RECIPIENT, registry)


def _workflow(registry, client, messages=None):
    progress = messages.append if messages is not None else None
    return TransferWorkflow(client, registry.get("ethereum"), progress=progress)


def test_steps_run_in_order(registry, param) -> None:
    client = RecordingClient()
    messages: list[str] = []

    report = _workflow(registry, client, messages).run(param)

    assert client.calls == [
        "accessor",
        "token",
        "balance",
        "approvalRequired",
        "accessor",
        "token",
        "allowance",
        "approve",
        "wait:0xapprove",
        "quoteSend",
        "quoteOFT",
        "send",
        "wait:0xsend",
    ]
    assert report.transfer.tx_hash == "0xsend"
    assert report.transfer.tracking_id == GUID
    assert report.approval.approved is True
    assert report.token_address == TOKEN
    assert not report.dry_run
    assert client.sent_fee == (10**14, 0)
    assert client.refund_address.lower() == OWNER
    assert [m for m in messages if m.startswith("Step")] == [
        "Step 1/4: Checking balance...",
        "Step 2/4: Checking approval...",
        "Step 3/4: Getting quote...",
        "Step 4/4: Sending transaction...",
    ]
    assert "  Fee: 0.0001 ETH" in messages
    assert "  Will receive: 100 PYUSD" in messages


def test_insufficient_balance_stops_before_approval(registry, param) -> None:
    client = RecordingClient(balance=1_000_000)

    with pytest.raises(InsufficientBalance) as excinfo:
        _workflow(registry, client).run(param)

    assert excinfo.value.balance == 1_000_000
    assert excinfo.value.required == 100_000_000
    assert "have 1 PYUSD, need 100 PYUSD" in str(excinfo.value)
    assert "approve" not in client.calls
    assert "send" not in client.calls


def test_failed_approval_stops_before_quote_and_send(registry, param) -> None:
    client = RecordingClient()
    client.fail_on = "0xapprove"

    with pytest.raises(ApprovalFailed):
        _workflow(registry, client).run(param)

    assert "quoteSend" not in client.calls
    assert "send" not in client.calls


def test_failed_send_is_reported(registry, param) -> None:
    client = RecordingClient(allowance=10**9)
    client.fail_on = "0xsend"

    with pytest.raises(TransferFailed):
        _workflow(registry, client).run(param)

    assert "approve" not in client.calls


def test_existing_allowance_skips_approval(registry, param) -> None:
    client = RecordingClient(allowance=10**9)

    report = _workflow(registry, client).run(param)

    assert report.approval.approved is False
    assert "approve" not in client.calls


def test_dry_run_only_reads(registry, param) -> None:
    client = RecordingClient()
    messages: list[str] = []

    report = _workflow(registry, client, messages).run(param, dry_run=True)

    assert report.dry_run
    assert report.approval is None
    assert report.quote.receipt.amount_received == 100_000_000
    assert "approve" not in client.calls
    assert "approvalRequired" not in client.calls
    assert "send" not in client.calls
    assert "Step 4/4: Dry run (skipping send)" in messages


def test_explicit_refund_address(registry, param) -> None:
    client = RecordingClient(allowance=10**9)

    _workflow(registry, client).run(param, refund_address=RECIPIENT)

    assert client.refund_address.lower() == RECIPIENT


def test_quote_only_touches_quote_reads(registry, param) -> None:
    client = RecordingClient()

    quote = _workflow(registry, client).quote(param)

    assert client.calls == ["quoteSend", "quoteOFT"]
    assert quote.messaging_fee.native_fee == 10**14
