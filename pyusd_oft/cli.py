"""Command line interface for PYUSD cross-chain transfers over LayerZero."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Sequence

from .balances import get_balance, resolve_underlying_token
from .chains import ChainRegistry, registry_from_config
from .codec import format_amount, format_native_fee, truncate_address
from .config import NetworkMode, TransferConfig, load_transfer_config
from .errors import ConfigurationError, OptionsDecodeError, TransferError
from .model import ChainConfig, QuoteResult
from .options import (
    DEFAULT_GAS_LIMIT,
    build_execution_options,
    decode_execution_options,
    format_options_human_readable,
)
from .params import DEFAULT_SLIPPAGE_PERCENT, build_transfer_param
from .rpc_client import OFTChainClient, address_from_private_key
from .status import StatusClient, scan_tx_url
from .workflow import TransferWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

RULE = "─" * 50
WIDE_RULE = "─" * 80


class CLIError(RuntimeError):
    """Raised when CLI arguments are invalid."""


def _add_transfer_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", help="Source chain (e.g. ethereum, arbitrum, polygon)")
    parser.add_argument("destination", help="Destination chain")
    parser.add_argument("amount", help="Amount of PYUSD to transfer")
    parser.add_argument(
        "--to",
        dest="recipient",
        default=None,
        help="Recipient address on the destination chain (defaults to the sender)",
    )
    parser.add_argument(
        "--slippage",
        default=DEFAULT_SLIPPAGE_PERCENT,
        help="Slippage tolerance in percent (default: %(default)s)",
    )
    parser.add_argument(
        "--gas",
        type=int,
        default=DEFAULT_GAS_LIMIT,
        help="Gas limit for lzReceive on the destination chain (default: %(default)s)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyusd-oft", description="PYUSD cross-chain transfers via LayerZero OFT"
    )
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--chains-file", default=None, help="Path to the YAML chain table")
    parser.add_argument(
        "--testnet", action="store_true", help="Use the testnet section of the chain table"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    chains_parser = subparsers.add_parser("chains", help="inspect configured chains")
    chains_sub = chains_parser.add_subparsers(dest="chains_command", required=True)
    list_parser = chains_sub.add_parser("list", help="list chains where the OFT is configured")
    list_parser.add_argument(
        "--format", "-f", choices=["table", "json"], default="table", help="Output format"
    )

    balance_parser = subparsers.add_parser("balance", help="show the PYUSD balance on a chain")
    balance_parser.add_argument("chain", help="Chain to check (e.g. ethereum)")
    balance_parser.add_argument(
        "--address",
        "-a",
        default=None,
        help="Address to check (defaults to the address of PYUSD_PRIVATE_KEY)",
    )

    quote_parser = subparsers.add_parser("quote", help="quote fees for a cross-chain transfer")
    _add_transfer_arguments(quote_parser)

    send_parser = subparsers.add_parser("send", help="execute a cross-chain transfer")
    _add_transfer_arguments(send_parser)
    send_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Check balance and quote without approving or sending",
    )

    status_parser = subparsers.add_parser(
        "status", help="show LayerZero delivery status for a source transaction"
    )
    status_parser.add_argument("tx_hash", help="Source chain transaction hash")
    status_parser.add_argument("--json", dest="as_json", action="store_true", help="Print JSON")

    options_parser = subparsers.add_parser("options", help="encode or decode executor options")
    options_sub = options_parser.add_subparsers(dest="options_command", required=True)
    encode_parser = options_sub.add_parser("encode", help="build lzReceive executor options")
    encode_parser.add_argument(
        "--gas", type=int, default=DEFAULT_GAS_LIMIT, help="Gas limit (default: %(default)s)"
    )
    decode_parser = options_sub.add_parser("decode", help="decode an executor options payload")
    decode_parser.add_argument("options_hex", help="Hex-encoded options (0x0003...)")

    return parser


def _load_config(args: argparse.Namespace) -> TransferConfig:
    overrides: dict[str, Any] = {}
    if args.chains_file:
        overrides["chains_file"] = args.chains_file
    if args.testnet:
        overrides["network"] = NetworkMode.TESTNET
    return load_transfer_config(config_path=args.config, overrides=overrides)


def _load_chains(config: TransferConfig) -> ChainRegistry:
    return registry_from_config(config)


def _default_address(config: TransferConfig, flag: str) -> str:
    if not config.private_key:
        raise CLIError(f"Either {flag} or the PYUSD_PRIVATE_KEY environment variable is required")
    return address_from_private_key(config.private_key)


def _print_quote(
    source: ChainConfig,
    destination: ChainConfig,
    recipient: str,
    amount: str,
    slippage: str,
    min_amount: int,
    quote: QuoteResult,
) -> None:
    symbol = source.native_currency.symbol
    print("")
    print("PYUSD Transfer Quote")
    print(RULE)
    print(f"Source:         {source.name} (EID: {source.eid})")
    print(f"Destination:    {destination.name} (EID: {destination.eid})")
    print(f"Recipient:      {recipient}")
    print(f"Amount:         {amount} PYUSD")
    print("")
    print("Fees")
    print(RULE)
    print(f"LayerZero Fee:  {format_native_fee(quote.messaging_fee.native_fee, symbol)}")
    for detail in quote.fee_details:
        print(f"Protocol Fee:   {format_amount(detail.amount)} PYUSD ({detail.description})")
    print("")
    print("Amounts")
    print(RULE)
    print(f"Amount Sent:     {format_amount(quote.receipt.amount_sent)} PYUSD")
    print(f"Amount Received: {format_amount(quote.receipt.amount_received)} PYUSD")
    print(f"Min Received:    {format_amount(min_amount)} PYUSD ({slippage}% slippage)")
    print("")
    print("Limits")
    print(RULE)
    print(f"Min Transfer:   {format_amount(quote.limit.min_amount)} PYUSD")
    print(f"Max Transfer:   {format_amount(quote.limit.max_amount)} PYUSD")
    print("")


def cmd_chains_list(args: argparse.Namespace) -> None:
    chains = _load_chains(_load_config(args))
    if args.format == "json":
        print(json.dumps([chain.to_jsonable() for chain in chains.all()], indent=2))
        return

    print("")
    print("Supported PYUSD Chains")
    print(WIDE_RULE)
    print(f"{'Chain':<15} {'EID':<8} {'Chain ID':<10} {'PYUSD OFT Address':<44}")
    print(WIDE_RULE)
    for chain in chains.all():
        print(f"{chain.name:<15} {chain.eid:<8} {chain.chain_id:<10} {chain.oft_address}")
    print("")
    print(f"Total: {len(chains)} chains")
    print("")


def cmd_balance(args: argparse.Namespace) -> None:
    config = _load_config(args)
    chain = _load_chains(config).get(args.chain)
    address = args.address or _default_address(config, "--address")
    client = OFTChainClient.from_config(chain, config)

    print("")
    print(f"Checking PYUSD balance on {chain.name}...")
    print("")
    token_address = resolve_underlying_token(client, chain.oft_address)
    balance = get_balance(client, token_address, address)
    print(f"Address:  {address}")
    print(f"Chain:    {chain.name} (EID: {chain.eid})")
    print(f"Balance:  {format_amount(balance)} PYUSD")
    print("")


def cmd_quote(args: argparse.Namespace) -> None:
    config = _load_config(args)
    chains = _load_chains(config)
    source = chains.get(args.source)
    destination = chains.get(args.destination)
    recipient = args.recipient or _default_address(config, "--to")
    param = build_transfer_param(
        args.amount,
        destination.key,
        recipient,
        chains,
        slippage_percent=args.slippage,
        gas_limit=args.gas,
    )

    workflow = TransferWorkflow(OFTChainClient.from_config(source, config), source)
    quote = workflow.quote(param)
    _print_quote(source, destination, recipient, args.amount, args.slippage, param.min_amount, quote)


def cmd_send(args: argparse.Namespace) -> None:
    config = _load_config(args)
    if not config.private_key:
        raise CLIError("PYUSD_PRIVATE_KEY environment variable is required for sending")
    chains = _load_chains(config)
    source = chains.get(args.source)
    destination = chains.get(args.destination)
    sender = address_from_private_key(config.private_key)
    recipient = args.recipient or sender
    param = build_transfer_param(
        args.amount,
        destination.key,
        recipient,
        chains,
        slippage_percent=args.slippage,
        gas_limit=args.gas,
    )

    print("")
    print("PYUSD Cross-Chain Transfer")
    print(RULE)
    print(f"From:       {source.name} → {destination.name}")
    print(f"Sender:     {truncate_address(sender)}")
    print(f"Recipient:  {truncate_address(recipient)}")
    print(f"Amount:     {args.amount} PYUSD")
    print("")

    workflow = TransferWorkflow.from_config(config, chains, source.key, progress=print)
    report = workflow.run(param, dry_run=args.dry_run)
    print("")

    if report.transfer is None:
        print(RULE)
        print("Dry run complete. Remove --dry-run to execute.")
        print("")
        return

    tx_hash = report.transfer.tx_hash
    print("Results")
    print(RULE)
    print(f"TX Hash:      {tx_hash}")
    print(f"Explorer:     {source.explorer_tx_url(tx_hash)}")
    if report.transfer.has_tracking_id:
        print(f"GUID:         {report.transfer.tracking_id_hex}")
        print(f"LayerZero:    {scan_tx_url(tx_hash, config.network_mode)}")
    print("")
    print(f"Status: Pending (run `pyusd-oft status {tx_hash}` to follow delivery)")
    print("")


def cmd_status(args: argparse.Namespace) -> None:
    config = _load_config(args)
    chains: ChainRegistry | None = None
    if config.chains_file is not None:
        chains = _load_chains(config)
    status = StatusClient.from_config(config, chains).get_status(args.tx_hash)
    if args.as_json:
        print(json.dumps(status.to_jsonable(), indent=2))
        return

    print("")
    print(f"Status:       {status.state.value}")
    print(f"Message:      {status.message}")
    if status.tracking_id:
        print(f"GUID:         {status.tracking_id}")
    for label, side in (("Source", status.source), ("Destination", status.destination)):
        if side is None:
            continue
        when = side.timestamp.isoformat() if side.timestamp else "unknown time"
        print(f"{label + ':':<13} {side.chain} {side.tx_hash} ({when})")
    print(f"LayerZero:    {scan_tx_url(args.tx_hash, config.network_mode)}")
    print("")


def cmd_options_encode(args: argparse.Namespace) -> None:
    print("0x" + build_execution_options(args.gas).hex())


def cmd_options_decode(args: argparse.Namespace) -> None:
    print(format_options_human_readable(decode_execution_options(args.options_hex)))


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        if args.command == "chains":
            cmd_chains_list(args)
        elif args.command == "balance":
            cmd_balance(args)
        elif args.command == "quote":
            cmd_quote(args)
        elif args.command == "send":
            cmd_send(args)
        elif args.command == "status":
            cmd_status(args)
        elif args.command == "options" and args.options_command == "encode":
            cmd_options_encode(args)
        elif args.command == "options":
            cmd_options_decode(args)
        else:  # pragma: no cover - argparse enforces choices
            raise CLIError(f"Unknown command: {args.command}")
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        logger.info("Interrupted by user")
    except (
        CLIError,
        ConfigurationError,
        TransferError,
        OptionsDecodeError,
        ValueError,
    ) as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
