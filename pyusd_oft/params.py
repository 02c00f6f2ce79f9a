"""Assemble ``SendParam`` values from user input."""

from __future__ import annotations

from decimal import Decimal

from .chains import ChainRegistry
from .codec import address_to_wire, compute_min_amount, parse_amount
from .errors import InvalidAmount
from .model import TransferParam
from .options import DEFAULT_GAS_LIMIT, build_execution_options

DEFAULT_SLIPPAGE_PERCENT = "0.5"


def build_transfer_param(
    amount: str,
    destination_chain_key: str,
    recipient_address: str,
    chains: ChainRegistry,
    *,
    slippage_percent: str | float | Decimal = DEFAULT_SLIPPAGE_PERCENT,
    gas_limit: int = DEFAULT_GAS_LIMIT,
) -> TransferParam:
    """Return the transfer descriptor for a simple (non-compose) OFT send.

    Pure with respect to its inputs and the chain table: nothing is read from
    the network.
    """

    destination = chains.get(destination_chain_key)
    amount_ld = parse_amount(amount)
    if amount_ld <= 0:
        raise InvalidAmount(f"amount must be greater than zero, got {amount}")
    min_amount_ld = compute_min_amount(amount_ld, slippage_percent)

    return TransferParam(
        amount=amount_ld,
        min_amount=min_amount_ld,
        destination_id=destination.eid,
        recipient=address_to_wire(recipient_address),
        execution_options=build_execution_options(gas_limit),
    )
