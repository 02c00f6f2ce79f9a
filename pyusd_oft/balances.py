"""Token balance and allowance reads for OFT deployments."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def is_adapter(client: Any, oft_address: str) -> bool:
    """Return whether ``oft_address`` exposes an underlying-token accessor."""

    return bool(client.supports_token_accessor(oft_address))


def resolve_underlying_token(client: Any, oft_address: str) -> str:
    """Return the ERC-20 the OFT moves.

    Contracts without a ``token()`` accessor are the token themselves (for
    example a bare ERC-20 on a test network).
    """

    if is_adapter(client, oft_address):
        token_address = client.token(oft_address)
        logger.debug("OFT %s wraps token %s", oft_address, token_address)
        return token_address

    logger.debug("OFT %s has no token() accessor; treating it as the token", oft_address)
    return oft_address


def get_balance(client: Any, token_address: str, account: str) -> int:
    return client.balance_of(token_address, account)


def get_allowance(client: Any, token_address: str, owner: str, spender: str) -> int:
    return client.allowance(token_address, owner, spender)
