"""Chain table loading and lookup.

Chain files are YAML documents with one mapping per network mode::

    mainnet:
      ethereum:
        name: Ethereum
        chain_id: 1
        eid: 30101
        oft_address: "0x..."
        rpc_url: https://...
        block_explorer: https://etherscan.io
        native_currency: {name: Ether, symbol: ETH, decimals: 18}
    testnet:
      ...

The table is loaded once per process and never mutated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

import yaml
from web3 import Web3

from .config import NetworkMode, TransferConfig
from .errors import ConfigurationError, UnknownChain
from .model import ChainConfig, NativeCurrency

logger = logging.getLogger(__name__)


class ChainRegistry:
    """Case-insensitive lookup of :class:`ChainConfig` by key or endpoint id."""

    def __init__(self, chains: list[ChainConfig], network_mode: NetworkMode) -> None:
        self.network_mode = network_mode
        self._chains: dict[str, ChainConfig] = {}
        self._by_eid: dict[int, ChainConfig] = {}
        for chain in chains:
            key = chain.key.lower()
            if key in self._chains:
                raise ConfigurationError(f"Duplicate chain key: {chain.key}")
            if chain.eid in self._by_eid:
                raise ConfigurationError(
                    f"Chains {self._by_eid[chain.eid].key} and {chain.key} share eid {chain.eid}"
                )
            self._chains[key] = chain
            self._by_eid[chain.eid] = chain

    def __iter__(self) -> Iterator[ChainConfig]:
        return iter(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._chains

    def keys(self) -> list[str]:
        return list(self._chains)

    def all(self) -> list[ChainConfig]:
        return list(self._chains.values())

    def get(self, key: str) -> ChainConfig:
        chain = self._chains.get(key.strip().lower())
        if chain is None:
            raise UnknownChain(key, self.keys())
        return chain

    def by_eid(self, eid: int) -> ChainConfig | None:
        return self._by_eid.get(int(eid))

    def label_for_eid(self, eid: Any) -> str:
        try:
            chain = self.by_eid(int(eid))
        except (TypeError, ValueError):
            chain = None
        return chain.key if chain is not None else f"eid:{eid}"


def _require_str(data: Mapping[str, Any], key: str, error: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(error)
    return value.strip()


def _require_int(data: Mapping[str, Any], key: str, error: str) -> int:
    value = data.get(key)
    if isinstance(value, bool):
        raise ConfigurationError(error)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(error) from exc


def _parse_native_currency(chain_key: str, payload: Any) -> NativeCurrency:
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Chain {chain_key} must define native_currency as a mapping")
    return NativeCurrency(
        name=_require_str(payload, "name", f"Chain {chain_key} native_currency needs a name"),
        symbol=_require_str(
            payload, "symbol", f"Chain {chain_key} native_currency needs a symbol"
        ),
        decimals=_require_int(
            {"decimals": payload.get("decimals", 18)},
            "decimals",
            f"Chain {chain_key} native_currency decimals must be an integer",
        ),
    )


def parse_chain_entry(
    chain_key: str, payload: Any, rpc_overrides: Mapping[str, str] | None = None
) -> ChainConfig:
    """Validate one chain mapping and apply any RPC override for it."""

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Chain {chain_key} must be a mapping")
    key = chain_key.strip().lower()

    oft_address = _require_str(
        payload,
        "oft_address",
        f"Chain {key} must define oft_address (the PYUSD OFT or adapter contract)",
    )
    if not Web3.is_address(oft_address):
        raise ConfigurationError(f"Chain {key} oft_address is not an EVM address: {oft_address}")

    rpc_url = (rpc_overrides or {}).get(key) or _require_str(
        payload, "rpc_url", f"Chain {key} must define rpc_url"
    )

    return ChainConfig(
        key=key,
        name=_require_str(payload, "name", f"Chain {key} must define a name"),
        chain_id=_require_int(payload, "chain_id", f"Chain {key} must define an integer chain_id"),
        eid=_require_int(payload, "eid", f"Chain {key} must define an integer eid"),
        oft_address=Web3.to_checksum_address(oft_address),
        rpc_url=rpc_url,
        block_explorer=_require_str(
            payload, "block_explorer", f"Chain {key} must define block_explorer"
        ),
        native_currency=_parse_native_currency(key, payload.get("native_currency")),
    )


def load_chain_registry(
    path: str | Path,
    network_mode: NetworkMode = NetworkMode.MAINNET,
    rpc_overrides: Mapping[str, str] | None = None,
) -> ChainRegistry:
    """Load the chain table for ``network_mode`` from ``path``."""

    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigurationError(
            f"Chain file not found: {path}. Copy examples/chains.example.yaml, fill in the "
            "OFT addresses, and point --chains-file or PYUSD_CHAINS_FILE at it."
        )
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:  # pragma: no cover - PyYAML handles details
        raise ConfigurationError(f"Failed to parse chain file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Chain file {path} must contain a mapping at the top level")

    section = data.get(network_mode.value)
    if not isinstance(section, dict) or not section:
        raise ConfigurationError(
            f"Chain file {path} defines no {network_mode.value} chains"
        )

    normalized_overrides = {key.lower(): url for key, url in (rpc_overrides or {}).items()}
    chains = [
        parse_chain_entry(str(chain_key), payload, normalized_overrides)
        for chain_key, payload in section.items()
    ]
    logger.debug("Loaded %d %s chains from %s", len(chains), network_mode.value, path)
    return ChainRegistry(chains, network_mode)


def registry_from_config(config: TransferConfig) -> ChainRegistry:
    """Load the chain table described by ``config``."""

    if config.chains_file is None:
        raise ConfigurationError(
            "No chain file configured. Pass --chains-file, set PYUSD_CHAINS_FILE, "
            "or add chains_file to ~/.pyusd-oft.yaml."
        )
    return load_chain_registry(config.chains_file, config.network_mode, config.rpc_overrides)
