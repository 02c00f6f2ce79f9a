"""Shared configuration loader for the PYUSD OFT tooling."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path.home() / ".pyusd-oft.yaml"
DEFAULT_RECEIPT_TIMEOUT = 180
RPC_ENV_PREFIX = "RPC_"


class NetworkMode(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


@dataclass
class TransferConfig:
    """Explicit settings handed to clients and workflows.

    Nothing below the CLI reads the environment; callers construct this once
    (usually through :func:`load_transfer_config`) and pass it down.
    """

    private_key: str | None = None
    rpc_overrides: dict[str, str] = field(default_factory=dict)
    network_mode: NetworkMode = NetworkMode.MAINNET
    chains_file: Path | None = None
    scan_api_url: str | None = None
    receipt_timeout: int = DEFAULT_RECEIPT_TIMEOUT

    @property
    def is_testnet(self) -> bool:
        return self.network_mode is NetworkMode.TESTNET


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML mapping")
    return loaded


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "no", "n", "off"}:
            return False
    return None


def _coerce_network(raw: Any, *, source: str) -> NetworkMode | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, NetworkMode):
        return raw
    try:
        return NetworkMode(str(raw).strip().lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid network in {source}: {raw} (expected mainnet or testnet)"
        ) from exc


def _coerce_timeout(raw: Any, *, source: str) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid receipt timeout in {source}: {raw}") from exc
    if value <= 0:
        raise ConfigurationError(f"Receipt timeout in {source} must be positive: {raw}")
    return value


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def chain_key_to_env(chain_key: str) -> str:
    """Return the ``RPC_*`` variable name used to override ``chain_key``."""

    return RPC_ENV_PREFIX + chain_key.upper().replace("-", "_")


def _rpc_overrides_from_env(env_map: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name, value in env_map.items():
        if not name.startswith(RPC_ENV_PREFIX) or not value:
            continue
        chain_key = name[len(RPC_ENV_PREFIX) :].lower().replace("_", "-")
        if chain_key:
            overrides[chain_key] = value
    return overrides


def _rpc_overrides_from_file(section: Any, *, path: Path) -> dict[str, str]:
    if not section:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Expected 'rpc' to be a mapping in {path}")
    return {str(key).lower(): str(url) for key, url in section.items() if url}


def _network_from_env(env_map: Mapping[str, str]) -> NetworkMode | None:
    explicit = _coerce_network(env_map.get("PYUSD_NETWORK"), source="PYUSD_NETWORK")
    if explicit is not None:
        return explicit
    toggle = _coerce_bool(env_map.get("TESTNET"))
    if toggle is None:
        return None
    return NetworkMode.TESTNET if toggle else NetworkMode.MAINNET


def load_transfer_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> TransferConfig:
    """Load transfer settings from overrides, the environment, and optional YAML.

    Precedence is ``overrides`` first, then environment variables, then the
    config file, then built-in defaults. RPC overrides are merged per chain
    with the same precedence.
    """

    env_map = os.environ if env is None else env
    path = Path(config_path).expanduser() if config_path is not None else DEFAULT_CONFIG_PATH
    file_config = _load_config_file(path, required=config_path is not None)
    override_map = dict(overrides or {})

    network = _first_value(
        _coerce_network(override_map.get("network"), source="overrides"),
        _network_from_env(env_map),
        _coerce_network(file_config.get("network"), source=str(path)),
        default=NetworkMode.MAINNET,
    )

    private_key = _first_value(
        override_map.get("private_key"),
        env_map.get("PYUSD_PRIVATE_KEY") or None,
        file_config.get("private_key"),
    )

    chains_file = _first_value(
        override_map.get("chains_file"),
        env_map.get("PYUSD_CHAINS_FILE") or None,
        file_config.get("chains_file"),
    )

    scan_api_url = _first_value(
        override_map.get("scan_api_url"),
        env_map.get("PYUSD_SCAN_API_URL") or None,
        file_config.get("scan_api_url"),
    )

    receipt_timeout = _first_value(
        _coerce_timeout(override_map.get("receipt_timeout"), source="overrides"),
        _coerce_timeout(env_map.get("PYUSD_RECEIPT_TIMEOUT"), source="PYUSD_RECEIPT_TIMEOUT"),
        _coerce_timeout(file_config.get("receipt_timeout"), source=str(path)),
        default=DEFAULT_RECEIPT_TIMEOUT,
    )

    rpc_overrides = _rpc_overrides_from_file(file_config.get("rpc"), path=path)
    rpc_overrides.update(_rpc_overrides_from_env(env_map))
    rpc_overrides.update(
        {str(key).lower(): str(url) for key, url in (override_map.get("rpc") or {}).items()}
    )

    return TransferConfig(
        private_key=private_key,
        rpc_overrides=rpc_overrides,
        network_mode=network,
        chains_file=Path(chains_file).expanduser() if chains_file else None,
        scan_api_url=scan_api_url,
        receipt_timeout=receipt_timeout,
    )
