from __future__ import annotations

from pathlib import Path

import pytest

from pyusd_oft.chains import ChainRegistry, load_chain_registry
from pyusd_oft.config import NetworkMode

ETHEREUM_OFT = "0x" + "e1" * 20
ARBITRUM_OFT = "0x" + "a1" * 20
SEPOLIA_OFT = "0x" + "5e" * 20

CHAIN_FILE_TEXT = f"""
mainnet:
  ethereum:
    name: Ethereum
    chain_id: 1
    eid: 30101
    oft_address: "{ETHEREUM_OFT}"
    rpc_url: https://eth.example
    block_explorer: https://etherscan.io
    native_currency: {{name: Ether, symbol: ETH, decimals: 18}}
  arbitrum:
    name: Arbitrum
    chain_id: 42161
    eid: 30110
    oft_address: "{ARBITRUM_OFT}"
    rpc_url: https://arb.example
    block_explorer: https://arbiscan.io/
    native_currency: {{name: Ether, symbol: ETH, decimals: 18}}
testnet:
  ethereum-sepolia:
    name: Sepolia
    chain_id: 11155111
    eid: 40161
    oft_address: "{SEPOLIA_OFT}"
    rpc_url: https://sepolia.example
    block_explorer: https://sepolia.etherscan.io
    native_currency: {{name: Sepolia Ether, symbol: ETH}}
"""


@pytest.fixture
def chain_file(tmp_path: Path) -> Path:
    path = tmp_path / "chains.yaml"
    path.write_text(CHAIN_FILE_TEXT)
    return path


@pytest.fixture
def registry(chain_file: Path) -> ChainRegistry:
    return load_chain_registry(chain_file, NetworkMode.MAINNET)
