"""ERC-20 and LayerZero IOFT ABI subsets used for PYUSD transfers."""

from __future__ import annotations

from web3 import Web3

MAX_UINT256 = 2**256 - 1

OFT_SENT_EVENT_SIGNATURE = "OFTSent(bytes32,uint32,address,uint256,uint256)"
# topic0 of every OFTSent log; the guid is topic1.
OFT_SENT_TOPIC = bytes(Web3.keccak(text=OFT_SENT_EVENT_SIGNATURE))
TOKEN_SELECTOR = bytes(Web3.keccak(text="token()")[:4])

ERC20_ABI = [
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
]

_SEND_PARAM = {
    "components": [
        {"name": "dstEid", "type": "uint32"},
        {"name": "to", "type": "bytes32"},
        {"name": "amountLD", "type": "uint256"},
        {"name": "minAmountLD", "type": "uint256"},
        {"name": "extraOptions", "type": "bytes"},
        {"name": "composeMsg", "type": "bytes"},
        {"name": "oftCmd", "type": "bytes"},
    ],
    "name": "_sendParam",
    "type": "tuple",
}

_MESSAGING_FEE_COMPONENTS = [
    {"name": "nativeFee", "type": "uint256"},
    {"name": "lzTokenFee", "type": "uint256"},
]

_OFT_RECEIPT = {
    "components": [
        {"name": "amountSentLD", "type": "uint256"},
        {"name": "amountReceivedLD", "type": "uint256"},
    ],
    "name": "oftReceipt",
    "type": "tuple",
}

IOFT_ABI = [
    {
        "inputs": [],
        "name": "token",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "approvalRequired",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [_SEND_PARAM],
        "name": "quoteOFT",
        "outputs": [
            {
                "components": [
                    {"name": "minAmountLD", "type": "uint256"},
                    {"name": "maxAmountLD", "type": "uint256"},
                ],
                "name": "limit",
                "type": "tuple",
            },
            {
                "components": [
                    {"name": "feeAmountLD", "type": "int256"},
                    {"name": "description", "type": "string"},
                ],
                "name": "oftFeeDetails",
                "type": "tuple[]",
            },
            {**_OFT_RECEIPT, "name": "receipt"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [_SEND_PARAM, {"name": "_payInLzToken", "type": "bool"}],
        "name": "quoteSend",
        "outputs": [
            {"components": _MESSAGING_FEE_COMPONENTS, "name": "msgFee", "type": "tuple"}
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            _SEND_PARAM,
            {"components": _MESSAGING_FEE_COMPONENTS, "name": "_fee", "type": "tuple"},
            {"name": "_refundAddress", "type": "address"},
        ],
        "name": "send",
        "outputs": [
            {
                "components": [
                    {"name": "guid", "type": "bytes32"},
                    {"name": "nonce", "type": "uint64"},
                    {"components": _MESSAGING_FEE_COMPONENTS, "name": "fee", "type": "tuple"},
                ],
                "name": "msgReceipt",
                "type": "tuple",
            },
            _OFT_RECEIPT,
        ],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "guid", "type": "bytes32"},
            {"indexed": False, "name": "dstEid", "type": "uint32"},
            {"indexed": True, "name": "fromAddress", "type": "address"},
            {"indexed": False, "name": "amountSentLD", "type": "uint256"},
            {"indexed": False, "name": "amountReceivedLD", "type": "uint256"},
        ],
        "name": "OFTSent",
        "type": "event",
    },
]
