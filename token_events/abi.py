from web3 import Web3

from token_events.entities import EventKind

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Standard ERC20 plus the mint(address,uint256) found on test tokens
ERC20_ABI = [
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "allowance",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "approve",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "mint",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
    },
    {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "Approval",
        "anonymous": False,
        "inputs": [
            {"name": "owner", "type": "address", "indexed": True},
            {"name": "spender", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
]

EVENT_SIGNATURES = {
    EventKind.TRANSFER: "Transfer(address,address,uint256)",
    EventKind.APPROVAL: "Approval(address,address,uint256)",
}

EVENT_TOPICS = {
    kind: Web3.to_hex(Web3.keccak(text=signature))
    for kind, signature in EVENT_SIGNATURES.items()
}

FUNCTION_SIGNATURES = {
    "mint": "mint(address,uint256)",
    "approve": "approve(address,uint256)",
    "transfer": "transfer(address,uint256)",
}

FUNCTION_SELECTORS = {
    name: bytes(Web3.keccak(text=signature)[:4])
    for name, signature in FUNCTION_SIGNATURES.items()
}
