"""
Core blockchain constants.

ERC-20 ABI fragments used by the deposit scanner.
"""

# ERC-20 ABI (only the Transfer event is decoded)
USDT_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "from", "type": "address"},
            {"indexed": True, "name": "to", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
        ],
        "name": "Transfer",
        "type": "event",
    },
]
