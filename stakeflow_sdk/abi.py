"""
Contract ABI fragments used by the StakeFlow SDK.

Only the methods the SDK calls are declared here.
"""

ERC20_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "owner", "type": "address"},
            {"internalType": "address", "name": "spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "address", "name": "spender", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]

STAKE_MANAGER_ABI = [
    {
        "inputs": [{"internalType": "uint32", "name": "", "type": "uint32"}],
        "name": "bountyLocks",
        "outputs": [
            {"internalType": "uint32", "name": "redeemAfter", "type": "uint32"},
            {"internalType": "address", "name": "bountyHunter", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "uint32", "name": "bountyId", "type": "uint32"}],
        "name": "redeemBounty",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]
