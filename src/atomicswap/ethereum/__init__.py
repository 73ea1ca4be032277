"""Account-chain leg: swap contract client and secret recovery."""

from atomicswap.ethereum.abi import ERC20_ABI, SWAP_ABI, decode_function_input
from atomicswap.ethereum.secret import SecretExtractor
from atomicswap.ethereum.swap import ContractSwapClient, PendingTransaction

__all__ = [
    "ERC20_ABI",
    "SWAP_ABI",
    "decode_function_input",
    "SecretExtractor",
    "ContractSwapClient",
    "PendingTransaction",
]
