"""Client side of a BTC <-> ERC20 hash time-locked swap."""

from atomicswap.bitcoin.builder import TransactionBuilder
from atomicswap.bitcoin.fees import FeeEstimator
from atomicswap.errors import (
    InsufficientFunds,
    ProviderError,
    RetryExhaustedError,
    SwapClientError,
    TransactionReverted,
)
from atomicswap.ethereum.secret import SecretExtractor
from atomicswap.ethereum.swap import ContractSwapClient
from atomicswap.explorer.insight import ExplorerGateway
from atomicswap.utils.polling import UNBOUNDED, Bounded, repeat_until_result

__version__ = "0.1.0"

__all__ = [
    "TransactionBuilder",
    "FeeEstimator",
    "ContractSwapClient",
    "SecretExtractor",
    "ExplorerGateway",
    "Bounded",
    "UNBOUNDED",
    "repeat_until_result",
    "SwapClientError",
    "ProviderError",
    "InsufficientFunds",
    "RetryExhaustedError",
    "TransactionReverted",
]
