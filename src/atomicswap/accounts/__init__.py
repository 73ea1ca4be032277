"""Signing accounts for both legs of a swap."""

from atomicswap.accounts.base import SigningAccount
from atomicswap.accounts.bitcoin import BitcoinAccount
from atomicswap.accounts.ethereum import EthereumAccount

__all__ = ["SigningAccount", "BitcoinAccount", "EthereumAccount"]
