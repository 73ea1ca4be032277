"""UTXO leg: network parameters, transaction codec, fees and funding."""

from atomicswap.bitcoin.network import MAINNET, TESTNET, BitcoinNetwork, get_network

__all__ = ["MAINNET", "TESTNET", "BitcoinNetwork", "get_network"]
