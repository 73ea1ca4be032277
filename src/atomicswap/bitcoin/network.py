"""Bitcoin network parameters (version bytes)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BitcoinNetwork:
    name: str
    wif_prefix: int
    p2pkh_version: int
    p2sh_version: int
    # network name as bitcoinlib knows it
    library_name: str


MAINNET = BitcoinNetwork(
    name="mainnet", wif_prefix=0x80, p2pkh_version=0x00, p2sh_version=0x05, library_name="bitcoin"
)
TESTNET = BitcoinNetwork(
    name="testnet", wif_prefix=0xEF, p2pkh_version=0x6F, p2sh_version=0xC4, library_name="testnet"
)

NETWORKS = {
    "mainnet": MAINNET,
    "testnet": TESTNET,
    # regtest/localnet reuse testnet version bytes
    "localnet": TESTNET,
}


def get_network(name: str) -> BitcoinNetwork:
    """Look up network parameters by name."""
    try:
        return NETWORKS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown bitcoin network: {name}")
