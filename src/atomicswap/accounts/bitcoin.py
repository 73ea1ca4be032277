"""Bitcoin P2PKH account loaded from a WIF private key."""

import hashlib
import logging
from typing import Optional

import base58
from bip_utils import P2PKHAddrEncoder, P2PKHPubKeyModes
from bitcoinlib.keys import Key
from ecdsa import SECP256k1, SigningKey
from ecdsa.util import sigencode_der_canonize

from atomicswap.accounts.base import SigningAccount
from atomicswap.bitcoin.network import BitcoinNetwork, get_network

logger = logging.getLogger(__name__)


class BitcoinAccount(SigningAccount):
    """secp256k1 key pair with a legacy P2PKH address."""

    def __init__(self, private_key: bytes, network: BitcoinNetwork, compressed: bool = True):
        if len(private_key) != 32:
            raise ValueError("Private key must be 32 bytes")

        self._private_key = private_key
        self._signing_key = SigningKey.from_string(private_key, curve=SECP256k1)
        self.network = network
        self.compressed = compressed
        self._key: Optional[Key] = None

        verifying_key = self._signing_key.get_verifying_key()
        encoding = "compressed" if compressed else "uncompressed"
        self._public_key = verifying_key.to_string(encoding)

        pub_key_mode = P2PKHPubKeyModes.COMPRESSED if compressed else P2PKHPubKeyModes.UNCOMPRESSED
        self._address = P2PKHAddrEncoder.EncodeKey(
            self._public_key,
            net_ver=bytes([network.p2pkh_version]),
            pub_key_mode=pub_key_mode,
        )

    @classmethod
    def from_wif(cls, wif: str, network: str = "testnet") -> "BitcoinAccount":
        """Decode a WIF-encoded private key.

        Args:
            wif: WIF private key
            network: mainnet, testnet or localnet

        Raises:
            ValueError: On a malformed key or a key for another network
        """
        params = get_network(network)
        decoded = base58.b58decode_check(wif)

        if decoded[0] != params.wif_prefix:
            raise ValueError(f"Invalid WIF prefix for {params.name}: {hex(decoded[0])}")

        if len(decoded) == 34 and decoded[-1] == 0x01:
            return cls(decoded[1:33], params, compressed=True)
        if len(decoded) == 33:
            return cls(decoded[1:], params, compressed=False)

        raise ValueError("Invalid WIF length")

    @property
    def address(self) -> str:
        return self._address

    @property
    def public_key(self) -> str:
        return self._public_key.hex()

    @property
    def public_key_bytes(self) -> bytes:
        return self._public_key

    @property
    def key(self) -> Key:
        """bitcoinlib key used to sign transaction inputs."""
        if self._key is None:
            self._key = Key(
                self._private_key,
                network=self.network.library_name,
                compressed=self.compressed,
            )
        return self._key

    def sign(self, digest: bytes) -> bytes:
        """Deterministic low-S DER signature (no sighash byte)."""
        return self._signing_key.sign_digest_deterministic(
            digest,
            hashfunc=hashlib.sha256,
            sigencode=sigencode_der_canonize,
        )

    def export_private_key(self) -> str:
        payload = bytes([self.network.wif_prefix]) + self._private_key
        if self.compressed:
            payload += b"\x01"
        return base58.b58encode_check(payload).decode()
