"""Ethereum account backed by eth_account."""

from typing import Any, Union

from eth_account import Account
from eth_keys import keys

from atomicswap.accounts.base import SigningAccount
from atomicswap.units import strip_hex_prefix, to_prefixed_hex


class EthereumAccount(SigningAccount):
    """Local EOA used to sign contract calls."""

    def __init__(self, private_key: Union[str, bytes]):
        if isinstance(private_key, str):
            private_key = bytes.fromhex(strip_hex_prefix(private_key))

        self._private_key = private_key
        self._account = Account.from_key(private_key)
        self._key = keys.PrivateKey(private_key)

    @classmethod
    def from_key(cls, private_key: Union[str, bytes]) -> "EthereumAccount":
        return cls(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def public_key(self) -> str:
        return self._key.public_key.to_hex()

    def sign(self, digest: bytes) -> bytes:
        """Sign a message hash, returning r || s || v."""
        return self._key.sign_msg_hash(digest).to_bytes()

    def sign_transaction(self, transaction: dict) -> Any:
        """Sign a transaction dict built by web3."""
        return self._account.sign_transaction(transaction)

    def export_private_key(self) -> str:
        return to_prefixed_hex(self._private_key)
