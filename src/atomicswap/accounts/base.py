"""Signing account capability.

Accounts are built once from key material and handed to the components
that need to sign. Nothing in this package mutates an account.

Flow:
1. Caller loads a key (WIF for BTC, hex for ETH)
2. Account exposes address and public key
3. Builders ask the account to sign digests/transactions
"""

from abc import ABC, abstractmethod


class SigningAccount(ABC):
    """Abstract key pair with signing capability."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Chain address derived from the public key."""
        pass

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Public key as hex string."""
        pass

    @abstractmethod
    def sign(self, digest: bytes) -> bytes:
        """Sign a 32-byte digest.

        Args:
            digest: Message hash to sign

        Returns:
            Signature bytes in the chain's native encoding
        """
        pass

    @abstractmethod
    def export_private_key(self) -> str:
        """Private key in the chain's usual text encoding."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self.address!r})"
