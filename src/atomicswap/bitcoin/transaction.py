"""Legacy funding transactions built and signed with bitcoinlib.

Only what the funding path needs: P2PKH inputs owned by one key,
base58 P2PKH/P2SH outputs, SIGHASH_ALL, version 1, locktime 0.
"""

import logging
from typing import Any

from bitcoinlib.encoding import EncodingError, double_sha256
from bitcoinlib.keys import deserialize_address
from bitcoinlib.transactions import Transaction, TransactionError

from atomicswap.accounts.bitcoin import BitcoinAccount
from atomicswap.bitcoin.network import BitcoinNetwork

logger = logging.getLogger(__name__)

# Below 0xffffffff so the transaction opts into replace-by-fee
RBF_SEQUENCE = 0xFFFFFFFE


class RawTransaction:
    """Transaction under construction.

    Wraps ``bitcoinlib.transactions.Transaction`` pinned to legacy
    serialization on a single network.
    """

    def __init__(self, network: BitcoinNetwork):
        self.network = network
        self._tx = Transaction(network=network.library_name, witness_type="legacy")

    @property
    def inputs(self) -> list:
        return self._tx.inputs

    @property
    def outputs(self) -> list:
        return self._tx.outputs

    def add_input(
        self,
        txid: str,
        output_index: int,
        account: BitcoinAccount,
        value: int,
        sequence: int = RBF_SEQUENCE,
    ) -> None:
        """Spend an output locked to ``account``'s P2PKH address."""
        self._tx.add_input(
            prev_txid=txid,
            output_n=output_index,
            keys=account.key,
            compressed=account.compressed,
            value=value,
            sequence=sequence,
            witness_type="legacy",
        )

    def add_output(self, address: str, value: int) -> None:
        """Pay ``value`` satoshis to a base58 address on this network.

        Raises:
            ValueError: For a non-positive value or an unusable address
        """
        if value <= 0:
            raise ValueError(f"Output value must be positive, got {value}")

        try:
            decoded = deserialize_address(address, network=self.network.library_name)
        except EncodingError as e:
            raise ValueError(f"Invalid {self.network.name} address {address}: {e}") from e

        if decoded.get("script_type") not in ("p2pkh", "p2sh"):
            raise ValueError(
                f"Address {address} is {decoded.get('script_type')}, only P2PKH/P2SH are supported"
            )

        try:
            self._tx.add_output(value, address=address)
        except (EncodingError, TransactionError) as e:
            raise ValueError(f"Invalid {self.network.name} address {address}: {e}") from e

    def sign(self, account: BitcoinAccount) -> None:
        """Sign every input with ``account``'s key."""
        self._tx.sign(keys=[account.key])

    def verify(self) -> bool:
        """Check every input signature."""
        return self._tx.verify()

    def serialize(self) -> bytes:
        return self._tx.raw()

    def to_hex(self) -> str:
        return self._tx.raw_hex()

    @property
    def txid(self) -> str:
        return double_sha256(self.serialize())[::-1].hex()

    @classmethod
    def parse_hex(cls, raw_hex: str, network: BitcoinNetwork) -> Any:
        """Decode a serialized transaction for inspection."""
        return Transaction.parse_hex(raw_hex, network=network.library_name)
