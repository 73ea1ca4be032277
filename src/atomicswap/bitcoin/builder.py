"""Funding transaction builder for the UTXO leg.

Send flow:
1. Fetch the sender's spendable outputs
2. Spend all of them: one payment output, change back to the sender
3. Sign every input
4. Report the txid to the observer, then broadcast

The fee is a fixed constant, not derived from size or fee rate.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from atomicswap.accounts.bitcoin import BitcoinAccount
from atomicswap.bitcoin.transaction import RawTransaction
from atomicswap.errors import InsufficientFunds
from atomicswap.explorer.base import UnspentOutput
from atomicswap.explorer.insight import ExplorerGateway
from atomicswap.units import Number, btc_to_sats

logger = logging.getLogger(__name__)

DEFAULT_FEE_VALUE = 1000

TransactionHashObserver = Callable[[str], Any]


@dataclass(frozen=True)
class Selection:
    """Inputs chosen for a send and the resulting value split."""

    unspents: tuple[UnspentOutput, ...]
    fund_value: int
    fee_value: int
    total: int

    @property
    def change_value(self) -> int:
        return self.total - self.fund_value - self.fee_value


def select_unspents(unspents: Sequence[UnspentOutput], fund_value: int, fee_value: int) -> Selection:
    """Select every available output.

    Raises:
        InsufficientFunds: If the outputs cannot cover fund + fee
    """
    total = sum(u.amount_satoshis for u in unspents)

    if total < fund_value + fee_value:
        raise InsufficientFunds(total=total, required=fund_value + fee_value)

    return Selection(unspents=tuple(unspents), fund_value=fund_value, fee_value=fee_value, total=total)


class TransactionBuilder:
    """Builds, signs and broadcasts payments from a single account."""

    def __init__(self, explorer: ExplorerGateway, fee_value: int = DEFAULT_FEE_VALUE):
        self.explorer = explorer
        self.fee_value = fee_value

    def build(
        self,
        account: BitcoinAccount,
        to: str,
        unspents: Sequence[UnspentOutput],
        fund_value: int,
    ) -> RawTransaction:
        """Assemble and sign a transaction from a known UTXO set."""
        if fund_value <= 0:
            raise ValueError(f"Amount must be positive, got {fund_value} satoshis")

        selection = select_unspents(unspents, fund_value, self.fee_value)
        tx = RawTransaction(network=account.network)

        for unspent in selection.unspents:
            tx.add_input(unspent.txid, unspent.output_index, account, unspent.amount_satoshis)

        tx.add_output(to, selection.fund_value)

        if selection.change_value:
            tx.add_output(account.address, selection.change_value)

        tx.sign(account)

        return tx

    async def send_transaction(
        self,
        account: BitcoinAccount,
        to: str,
        value: Number,
        on_transaction_hash: Optional[TransactionHashObserver] = None,
    ) -> Any:
        """Send ``value`` BTC from ``account`` to ``to``.

        Args:
            account: Sending account (owns every spent output)
            to: Destination address (P2PKH or P2SH)
            value: Amount in BTC
            on_transaction_hash: Called with the txid before broadcast

        Returns:
            Broadcast result from the explorer

        Raises:
            InsufficientFunds: Before anything is broadcast
            ProviderError: If fetching outputs or broadcasting fails
        """
        fund_value = btc_to_sats(value)
        unspents = await self.explorer.fetch_unspents(account.address)

        tx = self.build(account, to, unspents, fund_value)
        txid = tx.txid

        if on_transaction_hash is not None:
            on_transaction_hash(txid)
            logger.debug(f"tx id {txid}")

        raw_hex = tx.to_hex()
        logger.debug(f"raw tx = {raw_hex}")

        return await self.explorer.broadcast_tx(raw_hex)
