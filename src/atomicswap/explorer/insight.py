"""Insight explorer gateway for the UTXO leg.

REST surface:
- GET  /addr/{address}        -> {"balance": ...}
- GET  /addr/{address}/utxo   -> [{"txid", "vout", "satoshis"}, ...]
- POST /tx/send {"rawtx"}     -> {"txid"}
- GET  /tx/{hash}
"""

import logging
from decimal import Decimal
from typing import Any, Optional

import httpx

from atomicswap.errors import UnknownProviderError
from atomicswap.explorer.base import DEFAULT_TIMEOUT, HTTPGateway, UnspentOutput
from atomicswap.explorer.blockcypher import BlockCypherClient
from atomicswap.explorer.omni import USDT_ASSET_ID, OmniExplorer

logger = logging.getLogger(__name__)

INSIGHT_MAINNET = "https://insight.bitpay.com/api"
INSIGHT_TESTNET = "https://test-insight.bitpay.com/api"


class ExplorerGateway(HTTPGateway):
    """Balance, UTXO, broadcast and transaction lookups.

    The base endpoint is fixed at construction from the network.
    Transaction-info lookups are delegated to BlockCypher, which reports
    confirmation confidence. Omni token balances go to the Omni explorer.
    """

    def __init__(
        self,
        testnet: bool = True,
        base_url: Optional[str] = None,
        blockcypher: Optional[BlockCypherClient] = None,
        omni: Optional[OmniExplorer] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if base_url is None:
            base_url = INSIGHT_TESTNET if testnet else INSIGHT_MAINNET
        super().__init__(base_url, client=client, timeout=timeout)
        self.testnet = testnet
        self.blockcypher = blockcypher or BlockCypherClient(testnet=testnet, client=client, timeout=timeout)
        self.omni = omni or OmniExplorer(client=client, timeout=timeout)

    async def fetch_balance(self, address: str) -> Decimal:
        """Get confirmed balance (BTC) for an address."""
        data = await self._request("GET", f"{self.base_url}/addr/{address}")

        try:
            balance = Decimal(str(data["balance"]))
        except (KeyError, TypeError, ArithmeticError) as e:
            logger.error(f"UnknownError: statusCode=200 malformed balance for {address}: {e}")
            raise UnknownProviderError(f"Malformed balance response: {data}", status_code=200)

        logger.debug(f"BTC Balance: {balance}")
        return balance

    async def fetch_unspents(self, address: str) -> list[UnspentOutput]:
        """Get spendable outputs for an address."""
        data = await self._request("GET", f"{self.base_url}/addr/{address}/utxo")

        try:
            return [
                UnspentOutput(
                    txid=item["txid"],
                    output_index=int(item["vout"]),
                    amount_satoshis=int(item["satoshis"]),
                )
                for item in data
            ]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"UnknownError: statusCode=200 malformed utxo list for {address}: {e}")
            raise UnknownProviderError(f"Malformed UTXO response for {address}", status_code=200)

    async def broadcast_tx(self, raw_tx_hex: str) -> Any:
        """Broadcast a serialized transaction.

        Returns:
            Explorer response, normally ``{"txid": ...}``
        """
        result = await self._request("POST", f"{self.base_url}/tx/send", json={"rawtx": raw_tx_hex})
        logger.info(f"BTC transaction broadcast: {result}")
        return result

    async def fetch_tx(self, tx_hash: str) -> dict:
        """Get a transaction as the explorer reports it."""
        return await self._request("GET", f"{self.base_url}/tx/{tx_hash}")

    async def fetch_tx_info(self, tx_hash: str) -> dict:
        """Get confidence and fee details for a transaction."""
        return await self.blockcypher.fetch_tx_info(tx_hash)

    async def fetch_omni_balance(self, address: str, asset_id: int = USDT_ASSET_ID) -> Decimal:
        return await self.omni.fetch_balance(address, asset_id)

    async def close(self) -> None:
        await super().close()
        await self.blockcypher.close()
        await self.omni.close()
