"""Omni Layer explorer (token balances carried on the UTXO chain)."""

import logging
from decimal import Decimal
from typing import Optional

import httpx

from atomicswap.errors import ProviderError, UnknownProviderError
from atomicswap.explorer.base import DEFAULT_TIMEOUT, HTTPGateway
from atomicswap.units import SATOSHI_DECIMALS, from_base_units

logger = logging.getLogger(__name__)

OMNI_EXPLORER_URL = "https://api.omniexplorer.info/v1/address/addr/"

# Tether on Omni
USDT_ASSET_ID = 31


class OmniExplorer(HTTPGateway):
    """Balance lookups against omniexplorer.info."""

    def __init__(
        self,
        base_url: str = OMNI_EXPLORER_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(base_url, client=client, timeout=timeout)

    async def fetch_balance(self, address: str, asset_id: int = USDT_ASSET_ID) -> Decimal:
        """Get the balance of one Omni asset for an address.

        Returns:
            Balance in asset units, 0 if the address does not hold the asset
        """
        # trailing slash is part of the endpoint
        url = self.base_url + "/"
        response = await self._request("POST", url, data={"addr": address})

        if not isinstance(response, dict):
            logger.error(f"UnknownError: statusCode=200 Omni response is {type(response).__name__}")
            raise UnknownProviderError(f"Malformed Omni response for {address}", status_code=200)

        if response.get("error"):
            logger.error(f"Omni Balance: {response['error']}")
            raise ProviderError(f"Omni Balance: {response['error']}")

        matches = [
            asset for asset in response.get("balance", [])
            if str(asset.get("id")) == str(asset_id)
        ]

        if not matches:
            return Decimal("0")

        asset = matches[0]
        logger.debug(f"Omni Balance: {asset.get('value')}")
        logger.debug(f"Omni Balance pending: {asset.get('pendingpos')} / {asset.get('pendingneg')}")

        return from_base_units(int(asset.get("value") or 0), SATOSHI_DECIMALS)
