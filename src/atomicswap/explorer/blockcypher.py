"""BlockCypher API client.

Used for two things:
- the primary fee-rate source (``{high,medium,low}_fee_per_kb`` on the chain root)
- transaction info, merged from the confidence and detail endpoints

Docs: https://www.blockcypher.com/dev/bitcoin/
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from atomicswap.errors import NoResponseError, ProviderError, UnknownProviderError
from atomicswap.explorer.base import DEFAULT_TIMEOUT, HTTPGateway

logger = logging.getLogger(__name__)

BLOCKCYPHER_MAINNET = "https://api.blockcypher.com/v1/btc/main"
BLOCKCYPHER_TESTNET = "https://api.blockcypher.com/v1/btc/test3"

FEE_KEYS = {
    "fast": "high_fee_per_kb",
    "normal": "medium_fee_per_kb",
    "slow": "low_fee_per_kb",
}


class BlockCypherClient(HTTPGateway):
    """BlockCypher client for BTC main/test3."""

    def __init__(
        self,
        testnet: bool = True,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if base_url is None:
            base_url = BLOCKCYPHER_TESTNET if testnet else BLOCKCYPHER_MAINNET
        super().__init__(base_url, client=client, timeout=timeout)
        self.testnet = testnet
        self.api_token = api_token

    def _token_params(self) -> dict:
        """API token query parameter if configured."""
        return {"token": self.api_token} if self.api_token else {}

    async def fetch_fee_rate(self, speed: str = "normal") -> int:
        """Fee rate in satoshis per kilobyte for a speed tier."""
        key = FEE_KEYS.get(speed, FEE_KEYS["normal"])
        info = await self._request("GET", self.base_url, params=self._token_params())

        if not isinstance(info, dict) or key not in info:
            logger.error(f"UnknownError: statusCode=200 BlockCypher response without {key}")
            raise UnknownProviderError(f"BlockCypher response missing {key}", status_code=200)

        try:
            return int(info[key])
        except (TypeError, ValueError) as e:
            logger.error(f"UnknownError: statusCode=200 BlockCypher {key}={info[key]!r}: {e}")
            raise UnknownProviderError(f"Malformed BlockCypher {key}: {info[key]!r}", status_code=200)

    async def _fetch_or_error(self, url: str, params: Optional[dict] = None) -> dict:
        """GET a JSON object, folding failures into ``{"error": ...}``.

        BlockCypher reports most problems as ``{"error": "..."}`` bodies, so
        the error body is kept when there is one.
        """
        client = await self._get_client()

        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            try:
                data = e.response.json()
            except ValueError:
                data = {}
            if not isinstance(data, dict) or "error" not in data:
                data = {"error": str(e)}
        except (httpx.HTTPError, ValueError) as e:
            data = {"error": str(e)}

        if not isinstance(data, dict):
            return {"error": f"Unexpected response type {type(data).__name__}"}
        return data

    async def fetch_tx_info(self, tx_hash: str) -> dict[str, Any]:
        """Merge ``/txs/{hash}/confidence`` over ``/txs/{hash}``.

        Both queries are issued concurrently. The merged result must carry
        confidence or fee data.

        Raises:
            ProviderError: With the BlockCypher error message if one was returned
            NoResponseError: If neither query produced usable data
        """
        confidence, details = await asyncio.gather(
            self._fetch_or_error(f"{self.base_url}/txs/{tx_hash}/confidence", self._token_params()),
            self._fetch_or_error(f"{self.base_url}/txs/{tx_hash}"),
        )

        info = {**details, **confidence}

        if info.get("error"):
            logger.debug(f"BlockCypherError: {info['error']}")

        if info.get("confidence") or info.get("fees"):
            return info

        if info.get("error"):
            logger.error(f"BlockCypherError: {info['error']}")
            raise ProviderError(f"BlockCypherError: {info['error']}")

        logger.error("BlockCypherError: No response")
        raise NoResponseError("BlockCypherError: No response")
