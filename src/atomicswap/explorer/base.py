"""Base HTTP gateway for block explorers and fee oracles.

Every request goes through ``HTTPGateway._request`` so that failures are
classified the same way everywhere:
- the provider's known rejection status becomes ``ProviderRejected``
- any other HTTP, transport or JSON failure becomes ``UnknownProviderError``

Both are logged once and raised to the caller. Nothing here retries.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from atomicswap.errors import ProviderError, ProviderRejected, UnknownProviderError

logger = logging.getLogger(__name__)

# Insight answers 525 when it refuses a request
REJECT_STATUS_CODES = frozenset({525})

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class UnspentOutput:
    """Spendable output fetched from the explorer."""

    txid: str
    output_index: int
    amount_satoshis: int


def classify_error(error: Exception, method: str, url: str) -> ProviderError:
    """Log a provider failure and map it to a ``ProviderError``."""
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code

        if status_code in REJECT_STATUS_CODES:
            logger.error(f"Error: provider refuse: {method} {url}")
            return ProviderRejected(
                f"Provider refused {method} {url}",
                status_code=status_code,
                method=method,
                url=url,
            )

        logger.error(f"UnknownError: statusCode={status_code} {error}")
        return UnknownProviderError(str(error), status_code=status_code)

    logger.error(f"UnknownError: statusCode=None {error}")
    return UnknownProviderError(str(error))


class HTTPGateway:
    """Shared httpx plumbing for explorer-style REST APIs."""

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ProviderRejected: On a known rejection status
            UnknownProviderError: On any other failure
        """
        client = await self._get_client()

        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise classify_error(e, method, url) from e
