"""Fee-rate estimation with provider fallback.

Primary source is BlockCypher (satoshis per kB). On mainnet a failure falls
back to a mempool-style oracle reporting satoshis per vbyte, scaled by 1024.
On testnet only the primary is asked.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

import httpx

from atomicswap.errors import ProviderError, UnknownProviderError
from atomicswap.explorer.base import DEFAULT_TIMEOUT, HTTPGateway
from atomicswap.explorer.blockcypher import BlockCypherClient

logger = logging.getLogger(__name__)

FEE_ORACLE_URL = "https://mempool.space/api/v1/fees/recommended"

# sat/vB -> sat/kB
ORACLE_SCALE = 1024


class FeeSpeed(str, Enum):
    """Confirmation speed tier."""

    FAST = "fast"
    NORMAL = "normal"
    SLOW = "slow"


def normalize_speed(speed: Union[FeeSpeed, str, None]) -> FeeSpeed:
    """Map any input to a tier, unknown values count as normal."""
    if isinstance(speed, FeeSpeed):
        return speed
    try:
        return FeeSpeed(str(speed).lower())
    except ValueError:
        return FeeSpeed.NORMAL


@dataclass(frozen=True)
class FeeRate:
    """Fee rate in satoshis per kilobyte."""

    value: int
    speed: FeeSpeed


class FeeOracleClient(HTTPGateway):
    """Secondary oracle returning fastestFee/halfHourFee/hourFee."""

    SPEED_KEYS = {
        FeeSpeed.FAST: "fastestFee",
        FeeSpeed.NORMAL: "halfHourFee",
        FeeSpeed.SLOW: "hourFee",
    }

    def __init__(
        self,
        url: str = FEE_ORACLE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(url, client=client, timeout=timeout)

    async def fetch_fee_rate(self, speed: str = "normal") -> int:
        key = self.SPEED_KEYS[normalize_speed(speed)]
        fees = await self._request("GET", self.base_url)

        if not isinstance(fees, dict) or key not in fees:
            logger.error(f"UnknownError: statusCode=200 fee oracle response without {key}")
            raise UnknownProviderError(f"Fee oracle response missing {key}", status_code=200)

        try:
            return int(Decimal(str(fees[key])) * ORACLE_SCALE)
        except (ArithmeticError, ValueError) as e:
            logger.error(f"UnknownError: statusCode=200 fee oracle {key}={fees[key]!r}: {e}")
            raise UnknownProviderError(f"Malformed fee oracle {key}: {fees[key]!r}", status_code=200)


class FeeEstimator:
    """Fee rate from the primary provider, secondary on mainnet failure."""

    def __init__(
        self,
        primary: BlockCypherClient,
        secondary: FeeOracleClient,
        mainnet: bool = False,
    ):
        self.primary = primary
        self.secondary = secondary
        self.mainnet = mainnet

    async def estimate_fee_rate(self, speed: Union[FeeSpeed, str] = FeeSpeed.NORMAL) -> FeeRate:
        """Estimate the current fee rate.

        Raises:
            ProviderError: If every queried provider failed
        """
        tier = normalize_speed(speed)

        if not self.mainnet:
            return FeeRate(value=await self.primary.fetch_fee_rate(tier.value), speed=tier)

        try:
            value = await self.primary.fetch_fee_rate(tier.value)
        except ProviderError as e:
            logger.warning(f"EstimateFeeError: BlockCypher {e}, trying fee oracle...")
            value = await self.secondary.fetch_fee_rate(tier.value)

        return FeeRate(value=value, speed=tier)
