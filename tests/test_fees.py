"""Tests for fee-rate estimation."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from atomicswap.bitcoin.fees import FeeEstimator, FeeOracleClient, FeeSpeed, normalize_speed
from atomicswap.errors import ProviderError, UnknownProviderError
from atomicswap.explorer.blockcypher import BlockCypherClient


def provider(value=None, error=None):
    mock = MagicMock()
    mock.fetch_fee_rate = AsyncMock(return_value=value, side_effect=error)
    return mock


class TestSpeed:
    @pytest.mark.parametrize(
        "speed,expected",
        [
            ("fast", FeeSpeed.FAST),
            ("SLOW", FeeSpeed.SLOW),
            ("normal", FeeSpeed.NORMAL),
            ("ludicrous", FeeSpeed.NORMAL),
            (None, FeeSpeed.NORMAL),
        ],
    )
    def test_normalize(self, speed, expected):
        assert normalize_speed(speed) == expected


class TestFeeEstimator:
    """Tests for provider fallback."""

    @pytest.mark.asyncio
    async def test_primary_used_first(self):
        primary, secondary = provider(25_000), provider(99)
        estimator = FeeEstimator(primary, secondary, mainnet=True)

        rate = await estimator.estimate_fee_rate("fast")

        assert rate.value == 25_000
        assert rate.speed == FeeSpeed.FAST
        primary.fetch_fee_rate.assert_awaited_once_with("fast")
        secondary.fetch_fee_rate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mainnet_falls_back_to_secondary(self):
        primary = provider(error=UnknownProviderError("down", status_code=503))
        secondary = provider(10_240)
        estimator = FeeEstimator(primary, secondary, mainnet=True)

        rate = await estimator.estimate_fee_rate()

        assert rate.value == 10_240
        secondary.fetch_fee_rate.assert_awaited_once_with("normal")

    @pytest.mark.asyncio
    async def test_testnet_asks_primary_only(self):
        primary = provider(error=UnknownProviderError("down"))
        secondary = provider(10_240)
        estimator = FeeEstimator(primary, secondary, mainnet=False)

        with pytest.raises(ProviderError):
            await estimator.estimate_fee_rate()

        secondary.fetch_fee_rate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_both_fail(self):
        primary = provider(error=UnknownProviderError("down"))
        secondary = provider(error=UnknownProviderError("also down"))

        with pytest.raises(ProviderError):
            await FeeEstimator(primary, secondary, mainnet=True).estimate_fee_rate()


class TestFeeProviders:
    """Tests for the HTTP fee sources."""

    @pytest.mark.asyncio
    async def test_blockcypher_fee_keys(self, mock_client, json_response):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params.get("token") == "secret"
            return json_response(
                {"high_fee_per_kb": 30_000, "medium_fee_per_kb": 20_000, "low_fee_per_kb": 10_000}
            )

        client = BlockCypherClient(testnet=True, api_token="secret", client=mock_client(handler))

        assert await client.fetch_fee_rate("fast") == 30_000
        assert await client.fetch_fee_rate("normal") == 20_000
        assert await client.fetch_fee_rate("slow") == 10_000

    @pytest.mark.asyncio
    async def test_blockcypher_missing_key(self, mock_client, json_response):
        client = BlockCypherClient(client=mock_client(lambda r: json_response({})))

        with pytest.raises(UnknownProviderError):
            await client.fetch_fee_rate()

    @pytest.mark.asyncio
    async def test_oracle_scales_per_vbyte(self, mock_client, json_response):
        payload = {"fastestFee": 12, "halfHourFee": 8, "hourFee": 3.5}
        oracle = FeeOracleClient(client=mock_client(lambda r: json_response(payload)))

        assert await oracle.fetch_fee_rate("fast") == 12 * 1024
        assert await oracle.fetch_fee_rate("normal") == 8 * 1024
        assert await oracle.fetch_fee_rate("slow") == 3584

    @pytest.mark.asyncio
    async def test_oracle_http_error(self, mock_client):
        oracle = FeeOracleClient(client=mock_client(lambda r: httpx.Response(500)))

        with pytest.raises(UnknownProviderError) as exc_info:
            await oracle.fetch_fee_rate()
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "abc", {"sat": 1}, []])
    async def test_blockcypher_malformed_value(self, mock_client, json_response, value):
        payload = {"high_fee_per_kb": 30_000, "medium_fee_per_kb": value, "low_fee_per_kb": 10_000}
        client = BlockCypherClient(client=mock_client(lambda r: json_response(payload)))

        with pytest.raises(UnknownProviderError) as exc_info:
            await client.fetch_fee_rate("normal")
        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "abc", "NaN"])
    async def test_oracle_malformed_value(self, mock_client, json_response, value):
        payload = {"fastestFee": 12, "halfHourFee": value, "hourFee": 3}
        oracle = FeeOracleClient(client=mock_client(lambda r: json_response(payload)))

        with pytest.raises(UnknownProviderError) as exc_info:
            await oracle.fetch_fee_rate("normal")
        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_malformed_blockcypher_falls_back_on_mainnet(self, mock_client, json_response):
        """A null BlockCypher fee is a provider failure, so the oracle answers."""
        primary = BlockCypherClient(
            client=mock_client(lambda r: json_response({"medium_fee_per_kb": None}))
        )
        secondary = FeeOracleClient(
            client=mock_client(
                lambda r: json_response({"fastestFee": 12, "halfHourFee": 8, "hourFee": 3})
            )
        )

        rate = await FeeEstimator(primary, secondary, mainnet=True).estimate_fee_rate()

        assert rate.value == 8 * 1024
        assert rate.speed == FeeSpeed.NORMAL
