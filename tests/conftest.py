"""Pytest configuration and fixtures."""

import json
import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import base58
import httpx
import pytest

# Set test environment
os.environ["BITCOIN_NETWORK"] = "testnet"
os.environ["BLOCKCYPHER_API_TOKEN"] = ""
os.environ["SWAP_CONTRACT_ADDRESS"] = "0x" + "11" * 20
os.environ["TOKEN_ADDRESS"] = "0x" + "22" * 20
os.environ["POLL_DELAY"] = "0"
os.environ["DEBUG"] = "true"

from atomicswap.accounts.bitcoin import BitcoinAccount
from atomicswap.accounts.ethereum import EthereumAccount
from atomicswap.config import get_settings
from atomicswap.factory import reset_cache


@pytest.fixture(autouse=True)
def clear_caches():
    """Reset cached settings and factory instances between tests."""
    get_settings.cache_clear()
    reset_cache()
    yield
    get_settings.cache_clear()
    reset_cache()


@pytest.fixture
def private_key() -> bytes:
    """secp256k1 scalar 1, a well-known test key."""
    return (1).to_bytes(32, "big")


@pytest.fixture
def btc_wif(private_key) -> str:
    """Compressed testnet WIF for the test key."""
    return base58.b58encode_check(b"\xef" + private_key + b"\x01").decode()


@pytest.fixture
def btc_account(btc_wif) -> BitcoinAccount:
    return BitcoinAccount.from_wif(btc_wif, network="testnet")


@pytest.fixture
def eth_account(private_key) -> EthereumAccount:
    return EthereumAccount.from_key(private_key)


@pytest.fixture
def json_response():
    """Build an httpx response with a JSON body."""

    def _response(payload: Any, status_code: int = 200) -> httpx.Response:
        return httpx.Response(status_code, content=json.dumps(payload).encode())

    return _response


@pytest.fixture
def mock_client():
    """Build an httpx client answering every request from a handler."""

    def _client(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _client


class FakeEth:
    """Stand-in for ``AsyncWeb3.eth`` with awaitable attributes."""

    def __init__(self):
        self.gas_price_mock = AsyncMock(return_value=1_000_000_000)
        self.get_transaction_count = AsyncMock(return_value=7)
        self.send_raw_transaction = AsyncMock(return_value=b"\x12" * 32)
        self.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1, "blockNumber": 10})
        self.get_transaction = AsyncMock()
        self.swap_contract = MagicMock(name="swap_contract")
        self.token_contract = MagicMock(name="token_contract")
        self.contract = MagicMock(side_effect=self._contract)

    def _contract(self, address, abi):
        # the swap ABI carries createSwap, the token ABI does not
        if any(entry.get("name") == "createSwap" for entry in abi):
            return self.swap_contract
        return self.token_contract

    @property
    def gas_price(self):
        return self.gas_price_mock()


class FakeWeb3:
    def __init__(self):
        self.eth = FakeEth()


@pytest.fixture
def fake_w3() -> FakeWeb3:
    return FakeWeb3()


@pytest.fixture
def contract_call():
    """Build a contract function call with mocked estimate/build/call."""

    def _call(estimate: int = 50_000, result: Any = None) -> MagicMock:
        call = MagicMock()
        call.estimate_gas = AsyncMock(return_value=estimate)
        call.build_transaction = AsyncMock(
            side_effect=lambda params: {
                **params,
                "to": "0x" + "11" * 20,
                "data": "0x",
                "value": 0,
                "chainId": 11155111,
            }
        )
        call.call = AsyncMock(return_value=result)
        return call

    return _call
