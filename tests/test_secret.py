"""Tests for secret recovery from withdraw transactions."""

from unittest.mock import AsyncMock

import pytest
from eth_abi import encode
from hexbytes import HexBytes
from web3.exceptions import TransactionNotFound

from atomicswap.errors import RetryExhaustedError
from atomicswap.ethereum.abi import SWAP_ABI, decode_function_input, function_selector, output_index
from atomicswap.ethereum.secret import SecretExtractor

PARTICIPANT = "0x" + "33" * 20

SECRET = bytes.fromhex("c0ffee" + "00" * 28 + "beef")


def abi_entry(name: str) -> dict:
    return next(e for e in SWAP_ABI if e["name"] == name)


def withdraw_input(secret: bytes = SECRET) -> HexBytes:
    entry = abi_entry("withdraw")
    return HexBytes(function_selector(entry) + encode(["bytes32", "address"], [secret, PARTICIPANT]))


class TestAbi:
    """Tests for call-data decoding."""

    def test_decode_withdraw(self):
        name, arguments = decode_function_input(SWAP_ABI, withdraw_input())

        assert name == "withdraw"
        assert arguments["_secret"] == SECRET
        assert arguments["_ownerAddress"].lower() == PARTICIPANT

    def test_decode_hex_string(self):
        name, _ = decode_function_input(SWAP_ABI, withdraw_input().hex())
        assert name == "withdraw"

    def test_unknown_selector(self):
        with pytest.raises(ValueError):
            decode_function_input(SWAP_ABI, b"\xde\xad\xbe\xef" + b"\x00" * 64)

    def test_truncated_arguments(self):
        with pytest.raises(ValueError):
            decode_function_input(SWAP_ABI, bytes(withdraw_input())[:20])

    def test_output_index(self):
        assert output_index(SWAP_ABI, "swaps", "balance") == 5
        with pytest.raises(ValueError):
            output_index(SWAP_ABI, "swaps", "missing")


class TestSecretExtractor:
    """Tests for polling the withdraw transaction."""

    @pytest.mark.asyncio
    async def test_secret_without_prefix(self, fake_w3):
        fake_w3.eth.get_transaction.return_value = {"input": withdraw_input()}
        extractor = SecretExtractor(fake_w3, sleep=AsyncMock())

        secret = await extractor.get_secret_from_tx_hash("0x" + "ab" * 32)

        assert secret == SECRET.hex()
        assert not secret.startswith("0x")

    @pytest.mark.asyncio
    async def test_waits_for_transaction(self, fake_w3):
        fake_w3.eth.get_transaction.side_effect = [
            TransactionNotFound("not yet"),
            TransactionNotFound("not yet"),
            {"input": withdraw_input()},
        ]
        sleep = AsyncMock()
        extractor = SecretExtractor(fake_w3, retries=9, delay=5, sleep=sleep)

        assert await extractor.get_secret_from_tx_hash("0x01") == SECRET.hex()
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up(self, fake_w3):
        fake_w3.eth.get_transaction.side_effect = TransactionNotFound("never")
        extractor = SecretExtractor(fake_w3, retries=2, sleep=AsyncMock())

        with pytest.raises(RetryExhaustedError):
            await extractor.get_secret_from_tx_hash("0x01")

        assert fake_w3.eth.get_transaction.await_count == 3

    @pytest.mark.asyncio
    async def test_undecodable_input(self, fake_w3):
        fake_w3.eth.get_transaction.return_value = {"input": HexBytes("0x1234")}
        extractor = SecretExtractor(fake_w3, sleep=AsyncMock())

        assert await extractor.extract("0x01") is None
