"""Recover a swap secret from a mined withdraw transaction."""

import logging
from typing import Any, Awaitable, Callable, Optional

from web3.exceptions import TransactionNotFound

from atomicswap.ethereum.abi import SWAP_ABI, decode_function_input
from atomicswap.utils.polling import DEFAULT_DELAY, Bounded, repeat_until_result

logger = logging.getLogger(__name__)


class SecretExtractor:
    """Decode the first argument of a withdraw call.

    The transaction is polled because the node may not know about it yet
    right after broadcast.
    """

    def __init__(
        self,
        w3: Any,
        abi: Optional[list] = None,
        retries: int = 9,
        delay: float = DEFAULT_DELAY,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.w3 = w3
        self.abi = abi or SWAP_ABI
        self.retries = retries
        self.delay = delay
        self.sleep = sleep

    async def extract(self, tx_hash: str) -> Optional[str]:
        """Single attempt. Returns None if the secret is not available yet."""
        try:
            tx = await self.w3.eth.get_transaction(tx_hash)
        except TransactionNotFound:
            logger.debug(f"Transaction {tx_hash} not found yet")
            return None

        try:
            _, arguments = decode_function_input(self.abi, tx["input"])
            secret = next(iter(arguments.values()))
        except (ValueError, KeyError, TypeError, StopIteration) as e:
            logger.error(f"Cannot decode secret from {tx_hash}: {e}")
            return None

        if not isinstance(secret, (bytes, bytearray)):
            logger.error(f"First argument of {tx_hash} is not bytes: {secret!r}")
            return None

        return bytes(secret).hex()

    async def get_secret_from_tx_hash(self, tx_hash: str) -> str:
        """Secret as hex without ``0x``.

        Raises:
            RetryExhaustedError: If no secret could be decoded in time
        """
        return await repeat_until_result(
            Bounded(self.retries),
            lambda: self.extract(tx_hash),
            delay=self.delay,
            sleep=self.sleep,
        )
