"""Polling helpers for eventually-consistent contract and explorer state.

Right after a transaction is broadcast, contract reads may still return the
pre-transaction state (zero balance, zero address) and the transaction
itself may not be visible yet. ``repeat_until_result`` keeps calling an
action until it returns something other than an empty sentinel.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from atomicswap.errors import RetryExhaustedError

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

DEFAULT_DELAY = 5.0


@dataclass(frozen=True)
class Bounded:
    """Call once, then retry at most ``retries`` more times."""

    retries: int

    def __post_init__(self):
        if self.retries < 0:
            raise ValueError("retries must be >= 0")


@dataclass(frozen=True)
class Unbounded:
    """Retry until a non-empty result appears."""

    pass


UNBOUNDED = Unbounded()

Attempts = Union[Bounded, Unbounded]


def is_empty_result(result: Any) -> bool:
    """Check whether a polled value means "not there yet".

    Empty values are ``None``, integer zero and the zero address.
    """
    if result is None:
        return True
    if isinstance(result, bool):
        return False
    if isinstance(result, int):
        return result == 0
    if isinstance(result, str):
        return result.lower() == ZERO_ADDRESS
    return False


async def repeat_until_result(
    attempts: Attempts,
    action: Callable[[], Awaitable[Any]],
    delay: float = DEFAULT_DELAY,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> Any:
    """Call ``action`` until it returns a non-empty result.

    Args:
        attempts: ``Bounded(n)`` or ``UNBOUNDED``
        action: Coroutine function with no arguments
        delay: Seconds to wait between calls
        sleep: Sleep coroutine (defaults to ``asyncio.sleep``)

    Returns:
        First non-empty result

    Raises:
        RetryExhaustedError: If bounded retries run out
    """
    sleep = sleep or asyncio.sleep
    remaining = attempts.retries if isinstance(attempts, Bounded) else None
    calls = 0

    while True:
        result = await action()
        calls += 1

        if not is_empty_result(result):
            return result

        if remaining is not None:
            if remaining == 0:
                logger.warning(f"Polling gave up after {calls} attempts")
                raise RetryExhaustedError(calls, result)
            remaining -= 1

        logger.debug(f"Empty result on attempt {calls}, retrying in {delay}s")
        await sleep(delay)
