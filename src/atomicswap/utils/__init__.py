"""Utility modules for atomicswap."""

from atomicswap.utils.polling import (
    UNBOUNDED,
    Bounded,
    Unbounded,
    is_empty_result,
    repeat_until_result,
)

__all__ = ["UNBOUNDED", "Bounded", "Unbounded", "is_empty_result", "repeat_until_result"]
