"""Amount and hex conversions.

Human amounts (BTC, token units) are ``Decimal``; on-chain amounts
(satoshis, wei, token base units) are ``int``.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

SATOSHI_DECIMALS = 8

Number = Union[Decimal, int, float, str]


def _precision(value: Decimal, decimals: int) -> int:
    """Digits needed to hold ``value`` scaled by ``10**decimals`` exactly."""
    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {value}")

    sign, digits, exponent = value.as_tuple()
    return len(digits) + max(exponent, 0) + abs(decimals) + 10


def to_base_units(amount: Number, decimals: int) -> int:
    """Convert a human amount to integer base units.

    Floats go through ``str`` so ``0.1`` means 0.1, not its binary
    approximation. Precision grows with the amount, so large token
    amounts at 18 decimals convert exactly.
    """
    value = Decimal(str(amount))

    with localcontext() as ctx:
        ctx.prec = _precision(value, decimals)
        scaled = value.scaleb(decimals)
        return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_base_units(value: int, decimals: int) -> Decimal:
    """Convert integer base units to a human amount."""
    base = Decimal(int(value))

    with localcontext() as ctx:
        ctx.prec = _precision(base, decimals)
        return base.scaleb(-decimals)


def btc_to_sats(btc: Number) -> int:
    """Convert BTC to satoshis."""
    return to_base_units(btc, SATOSHI_DECIMALS)


def sats_to_btc(sats: int) -> Decimal:
    """Convert satoshis to BTC."""
    return from_base_units(sats, SATOSHI_DECIMALS)


def strip_hex_prefix(value: str) -> str:
    if value.startswith(("0x", "0X")):
        return value[2:]
    return value


def to_prefixed_hex(value: Union[str, bytes]) -> str:
    """Normalize a hex string or raw bytes to ``0x``-prefixed hex."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return "0x" + strip_hex_prefix(value)
