"""Decimal Normalization: put supply and reserves on a common fixed-point scale.

Invariants:
    - Only the side with fewer decimals is scaled, and only upward (no precision loss)
    - Every intermediate result fits in an unsigned 256-bit word, else NormalizationOverflowError
    - Negative inputs are rejected: both sides are unsigned quantities
"""

from porgate.core.domain_types import UINT256_MAX
from porgate.core.errors import NormalizationOverflowError


def checked_mul(a: int, b: int) -> int:
    """Multiply two unsigned words, raising instead of wrapping."""
    if a < 0 or b < 0:
        raise ValueError(f"unsigned operands required, got {a} * {b}")
    product = a * b
    if product > UINT256_MAX:
        raise NormalizationOverflowError(a, 0)
    return product


def scale_up(value: int, exponent: int) -> int:
    """Return value * 10**exponent with 256-bit overflow checking."""
    if exponent < 0:
        raise ValueError(f"exponent must be non-negative: {exponent}")
    if exponent == 0:
        return value
    factor = 10 ** exponent
    if factor > UINT256_MAX:
        raise NormalizationOverflowError(value, exponent)
    try:
        return checked_mul(value, factor)
    except NormalizationOverflowError:
        raise NormalizationOverflowError(value, exponent)


def normalize_pair(
    supply: int, supply_decimals: int, reserves: int, reserve_decimals: int,
) -> tuple[int, int]:
    """Scale supply and reserves onto the larger of the two decimal precisions.

    Returns (normalized_supply, normalized_reserves).
    """
    if supply_decimals < reserve_decimals:
        supply = scale_up(supply, reserve_decimals - supply_decimals)
    elif supply_decimals > reserve_decimals:
        reserves = scale_up(reserves, supply_decimals - reserve_decimals)
    return supply, reserves
