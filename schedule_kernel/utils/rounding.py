"""
Half-up rounding for percentage and duration arithmetic.

Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``).
Schedule percentages and scaled durations round halves away from zero,
so every such computation goes through ``Decimal`` with ``ROUND_HALF_UP``.
"""

from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction


def round_half_up(numerator: int, denominator: int = 1) -> int:
    """
    Round ``numerator / denominator`` to the nearest int, halves up.

    Uses exact rational arithmetic so that ratios like 5/2 are never
    perturbed by float representation.

    Raises:
        ZeroDivisionError: If denominator is 0.
    """
    ratio = Fraction(numerator, denominator)
    quotient = Decimal(ratio.numerator) / Decimal(ratio.denominator)
    return int(quotient.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """``round_half_up(100 * part / whole)``; 0 when ``whole`` is 0."""
    if whole == 0:
        return 0
    return round_half_up(100 * part, whole)
