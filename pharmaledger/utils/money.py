import math
from decimal import Decimal, ROUND_HALF_UP

Q2 = Decimal("0.01")

# Two amounts closer than this are the same money
EPSILON = 0.005


def is_money(value) -> bool:
    """A real, finite number. NaN and infinity never reach a bill or ledger."""
    return isinstance(value, (int, float)) and math.isfinite(value)


def to_money(value) -> float:
    """Round to paise, half up, going through str() to avoid binary float noise."""
    return float(Decimal(str(value or 0.0)).quantize(Q2, rounding=ROUND_HALF_UP))


def gst_inclusive_tax(total: float, rate: float) -> float:
    # Tax is already inside the total: total - total / (1 + rate)
    total = float(total or 0.0)
    return to_money(total - total / (1 + rate))
