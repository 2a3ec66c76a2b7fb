"""Money helpers"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal, str]

CENT = Decimal("0.01")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Coerce to a 2-place Decimal; None becomes 0"""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_float(value: Optional[Number]) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def format_idr(value: Optional[Number]) -> str:
    """Format as Indonesian Rupiah, e.g. 'Rp 1.250.000' (cents dropped)"""
    amount = to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(int(amount)):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def calculate_commission(price: Optional[Number], percentage: Optional[Number]) -> Optional[Decimal]:
    """Commission = price x percentage / 100, rounded to 2 places; None when either is not positive"""
    base = to_decimal(price)
    pct = Decimal(str(percentage or 0))
    if base <= 0 or pct <= 0:
        return None
    return (base * pct / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)
