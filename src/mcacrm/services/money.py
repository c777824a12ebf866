"""Minor/major currency unit conversion. Amounts are stored as integer cents."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from mcacrm.services.errors import ValidationError

Number = Union[int, float, Decimal, str]


def cents_to_dollars(cents: Optional[Number]) -> Optional[float]:
    """Convert stored cents to dollars rounded to 2 decimal places. None stays None."""
    if cents is None:
        return None
    dollars = (Decimal(str(cents)) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(dollars)


def dollars_to_cents(dollars: Optional[Number]) -> Optional[int]:
    """
    Convert a dollar amount to integer cents, rounding half up. None stays None.

    Raises:
        ValidationError: not a finite number.
    """
    if dollars is None:
        return None
    try:
        amount = Decimal(str(dollars))
    except InvalidOperation as exc:
        raise ValidationError("Invalid amount") from exc
    if not amount.is_finite():
        raise ValidationError("Invalid amount")
    cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)
