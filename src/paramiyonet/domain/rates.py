"""Credit card interest and minimum-payment rule table.

Monthly maximum rates published by the central bank, keyed by the debt
(or, at card creation, the credit limit) bracket.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from paramiyonet.domain.entities import InterestRates
from paramiyonet.domain.errors import ValidationError

REFERENCE_RATE = Decimal("3.11")

# (exclusive upper bound, regular, overdue); None means unbounded
_RATE_TIERS: tuple[tuple[Optional[Decimal], Decimal, Decimal], ...] = (
    (Decimal("25000"), Decimal("3.50"), Decimal("3.80")),
    (Decimal("150000"), Decimal("4.25"), Decimal("4.55")),
    (None, Decimal("4.75"), Decimal("5.05")),
)

CASH_ADVANCE_RATE = Decimal("5.00")
MIN_PAYMENT_RATE = Decimal("0.20")
RESTRUCTURING_REGULAR_RATE = Decimal("3.11")
RESTRUCTURING_OVERDUE_RATE = Decimal("5.30")

MIN_CARD_DAY = 1
MAX_CARD_DAY = 30
FEBRUARY_CARD_DAY = 28


def interest_rates(amount: Decimal = Decimal("0")) -> InterestRates:
    """Look up the interest tier for a debt or credit limit amount.

    Args:
        amount: Debt amount, or credit limit when configuring a new card

    Returns:
        InterestRates with reference, regular and overdue monthly percentages
    """
    for upper_bound, regular, overdue in _RATE_TIERS:
        if upper_bound is None or amount < upper_bound:
            return InterestRates(reference=REFERENCE_RATE, regular=regular, overdue=overdue)
    raise AssertionError("rate tiers must end with an unbounded tier")


def cash_advance_rate() -> Decimal:
    return CASH_ADVANCE_RATE


def min_payment_rate() -> Decimal:
    return MIN_PAYMENT_RATE


def restructuring_rates() -> tuple[Decimal, Decimal]:
    """Return ``(regular, overdue)`` rates for restructured card debt."""
    return RESTRUCTURING_REGULAR_RATE, RESTRUCTURING_OVERDUE_RATE


def validate_day(day: int, today: Optional[date] = None) -> int:
    """Validate a statement or due day of month.

    Accepts 1-30. When the current month is February a 30 is coerced to 28.
    The coercion looks at the month of ``today``, not at the month the day
    will eventually be applied to.

    Args:
        day: Day of month
        today: Reference date, defaults to the current date

    Returns:
        The validated (possibly coerced) day

    Raises:
        ValidationError: If day is outside 1-30
    """
    if isinstance(day, bool) or not isinstance(day, int):
        raise ValidationError(f"Day must be an integer (got {day!r})")
    if day < MIN_CARD_DAY or day > MAX_CARD_DAY:
        raise ValidationError(f"Day must be between {MIN_CARD_DAY} and {MAX_CARD_DAY} (got {day})")

    if today is None:
        today = date.today()
    if today.month == 2 and day == MAX_CARD_DAY:
        return FEBRUARY_CARD_DAY
    return day
