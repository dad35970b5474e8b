"""Credit card ledger rules.

Pure calculations over a card's limit and current debt. Persistence of the
results is the orchestrator's job (``paramiyonet.domain.operations``).
"""

from decimal import Decimal
from typing import Optional

from paramiyonet.domain.entities import Account
from paramiyonet.domain import rates
from paramiyonet.domain.errors import (
    LimitExceeded,
    OverpaymentRejected,
    ValidationError,
    limit_exceeded,
    non_positive_amount,
    overpayment,
    wrong_account_type,
)

_ZERO = Decimal("0")


def require_card(account: Account) -> None:
    """Raise ValidationError unless ``account`` is a credit card."""
    if not account.is_credit_card:
        raise ValidationError(wrong_account_type(account.name, ["credit_card"]))


def current_debt(account: Account) -> Decimal:
    return account.current_debt or _ZERO


def credit_limit(account: Account) -> Decimal:
    return account.limit or _ZERO


def available_limit(limit: Decimal, debt: Decimal) -> Decimal:
    """Unused credit, floored at zero."""
    return max(limit - debt, _ZERO)


def minimum_payment(debt: Decimal, rate: Optional[Decimal] = None) -> Decimal:
    """Minimum payment due on ``debt``.

    Args:
        debt: Current debt
        rate: Account-specific minimum payment rate, defaults to the legal 20%
    """
    if rate is None:
        rate = rates.min_payment_rate()
    return debt * rate


def monthly_interest_estimate(debt: Decimal, is_overdue: bool = False) -> Decimal:
    """Estimated interest for one month on ``debt``."""
    tier = rates.interest_rates(debt)
    rate = tier.overdue if is_overdue else tier.regular
    return debt * rate / 100


def card_available_limit(account: Account) -> Decimal:
    return available_limit(credit_limit(account), current_debt(account))


def card_minimum_payment(account: Account) -> Decimal:
    return minimum_payment(current_debt(account), account.min_payment_rate)


def apply_purchase(account: Account, amount: Decimal) -> Decimal:
    """Validate a purchase and return the card's new debt.

    Raises:
        ValidationError: If the account is not a card or amount is not positive
        LimitExceeded: If amount exceeds the available limit
    """
    require_card(account)
    if amount <= 0:
        raise ValidationError(non_positive_amount(amount))
    available = card_available_limit(account)
    if amount > available:
        raise LimitExceeded(limit_exceeded(account.name, available, amount))
    return current_debt(account) + amount


def apply_payment(account: Account, amount: Decimal) -> Decimal:
    """Validate a payment against the card debt and return the new debt.

    The source account balance is checked by the caller, which owns that
    account.

    Raises:
        ValidationError: If the account is not a card or amount is not positive
        OverpaymentRejected: If amount exceeds the current debt
    """
    require_card(account)
    if amount <= 0:
        raise ValidationError(non_positive_amount(amount))
    debt = current_debt(account)
    if amount > debt:
        raise OverpaymentRejected(overpayment(account.name, debt, amount))
    return max(debt - amount, _ZERO)


def is_below_minimum(account: Account, amount: Decimal) -> bool:
    """True when a custom payment leaves interest-bearing debt behind.

    Advisory only: the payment is still accepted.
    """
    debt = current_debt(account)
    return amount < card_minimum_payment(account) and amount < debt


def effective_interest_rate(account: Account) -> Decimal:
    """Regular monthly rate for the card.

    An explicitly configured rate wins; otherwise the rate of the current
    debt bracket applies.
    """
    if account.interest_rate is not None:
        return account.interest_rate
    return rates.interest_rates(current_debt(account)).regular
