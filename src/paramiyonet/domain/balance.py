"""Account balance ledger: type-specific interpretation of ``balance``."""

from decimal import Decimal
from typing import Iterable, Mapping, Optional

from paramiyonet.domain import gold
from paramiyonet.domain.entities import (
    BALANCE_ACCOUNT_TYPES,
    Account,
    AccountSummary,
    AccountType,
    GoldType,
    GoldValuation,
)
from paramiyonet.domain.errors import ValidationError, wrong_account_type

_ZERO = Decimal("0")


def is_balance_account(account: Account) -> bool:
    """True for accounts whose balance is mutated directly by postings."""
    return account.account_type in BALANCE_ACCOUNT_TYPES


def posting_delta(account: Account, delta: Decimal) -> Decimal:
    """Validate a direct balance posting and return it unchanged.

    Raises:
        ValidationError: If the account's balance is derived (card or gold)
    """
    if not is_balance_account(account):
        raise ValidationError(
            wrong_account_type(account.name, [t.value for t in sorted(BALANCE_ACCOUNT_TYPES)])
        )
    return delta


def credit_card_balance(current_debt: Decimal) -> Decimal:
    """Stored balance convention for credit cards."""
    return _ZERO - current_debt


def gold_balance(account: Account, prices: Optional[Mapping[GoldType, Decimal]] = None) -> Decimal:
    """Balance of a gold account.

    Marked to market when prices are known, otherwise the stored balance
    (the last mark-to-market) is used.
    """
    if prices is None:
        return account.balance
    return gold.market_value(account.gold_holdings, prices)


def aggregation_value(account: Account) -> Decimal:
    """Contribution of one account to the total balance.

    Credit cards contribute ``-current_debt`` regardless of the stored
    balance, so a stale or positive stored value never flips the sign.
    """
    if account.is_credit_card:
        return _ZERO - (account.current_debt or _ZERO)
    return account.balance


def counts_toward_total(account: Account) -> bool:
    return account.is_active and account.include_in_total_balance


def total_balance(accounts: Iterable[Account]) -> Decimal:
    """Dashboard total over active accounts flagged for inclusion."""
    return sum(
        (aggregation_value(acc) for acc in accounts if counts_toward_total(acc)),
        _ZERO,
    )


def account_summary(
    accounts: Iterable[Account],
    gold_prices: Optional[Mapping[GoldType, Decimal]] = None,
) -> AccountSummary:
    """Build dashboard totals per account type.

    Args:
        accounts: Accounts of one user
        gold_prices: Current gold prices; stored gold balances are used without them

    Returns:
        AccountSummary with per-type balances and a gold valuation
    """
    accounts = [acc for acc in accounts if acc.is_active]
    per_type = {account_type: _ZERO for account_type in AccountType}
    merged_holdings: dict[GoldType, tuple] = {}

    for acc in accounts:
        if acc.is_gold:
            value = gold_balance(acc, gold_prices)
            for gold_type, lots in acc.gold_holdings.items():
                merged_holdings[gold_type] = merged_holdings.get(gold_type, ()) + tuple(lots)
        else:
            value = aggregation_value(acc)
        per_type[acc.account_type] += value

    total = _ZERO
    for acc in accounts:
        if not counts_toward_total(acc):
            continue
        total += gold_balance(acc, gold_prices) if acc.is_gold else aggregation_value(acc)

    if gold_prices is not None:
        gold_valuation = gold.valuate(merged_holdings, gold_prices)
    else:
        basis = gold.book_value(merged_holdings)
        value = per_type[AccountType.GOLD]
        gold_valuation = GoldValuation(
            current_value=value,
            cost_basis=basis,
            profit_loss=value - basis,
            profit_loss_percentage=gold.profit_loss_percentage(value - basis, basis),
        )

    return AccountSummary(
        total_balance=total,
        cash_balance=per_type[AccountType.CASH],
        debit_card_balance=per_type[AccountType.DEBIT_CARD],
        credit_card_balance=per_type[AccountType.CREDIT_CARD],
        savings_balance=per_type[AccountType.SAVINGS],
        investment_balance=per_type[AccountType.INVESTMENT],
        gold_balance=per_type[AccountType.GOLD],
        gold=gold_valuation,
    )
