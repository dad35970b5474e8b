"""Tests for person-to-person debts."""

import pytest
from decimal import Decimal

from paramiyonet.domain.debt import payment_outcome
from paramiyonet.domain.entities import DebtStatus, DebtType
from paramiyonet.domain.errors import AccountNotFound, ConflictError, RecordNotFound, ValidationError


@pytest.fixture
def lent_debt(debt_service, user_id, cash_account):
    """1000 lent to Ayşe."""
    debt_id = debt_service.create_debt(user_id, DebtType.LENT, "Ayşe", Decimal("1000"), cash_account.id)
    return debt_service.get_debt(debt_id)


def test_payment_outcome():
    assert payment_outcome(Decimal("1000"), Decimal("0")) == (Decimal("1000"), DebtStatus.ACTIVE)
    assert payment_outcome(Decimal("1000"), Decimal("400")) == (Decimal("600"), DebtStatus.PARTIAL)
    assert payment_outcome(Decimal("1000"), Decimal("1000")) == (Decimal("0"), DebtStatus.PAID)
    assert payment_outcome(Decimal("1000"), Decimal("1200")) == (Decimal("0"), DebtStatus.PAID)


def test_create_debt(lent_debt, cash_account):
    assert lent_debt.debt_type == DebtType.LENT
    assert lent_debt.person_name == "Ayşe"
    assert lent_debt.original_amount == Decimal("1000")
    assert lent_debt.current_amount == Decimal("1000")
    assert lent_debt.paid_amount == Decimal("0")
    assert lent_debt.status == DebtStatus.ACTIVE
    assert lent_debt.account_id == cash_account.id
    assert lent_debt.payments == ()


def test_create_debt_validation(debt_service, user_id, cash_account):
    with pytest.raises(ValidationError):
        debt_service.create_debt(user_id, DebtType.BORROWED, "  ", Decimal("10"), cash_account.id)
    with pytest.raises(ValidationError):
        debt_service.create_debt(user_id, DebtType.BORROWED, "Mehmet", Decimal("-10"), cash_account.id)
    with pytest.raises(AccountNotFound):
        debt_service.create_debt(user_id, DebtType.BORROWED, "Mehmet", Decimal("10"), "missing")


def test_partial_then_full_payment(debt_service, lent_debt):
    debt = debt_service.add_payment(lent_debt.id, Decimal("400"), description="İlk taksit")
    assert debt.status == DebtStatus.PARTIAL
    assert debt.paid_amount == Decimal("400")
    assert debt.current_amount == Decimal("600")
    assert len(debt.payments) == 1
    assert debt.payments[0].description == "İlk taksit"

    debt = debt_service.add_payment(lent_debt.id, Decimal("600"))
    assert debt.status == DebtStatus.PAID
    assert debt.current_amount == Decimal("0")
    assert [p.amount for p in debt.payments] == [Decimal("400"), Decimal("600")]


def test_paying_a_paid_debt_is_rejected(debt_service, lent_debt):
    debt_service.add_payment(lent_debt.id, Decimal("1000"))

    with pytest.raises(ConflictError):
        debt_service.add_payment(lent_debt.id, Decimal("1"))


def test_non_positive_payment_rejected(debt_service, lent_debt):
    with pytest.raises(ValidationError):
        debt_service.add_payment(lent_debt.id, Decimal("0"))
    assert debt_service.get_debt(lent_debt.id).payments == ()


def test_payment_on_missing_debt(debt_service):
    with pytest.raises(RecordNotFound):
        debt_service.add_payment("missing", Decimal("10"))


def test_list_and_delete(debt_service, user_id, cash_account, lent_debt):
    other_id = debt_service.create_debt(user_id, DebtType.BORROWED, "Mehmet", Decimal("250"), cash_account.id)

    debts = debt_service.list_debts(user_id)
    assert {d.id for d in debts} == {lent_debt.id, other_id}
    assert debt_service.list_debts("someone-else") == []

    debt_service.delete_debt(other_id)
    assert debt_service.get_debt(other_id) is None
    with pytest.raises(RecordNotFound):
        debt_service.delete_debt(other_id)


def test_debts_do_not_move_balances(debt_service, account_service, lent_debt, cash_account):
    debt_service.add_payment(lent_debt.id, Decimal("400"))
    assert account_service.get_account(cash_account.id).balance == Decimal("1000")
