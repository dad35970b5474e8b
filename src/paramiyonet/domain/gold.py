"""Gold lot ledger: FIFO-costed purchase lots and mark-to-market valuation.

Holdings are a mapping from gold type to the lots of that type, oldest
first. Every function here is pure and returns new holdings rather than
mutating the ones it was given.
"""

from datetime import datetime
from decimal import Decimal
from typing import Mapping

from paramiyonet.domain.entities import GoldBreakdown, GoldLot, GoldType, GoldValuation
from paramiyonet.domain.errors import (
    InsufficientHoldings,
    ValidationError,
    insufficient_holdings,
    non_positive_amount,
)

GoldHoldings = dict[GoldType, tuple[GoldLot, ...]]

_ZERO = Decimal("0")
_PERCENT_PLACES = Decimal("0.01")


def add_lot(
    holdings: Mapping[GoldType, tuple[GoldLot, ...]],
    gold_type: GoldType,
    quantity: Decimal,
    unit_price: Decimal,
    purchase_date: datetime,
) -> GoldHoldings:
    """Append a purchase lot to the holdings of ``gold_type``.

    Lots are never merged so that each purchase keeps its own cost basis.

    Raises:
        ValidationError: If quantity is not positive or unit price is negative
    """
    if quantity <= 0:
        raise ValidationError(non_positive_amount(quantity))
    if unit_price < 0:
        raise ValidationError(f"Unit price cannot be negative (got {unit_price})")

    updated = dict(holdings)
    lot = GoldLot(
        gold_type=gold_type,
        quantity=quantity,
        initial_price=unit_price,
        purchase_date=purchase_date,
    )
    updated[gold_type] = tuple(holdings.get(gold_type, ())) + (lot,)
    return updated


def total_quantity(holdings: Mapping[GoldType, tuple[GoldLot, ...]], gold_type: GoldType) -> Decimal:
    """Sum of lot quantities held for one gold type."""
    return sum((lot.quantity for lot in holdings.get(gold_type, ())), _ZERO)


def sell(
    holdings: Mapping[GoldType, tuple[GoldLot, ...]],
    gold_type: GoldType,
    quantity: Decimal,
    unit_price: Decimal,
) -> tuple[GoldHoldings, Decimal]:
    """Sell ``quantity`` of ``gold_type``, consuming the oldest lots first.

    Args:
        holdings: Current holdings
        gold_type: Gold type to sell
        quantity: Quantity to sell
        unit_price: Current unit sale price

    Returns:
        Tuple of (remaining holdings, realized sale value)

    Raises:
        ValidationError: If quantity is not positive
        InsufficientHoldings: If quantity exceeds the total held for the type
    """
    if quantity <= 0:
        raise ValidationError(non_positive_amount(quantity))

    available = total_quantity(holdings, gold_type)
    if quantity > available:
        raise InsufficientHoldings(insufficient_holdings(gold_type.value, available, quantity))

    lots = sorted(holdings.get(gold_type, ()), key=lambda lot: lot.purchase_date)
    remaining_to_sell = quantity
    surviving: list[GoldLot] = []
    for lot in lots:
        if remaining_to_sell <= 0:
            surviving.append(lot)
        elif lot.quantity <= remaining_to_sell:
            remaining_to_sell -= lot.quantity
        else:
            surviving.append(
                GoldLot(
                    gold_type=lot.gold_type,
                    quantity=lot.quantity - remaining_to_sell,
                    initial_price=lot.initial_price,
                    purchase_date=lot.purchase_date,
                )
            )
            remaining_to_sell = _ZERO

    updated = dict(holdings)
    if surviving:
        updated[gold_type] = tuple(surviving)
    else:
        updated.pop(gold_type, None)
    return updated, quantity * unit_price


def cost_basis(holdings: Mapping[GoldType, tuple[GoldLot, ...]], gold_type: GoldType) -> Decimal:
    """Original purchase value of the lots of one gold type."""
    return sum((lot.quantity * lot.initial_price for lot in holdings.get(gold_type, ())), _ZERO)


def profit_loss_percentage(profit_loss: Decimal, basis: Decimal) -> Decimal:
    """Profit/loss as a percentage of cost basis, rounded to 2 places."""
    if basis <= 0:
        return _ZERO
    return (profit_loss / basis * 100).quantize(_PERCENT_PLACES)


def valuate(
    holdings: Mapping[GoldType, tuple[GoldLot, ...]],
    prices: Mapping[GoldType, Decimal],
) -> GoldValuation:
    """Mark holdings to market and compute profit/loss per type and overall.

    The aggregate percentage is computed from summed value and cost basis,
    never by averaging per-type percentages.
    """
    breakdown = []
    total_value = _ZERO
    total_basis = _ZERO
    for gold_type in GoldType:
        lots = holdings.get(gold_type, ())
        if not lots:
            continue
        price = prices[gold_type]
        quantity = total_quantity(holdings, gold_type)
        value = quantity * price
        basis = cost_basis(holdings, gold_type)
        breakdown.append(
            GoldBreakdown(
                gold_type=gold_type,
                quantity=quantity,
                current_price=price,
                current_value=value,
                cost_basis=basis,
                profit_loss=value - basis,
                profit_loss_percentage=profit_loss_percentage(value - basis, basis),
            )
        )
        total_value += value
        total_basis += basis

    profit_loss = total_value - total_basis
    return GoldValuation(
        current_value=total_value,
        cost_basis=total_basis,
        profit_loss=profit_loss,
        profit_loss_percentage=profit_loss_percentage(profit_loss, total_basis),
        breakdown=tuple(breakdown),
    )


def market_value(
    holdings: Mapping[GoldType, tuple[GoldLot, ...]],
    prices: Mapping[GoldType, Decimal],
) -> Decimal:
    """Mark-to-market balance of a gold account."""
    return valuate(holdings, prices).current_value


def book_value(holdings: Mapping[GoldType, tuple[GoldLot, ...]]) -> Decimal:
    """Cost value of all lots, used as balance before any price is known."""
    return sum((cost_basis(holdings, gold_type) for gold_type in GoldType), _ZERO)


def best_known_value(
    holdings: Mapping[GoldType, tuple[GoldLot, ...]],
    prices: Mapping[GoldType, Decimal],
) -> Decimal:
    """Value holdings at known prices, falling back to cost for unpriced types."""
    total = _ZERO
    for gold_type in GoldType:
        if gold_type in prices:
            total += total_quantity(holdings, gold_type) * prices[gold_type]
        else:
            total += cost_basis(holdings, gold_type)
    return total
