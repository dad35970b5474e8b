"""Output formatting helpers."""

from decimal import Decimal


def format_money(amount: Decimal) -> str:
    """Render an amount as Turkish lira with two decimals, e.g. ``₺1,234.50``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}₺{abs(amount):,.2f}"


def format_percent(value: Decimal) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.2f}%"
