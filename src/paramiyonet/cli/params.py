"""Click parameter types for amounts, dates and gold types."""

from datetime import date, datetime, time, UTC

import click

from paramiyonet.domain.entities import GoldType
from paramiyonet.utils.amount_parser import parse_amount
from paramiyonet.utils.date_parser import parse_date


class AmountType(click.ParamType):
    name = "amount"

    def convert(self, value, param, ctx):
        if not isinstance(value, str):
            return value
        try:
            return parse_amount(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class DateType(click.ParamType):
    name = "date"

    def convert(self, value, param, ctx):
        if isinstance(value, date):
            return value
        try:
            return parse_date(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class GoldTypeParam(click.ParamType):
    """Gold type by quote code (GRA) or name (gram), case-insensitive."""

    name = "gold_type"

    def convert(self, value, param, ctx):
        if isinstance(value, GoldType):
            return value
        key = value.strip().upper()
        for gold_type in GoldType:
            if key in (gold_type.value, gold_type.name):
                return gold_type
        choices = ", ".join(t.name.lower() for t in GoldType)
        self.fail(f"Unknown gold type '{value}' (choose from {choices})", param, ctx)


AMOUNT = AmountType()
DATE = DateType()
GOLD_TYPE = GoldTypeParam()


def as_datetime(day: date | None) -> datetime | None:
    """Start of ``day`` in UTC, or None."""
    if day is None:
        return None
    return datetime.combine(day, time.min, tzinfo=UTC)
