"""Utility functions for paramiyonet."""

from paramiyonet.utils.date_parser import parse_date
from paramiyonet.utils.amount_parser import parse_amount
from paramiyonet.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_amount", "resolve_account"]
