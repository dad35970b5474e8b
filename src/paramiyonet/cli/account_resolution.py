"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.errors import DomainError
from paramiyonet.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str
) -> str:
    """Resolve account name or ID for the current user, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, ctx.obj["user_id"], account)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
