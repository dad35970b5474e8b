"""Account management commands."""

import click
from paramiyonet.cli.account_resolution import resolve_account_or_exit
from paramiyonet.cli.error_handling import handle_domain_error
from paramiyonet.cli.formatting import format_money
from paramiyonet.cli.params import AMOUNT
from paramiyonet.domain import balance as balance_ledger
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.entities import AccountType
from paramiyonet.domain.errors import DomainError

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES),
    default=AccountType.CASH.value,
    show_default=True,
    help="Account type",
)
@click.option("--balance", type=AMOUNT, default="0", help="Opening balance")
@click.option("--limit", type=AMOUNT, help="Credit limit (credit cards)")
@click.option("--debt", type=AMOUNT, default="0", help="Opening debt (credit cards)")
@click.option("--statement-day", type=int, help="Statement day of month, 1-30 (credit cards)")
@click.option("--due-day", type=int, help="Payment due day of month, 1-30 (credit cards)")
@click.option("--interest-rate", type=AMOUNT, help="Monthly interest rate in percent (credit cards)")
@click.option("--color", default="#007AFF", show_default=True)
@click.option("--icon", default="wallet", show_default=True)
@click.option("--exclude-from-total", is_flag=True, help="Leave out of the total balance")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    balance,
    limit,
    debt,
    statement_day: int | None,
    due_day: int | None,
    interest_rate,
    color: str,
    icon: str,
    exclude_from_total: bool,
):
    """Create a new account.

    Examples:
        paramiyonet account create "Nakit"
        paramiyonet account create "Maaş" --type debit_card --balance 15000
        paramiyonet account create "Bonus" --type credit_card --limit 20000 --due-day 15
        paramiyonet account create "Altın" --type gold
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account_id = service.create_account(
            user_id=ctx.obj["user_id"],
            name=name,
            account_type=AccountType(account_type),
            initial_balance=balance,
            color=color,
            icon=icon,
            include_in_total_balance=not exclude_from_total,
            limit=limit,
            current_debt=debt,
            statement_day=statement_day,
            due_day=due_day,
            interest_rate=interest_rate,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(ctx.obj["user_id"], include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        flags = "" if acc.is_active else " (inactive)"
        value = balance_ledger.aggregation_value(acc)
        click.echo(
            f"{acc.id} | {acc.name:20s} | {acc.account_type.value:12s} | {format_money(value):>14s}{flags}"
        )


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account, hiding it from lists and totals.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.deactivate_account(account_id)
        click.echo(f"Deactivated account '{account}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account permanently.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(f"Delete account '{account_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("defaults")
@click.pass_context
def create_defaults(ctx) -> None:
    """Create the starter accounts (Ana Hesap and Nakit)."""
    db = ctx.obj["db"]
    service = AccountService(db)

    account_ids = service.create_default_accounts(ctx.obj["user_id"])
    for account_id in account_ids:
        acc = service.get_account(account_id)
        click.echo(f"Created account '{acc.name}' (ID: {account_id})")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
