"""Transaction commands."""

from datetime import date, timedelta

import click
from dateutil.relativedelta import relativedelta
from paramiyonet.cli.account_resolution import resolve_account_or_exit
from paramiyonet.cli.error_handling import handle_domain_error
from paramiyonet.cli.formatting import format_money
from paramiyonet.cli.params import AMOUNT, DATE, as_datetime
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.entities import TransactionType
from paramiyonet.domain.errors import DomainError
from paramiyonet.domain.transaction import TransactionService
from paramiyonet.utils.date_parser import PERIODS, get_date_range, parse_month


@click.group()
def transaction_group():
    """Record and browse transactions."""
    pass


@transaction_group.command("add")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", type=AMOUNT)
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType]),
    default=TransactionType.EXPENSE.value,
    show_default=True,
)
@click.option("--category", required=True, help="Category label")
@click.option("--description", default="", help="Description")
@click.option("--date", "on_date", type=DATE, help="Transaction date (default: now)")
@click.pass_context
def add_transaction(ctx, account: str, amount, transaction_type: str, category: str, description: str, on_date):
    """Record income or an expense on an account.

    Examples:
        paramiyonet txn add "Nakit" 250 --category Market
        paramiyonet txn add "Ana Hesap" 30000 --type income --category Maaş
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = TransactionService(db)

    try:
        transaction_id = service.record_transaction(
            user_id=ctx.obj["user_id"],
            account_id=account_id,
            transaction_type=TransactionType(transaction_type),
            amount=amount,
            category=category,
            description=description,
            date=as_datetime(on_date),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded {transaction_type} of {format_money(amount)} (ID: {transaction_id})")


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--from", "start_date", type=DATE, help="First day (inclusive)")
@click.option("--to", "end_date", type=DATE, help="Last day (inclusive)")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of --from/--to")
@click.pass_context
def list_transactions(ctx, account: str | None, start_date, end_date, period: str | None):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    account_service = AccountService(db)
    service = TransactionService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, account_service, account)
    if period is not None:
        start_date, end_date = get_date_range(period)

    transactions = service.list_transactions(
        ctx.obj["user_id"], account_id=account_id, start_date=start_date, end_date=end_date
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    names = {acc.id: acc.name for acc in account_service.list_accounts(ctx.obj["user_id"], include_inactive=True)}
    for txn in transactions:
        click.echo(
            f"{txn.id} | {txn.date.date()} | {names.get(txn.account_id, txn.account_id):15s} | "
            f"{txn.category:20s} | {format_money(txn.signed_amount):>14s} | {txn.description}"
        )


@transaction_group.command("delete")
@click.argument("transaction_id", metavar="TRANSACTION_ID")
@click.pass_context
def delete_transaction(ctx, transaction_id: str):
    """Delete a transaction and reverse its balance effect."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("stats")
@click.argument("month", metavar="YYYY-MM")
@click.pass_context
def monthly_stats(ctx, month: str):
    """Income, expense and category totals of one month."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        year, month_number = parse_month(month)
    except ValueError as e:
        handle_domain_error(ctx, e)

    stats = service.monthly_stats(ctx.obj["user_id"], year, month_number)
    click.echo(f"Income:       {format_money(stats.total_income)}")
    click.echo(f"Expense:      {format_money(stats.total_expense)}")
    click.echo(f"Net:          {format_money(stats.net_amount)}")
    click.echo(f"Transactions: {stats.transaction_count}")

    start = date(year, month_number, 1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    breakdown = service.category_breakdown(ctx.obj["user_id"], start_date=start, end_date=end)
    if breakdown:
        click.echo("\nExpenses by category:")
        for category, total in breakdown:
            click.echo(f"  {category:20s} {format_money(total):>14s}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="txn")
