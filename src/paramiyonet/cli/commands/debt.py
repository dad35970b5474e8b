"""Person-to-person debt commands."""

import click
from paramiyonet.cli.account_resolution import resolve_account_or_exit
from paramiyonet.cli.error_handling import handle_domain_error
from paramiyonet.cli.formatting import format_money
from paramiyonet.cli.params import AMOUNT, DATE, as_datetime
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.debt import DebtService
from paramiyonet.domain.entities import DebtType
from paramiyonet.domain.errors import DomainError


@click.group()
def debt_group():
    """Track money lent and borrowed."""
    pass


@debt_group.command("create")
@click.argument("person", metavar="PERSON")
@click.argument("amount", type=AMOUNT)
@click.option(
    "--type",
    "debt_type",
    type=click.Choice([t.value for t in DebtType]),
    default=DebtType.LENT.value,
    show_default=True,
)
@click.option("--account", required=True, help="Account name or ID the debt belongs to")
@click.option("--description", default="")
@click.option("--due", "due_date", type=DATE, help="Due date")
@click.pass_context
def create_debt(ctx, person: str, amount, debt_type: str, account: str, description: str, due_date):
    """Record money lent to or borrowed from PERSON.

    Examples:
        paramiyonet debt create "Ayşe" 500 --account Nakit
        paramiyonet debt create "Mehmet" 2000 --type borrowed --account "Ana Hesap"
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = DebtService(db)

    try:
        debt_id = service.create_debt(
            user_id=ctx.obj["user_id"],
            debt_type=DebtType(debt_type),
            person_name=person,
            amount=amount,
            account_id=account_id,
            description=description,
            due_date=as_datetime(due_date),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created debt with '{person}' for {format_money(amount)} (ID: {debt_id})")


@debt_group.command("list")
@click.pass_context
def list_debts(ctx):
    """List debts, newest first."""
    db = ctx.obj["db"]
    service = DebtService(db)

    debts = service.list_debts(ctx.obj["user_id"])
    if not debts:
        click.echo("No debts found.")
        return

    for debt in debts:
        click.echo(
            f"{debt.id} | {debt.debt_type.value:8s} | {debt.person_name:15s} | "
            f"{format_money(debt.current_amount):>12s} of {format_money(debt.original_amount):>12s} | "
            f"{debt.status.value}"
        )


@debt_group.command("pay")
@click.argument("debt_id", metavar="DEBT_ID")
@click.argument("amount", type=AMOUNT)
@click.option("--description", default="")
@click.option("--date", "on_date", type=DATE, help="Payment date (default: now)")
@click.pass_context
def pay_debt(ctx, debt_id: str, amount, description: str, on_date):
    """Record a repayment of a debt."""
    db = ctx.obj["db"]
    service = DebtService(db)

    try:
        debt = service.add_payment(debt_id, amount, as_datetime(on_date), description)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Recorded payment of {format_money(amount)}; remaining {format_money(debt.current_amount)} "
        f"({debt.status.value})"
    )


def register_commands(cli):
    """Register debt commands with main CLI."""
    cli.add_command(debt_group, name="debt")
