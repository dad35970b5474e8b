"""Recurring payment commands."""

from datetime import date

import click
from paramiyonet.cli.account_resolution import resolve_account_or_exit
from paramiyonet.cli.error_handling import handle_domain_error
from paramiyonet.cli.formatting import format_money
from paramiyonet.cli.params import AMOUNT, DATE
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.entities import RecurringFrequency
from paramiyonet.domain.errors import DomainError
from paramiyonet.domain.recurring import RecurringPaymentService


@click.group()
def recurring_group():
    """Schedule and process recurring payments."""
    pass


@recurring_group.command("create")
@click.argument("name", metavar="NAME")
@click.argument("amount", type=AMOUNT)
@click.option("--account", required=True, help="Account name or ID to pay from")
@click.option("--category", required=True, help="Category label")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in RecurringFrequency]),
    default=RecurringFrequency.MONTHLY.value,
    show_default=True,
)
@click.option("--start", "start_date", type=DATE, help="First payment date (default: today)")
@click.option("--end", "end_date", type=DATE, help="Last possible payment date")
@click.option("--description", default="")
@click.option("--manual", is_flag=True, help="Do not create transactions automatically")
@click.pass_context
def create_recurring(
    ctx, name: str, amount, account: str, category: str, frequency: str, start_date, end_date, description: str, manual: bool
):
    """Schedule a recurring payment.

    Examples:
        paramiyonet recurring create "Kira" 12000 --account "Ana Hesap" --category Kira
        paramiyonet recurring create "Netflix" 149.99 --account Bonus --category Abonelik --start 2024-01-05
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = RecurringPaymentService(db)

    try:
        payment_id = service.create_recurring_payment(
            user_id=ctx.obj["user_id"],
            name=name,
            amount=amount,
            category=category,
            account_id=account_id,
            frequency=RecurringFrequency(frequency),
            start_date=start_date or date.today(),
            end_date=end_date,
            description=description,
            auto_create_transaction=not manual,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Scheduled '{name}' {frequency} for {format_money(amount)} (ID: {payment_id})")


@recurring_group.command("list")
@click.pass_context
def list_recurring(ctx):
    """List recurring payments with a summary."""
    db = ctx.obj["db"]
    service = RecurringPaymentService(db)

    payments = service.list_recurring_payments(ctx.obj["user_id"])
    if not payments:
        click.echo("No recurring payments found.")
        return

    for payment in payments:
        state = "" if payment.is_active else " (inactive)"
        click.echo(
            f"{payment.id} | {payment.name:15s} | {payment.frequency.value:8s} | "
            f"{format_money(payment.amount):>12s} | next {payment.next_payment_date}{state}"
        )

    summary = service.summary(ctx.obj["user_id"])
    click.echo(f"\nMonthly total: {format_money(summary.total_monthly_amount)}")
    click.echo(f"Yearly total:  {format_money(summary.total_yearly_amount)}")
    click.echo(f"Upcoming (7 days): {summary.upcoming_count}, overdue: {summary.overdue_count}")


@recurring_group.command("process")
@click.option("--date", "on_date", type=DATE, help="Process as of this date (default: today)")
@click.pass_context
def process_recurring(ctx, on_date):
    """Create transactions for every due recurring payment."""
    db = ctx.obj["db"]
    service = RecurringPaymentService(db)

    created = service.process_due(ctx.obj["user_id"], on_date)
    click.echo(f"Processed {len(created)} recurring payment(s)")


def register_commands(cli):
    """Register recurring payment commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
