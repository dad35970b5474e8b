"""Credit card commands."""

import click
from paramiyonet.cli.account_resolution import resolve_account_or_exit
from paramiyonet.cli.error_handling import handle_domain_error
from paramiyonet.cli.formatting import format_money
from paramiyonet.cli.params import AMOUNT, DATE, as_datetime
from paramiyonet.domain import credit_card
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.errors import DomainError
from paramiyonet.domain.operations import CARD_PURCHASE_CATEGORY, LedgerOperations


@click.group()
def card_group():
    """Credit card status, payments and purchases."""
    pass


@card_group.command("status")
@click.argument("card", metavar="CARD")
@click.pass_context
def card_status(ctx, card: str) -> None:
    """Show limit, debt, minimum payment and interest of a card."""
    db = ctx.obj["db"]
    service = AccountService(db)
    card_id = resolve_account_or_exit(ctx, service, card)
    account = service.get_account(card_id)

    try:
        credit_card.require_card(account)
    except DomainError as e:
        handle_domain_error(ctx, e)

    debt = credit_card.current_debt(account)
    click.echo(f"\n{account.name}")
    click.echo("-" * 40)
    click.echo(f"Limit:            {format_money(credit_card.credit_limit(account))}")
    click.echo(f"Current debt:     {format_money(debt)}")
    click.echo(f"Available limit:  {format_money(credit_card.card_available_limit(account))}")
    click.echo(f"Minimum payment:  {format_money(credit_card.card_minimum_payment(account))}")
    click.echo(f"Interest rate:    {credit_card.effective_interest_rate(account):.2f}% / month")
    click.echo(f"Interest estimate: {format_money(credit_card.monthly_interest_estimate(debt))}")
    if account.statement_day is not None:
        click.echo(f"Statement day:    {account.statement_day}")
    if account.due_day is not None:
        click.echo(f"Due day:          {account.due_day}")


@card_group.command("pay")
@click.argument("card", metavar="CARD")
@click.argument("source", metavar="SOURCE_ACCOUNT")
@click.argument("amount", type=AMOUNT, required=False)
@click.option("--minimum", "pay_minimum", is_flag=True, help="Pay the minimum payment")
@click.option("--full", "pay_full", is_flag=True, help="Pay the whole debt")
@click.option("--date", "on_date", type=DATE, help="Payment date (default: now)")
@click.pass_context
def pay_card(ctx, card: str, source: str, amount, pay_minimum: bool, pay_full: bool, on_date) -> None:
    """Pay card debt from another account.

    Give an AMOUNT, or use --minimum / --full.

    Examples:
        paramiyonet card pay "Bonus" "Ana Hesap" 1500
        paramiyonet card pay "Bonus" "Ana Hesap" --minimum
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    card_id = resolve_account_or_exit(ctx, service, card)
    source_id = resolve_account_or_exit(ctx, service, source)

    if sum([amount is not None, pay_minimum, pay_full]) != 1:
        click.echo("Error: Give exactly one of AMOUNT, --minimum or --full", err=True)
        ctx.exit(1)

    try:
        if amount is None:
            account = service.require_account(card_id)
            credit_card.require_card(account)
            if pay_minimum:
                amount = credit_card.card_minimum_payment(account)
            else:
                amount = credit_card.current_debt(account)
        result = LedgerOperations(db).pay_credit_card(
            ctx.obj["user_id"], card_id, source_id, amount, date=as_datetime(on_date)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    account = service.get_account(card_id)
    click.echo(f"Paid {format_money(amount)} to '{account.name}' (transaction: {result.transaction_id})")
    click.echo(f"Remaining debt: {format_money(credit_card.current_debt(account))}")
    if result.warning:
        click.echo(f"Warning: {result.warning}")


@card_group.command("purchase")
@click.argument("card", metavar="CARD")
@click.argument("amount", type=AMOUNT)
@click.option("--category", default=CARD_PURCHASE_CATEGORY, show_default=True)
@click.option("--description", default="", help="Purchase description")
@click.option("--date", "on_date", type=DATE, help="Purchase date (default: now)")
@click.pass_context
def card_purchase(ctx, card: str, amount, category: str, description: str, on_date) -> None:
    """Charge a purchase to a card."""
    db = ctx.obj["db"]
    service = AccountService(db)
    card_id = resolve_account_or_exit(ctx, service, card)

    try:
        result = LedgerOperations(db).record_card_purchase(
            ctx.obj["user_id"], card_id, amount, category, description, as_datetime(on_date)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    account = service.get_account(card_id)
    click.echo(f"Charged {format_money(amount)} to '{account.name}' (transaction: {result.transaction_id})")
    click.echo(f"Available limit: {format_money(credit_card.card_available_limit(account))}")


def register_commands(cli):
    """Register credit card commands with main CLI."""
    cli.add_command(card_group, name="card")
