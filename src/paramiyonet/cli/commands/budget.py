"""Category budget commands."""

import click
from paramiyonet.cli.error_handling import handle_domain_error
from paramiyonet.cli.formatting import format_money
from paramiyonet.cli.params import AMOUNT, DATE
from paramiyonet.domain.budget import BudgetService
from paramiyonet.domain.entities import BudgetPeriod
from paramiyonet.domain.errors import DomainError


@click.group()
def budget_group():
    """Set spending limits per expense category."""
    pass


def _budget_line(budget) -> str:
    flag = " OVER" if budget.is_exceeded else ""
    return (
        f"{budget.id} | {budget.category:15s} | "
        f"{format_money(budget.spent_amount):>12s} of {format_money(budget.budgeted_amount):>12s} | "
        f"{budget.progress_percentage:6.2f}% | {budget.start_date} - {budget.end_date}{flag}"
    )


@budget_group.command("create")
@click.argument("category", metavar="CATEGORY")
@click.argument("amount", type=AMOUNT)
@click.option(
    "--period",
    type=click.Choice([p.value for p in BudgetPeriod]),
    default=BudgetPeriod.MONTHLY.value,
    show_default=True,
)
@click.option("--start", "start_date", type=DATE, help="First day (default: start of this month or today)")
@click.option("--end", "end_date", type=DATE, help="Last day (default: end of the period)")
@click.pass_context
def create_budget(ctx, category: str, amount, period: str, start_date, end_date):
    """Limit spending in CATEGORY to AMOUNT.

    Examples:
        paramiyonet budget create Market 2000
        paramiyonet budget create Yemek 400 --period weekly --start 2024-03-04
    """
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        budget_id = service.create_budget(
            user_id=ctx.obj["user_id"],
            category=category,
            amount=amount,
            period=BudgetPeriod(period),
            start_date=start_date,
            end_date=end_date,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created {period} budget for '{category}': {format_money(amount)} (ID: {budget_id})")


@budget_group.command("list")
@click.option("--active", "active_only", is_flag=True, help="Only budgets that have not ended")
@click.pass_context
def list_budgets(ctx, active_only: bool):
    """List budgets with their last refreshed progress."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    if active_only:
        budgets = service.list_active_budgets(ctx.obj["user_id"])
    else:
        budgets = service.list_budgets(ctx.obj["user_id"])
    if not budgets:
        click.echo("No budgets found.")
        return

    for budget in budgets:
        click.echo(_budget_line(budget))


@budget_group.command("status")
@click.pass_context
def budget_status(ctx):
    """Recompute spending of active budgets from transactions."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    budgets = service.refresh_all(ctx.obj["user_id"])
    if not budgets:
        click.echo("No active budgets.")
        return

    for budget in budgets:
        click.echo(f"{_budget_line(budget)} | remaining {format_money(budget.remaining_amount)}")


@budget_group.command("update")
@click.argument("budget_id", metavar="BUDGET_ID")
@click.option("--amount", type=AMOUNT, help="New budgeted amount")
@click.option("--category", help="New category")
@click.option("--end", "end_date", type=DATE, help="New last day")
@click.pass_context
def update_budget(ctx, budget_id: str, amount, category, end_date):
    """Change a budget's amount, category or end date."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    fields = {}
    if amount is not None:
        fields["budgeted_amount"] = amount
    if category is not None:
        fields["category"] = category
    if end_date is not None:
        fields["end_date"] = end_date

    try:
        budget = service.update_budget(budget_id, **fields)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated budget: {_budget_line(budget)}")


@budget_group.command("delete")
@click.argument("budget_id", metavar="BUDGET_ID")
@click.pass_context
def delete_budget(ctx, budget_id: str):
    """Delete a budget."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        service.delete_budget(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted budget {budget_id}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
