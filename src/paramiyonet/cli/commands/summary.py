"""Summary commands."""

import click
from paramiyonet.cli.formatting import format_money, format_percent
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.prices import PriceQuoteCache, TruncgilPriceProvider, ttl_from_env


@click.command("summary")
@click.option("--live", is_flag=True, help="Value gold at current market quotes")
@click.pass_context
def summary(ctx, live: bool):
    """Show the total balance and per-type balances.

    Credit cards count as their negative debt. Without --live, gold accounts
    count at their last recorded value.
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    prices = None
    if live:
        snapshot = PriceQuoteCache(TruncgilPriceProvider(), ttl=ttl_from_env()).get()
        prices = snapshot.prices
        click.echo(f"Gold prices: {snapshot.source} ({snapshot.timestamp:%Y-%m-%d %H:%M})")

    result = service.summary(ctx.obj["user_id"], gold_prices=prices)

    rows = [
        ("Cash", result.cash_balance),
        ("Debit cards", result.debit_card_balance),
        ("Credit cards", result.credit_card_balance),
        ("Savings", result.savings_balance),
        ("Investments", result.investment_balance),
        ("Gold", result.gold_balance),
    ]
    click.echo("\nBalances:")
    click.echo("-" * 40)
    for label, value in rows:
        click.echo(f"{label:15s} {format_money(value):>20s}")
    click.echo("-" * 40)
    click.echo(f"{'Total':15s} {format_money(result.total_balance):>20s}")

    if result.gold.cost_basis > 0:
        click.echo(
            f"\nGold profit/loss: {format_money(result.gold.profit_loss)} "
            f"({format_percent(result.gold.profit_loss_percentage)})"
        )


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
