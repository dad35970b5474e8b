"""Gold account commands."""

from decimal import Decimal

import click
from paramiyonet.cli.account_resolution import resolve_account_or_exit
from paramiyonet.cli.error_handling import handle_domain_error
from paramiyonet.cli.formatting import format_money, format_percent
from paramiyonet.cli.params import AMOUNT, DATE, GOLD_TYPE, as_datetime
from paramiyonet.domain import gold
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.entities import GoldType
from paramiyonet.domain.errors import DomainError
from paramiyonet.domain.operations import LedgerOperations
from paramiyonet.domain.prices import PriceQuoteCache, TruncgilPriceProvider, ttl_from_env
from paramiyonet.utils.amount_parser import parse_amount


def _price_cache() -> PriceQuoteCache:
    return PriceQuoteCache(TruncgilPriceProvider(), ttl=ttl_from_env())


def _parse_prices(values: tuple[str, ...]) -> dict[GoldType, Decimal]:
    """Parse repeated ``TYPE=PRICE`` options."""
    prices = {}
    for value in values:
        code, sep, amount = value.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected TYPE=PRICE, got '{value}'", param_hint="--price")
        try:
            gold_type = GOLD_TYPE.convert(code, None, None)
            prices[gold_type] = parse_amount(amount)
        except (click.BadParameter, ValueError) as e:
            raise click.BadParameter(str(e), param_hint="--price") from e
    return prices


@click.group()
def gold_group():
    """Gold holdings: add lots, sell FIFO and show valuation."""
    pass


@gold_group.command("add")
@click.argument("account", metavar="GOLD_ACCOUNT")
@click.argument("gold_type", metavar="TYPE", type=GOLD_TYPE)
@click.argument("quantity", type=AMOUNT)
@click.argument("unit_price", metavar="UNIT_PRICE", type=AMOUNT)
@click.option("--date", "on_date", type=DATE, help="Purchase date (default: now)")
@click.pass_context
def add_gold(ctx, account: str, gold_type: GoldType, quantity, unit_price, on_date) -> None:
    """Record a gold purchase as a new lot.

    Examples:
        paramiyonet gold add "Altın" gram 10 4000
        paramiyonet gold add "Altın" quarter 2 6500 --date 2024-03-01
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        LedgerOperations(db).add_gold(
            ctx.obj["user_id"], account_id, gold_type, quantity, unit_price, as_datetime(on_date)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added {quantity} {gold_type.name.lower()} at {format_money(unit_price)}")


@gold_group.command("sell")
@click.argument("account", metavar="GOLD_ACCOUNT")
@click.argument("target", metavar="TARGET_ACCOUNT")
@click.argument("gold_type", metavar="TYPE", type=GOLD_TYPE)
@click.argument("quantity", type=AMOUNT)
@click.option("--price", "unit_price", type=AMOUNT, help="Unit sale price (default: current quote)")
@click.pass_context
def sell_gold(ctx, account: str, target: str, gold_type: GoldType, quantity, unit_price) -> None:
    """Sell gold, oldest lots first, crediting TARGET_ACCOUNT.

    Examples:
        paramiyonet gold sell "Altın" "Ana Hesap" gram 3 --price 4500
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    target_id = resolve_account_or_exit(ctx, service, target)

    if unit_price is None:
        snapshot = _price_cache().get()
        unit_price = snapshot.price_of(gold_type)
        click.echo(f"Using {snapshot.source} price {format_money(unit_price)}")

    try:
        result = LedgerOperations(db).sell_gold(
            ctx.obj["user_id"], account_id, target_id, gold_type, quantity, unit_price
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Sold {quantity} {gold_type.name.lower()} for {format_money(result.amount)} "
        f"(transaction: {result.transaction_id})"
    )


@gold_group.command("show")
@click.argument("account", metavar="GOLD_ACCOUNT")
@click.option("--price", "price_options", multiple=True, help="Current price as TYPE=PRICE (repeatable)")
@click.option("--offline", is_flag=True, help="Do not fetch quotes; value unpriced types at cost")
@click.pass_context
def show_gold(ctx, account: str, price_options: tuple[str, ...], offline: bool) -> None:
    """Show lots and profit/loss of a gold account."""
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.get_account(account_id)
    if not acc.is_gold:
        click.echo(f"Error: Account '{acc.name}' is not a gold account", err=True)
        ctx.exit(1)

    prices = _parse_prices(price_options)
    source = "manual"
    missing = [t for t in acc.gold_holdings if t not in prices]
    if missing and not offline:
        snapshot = _price_cache().get()
        source = snapshot.source
        prices = {**snapshot.prices, **prices}
    for gold_type in missing:
        if gold_type not in prices:
            # Unpriced types are shown at their average cost
            quantity = gold.total_quantity(acc.gold_holdings, gold_type)
            prices[gold_type] = gold.cost_basis(acc.gold_holdings, gold_type) / quantity

    valuation = gold.valuate(acc.gold_holdings, prices)
    click.echo(f"\n{acc.name} (prices: {source})")
    click.echo("-" * 80)
    if not valuation.breakdown:
        click.echo("No gold holdings.")
        return
    for row in valuation.breakdown:
        click.echo(
            f"{row.gold_type.name.lower():8s} | qty {row.quantity:>10} | "
            f"value {format_money(row.current_value):>14s} | "
            f"cost {format_money(row.cost_basis):>14s} | {format_percent(row.profit_loss_percentage)}"
        )
    click.echo("-" * 80)
    click.echo(f"Total value: {format_money(valuation.current_value)}")
    click.echo(
        f"Profit/loss: {format_money(valuation.profit_loss)} "
        f"({format_percent(valuation.profit_loss_percentage)})"
    )


def register_commands(cli):
    """Register gold commands with main CLI."""
    cli.add_command(gold_group, name="gold")
