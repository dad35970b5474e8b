"""Main CLI entry point."""

import click
from paramiyonet.database.factories import create_sqlite_database
from paramiyonet.log import configure_logging

# Import and register all commands at module level
from paramiyonet.cli.commands import (
    account,
    card,
    gold,
    transaction,
    debt,
    recurring,
    budget,
    summary,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PARAMIYONET_DB_PATH environment variable)",
    envvar="PARAMIYONET_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    default="local",
    show_default=True,
    help="User whose records are managed (overrides PARAMIYONET_USER environment variable)",
    envvar="PARAMIYONET_USER",
)
@click.option("-v", "--verbose", is_flag=True, help="Log ledger events to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, verbose: bool):
    """ParamıYönet - Personal ledger.

    Track cash, bank and credit card accounts, gold holdings, debts,
    recurring payments and category budgets.
    """
    ctx.ensure_object(dict)
    configure_logging(level="INFO" if verbose else "WARNING")

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
card.register_commands(cli)
gold.register_commands(cli)
transaction.register_commands(cli)
debt.register_commands(cli)
recurring.register_commands(cli)
budget.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
