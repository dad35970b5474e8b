"""CLI error handling helpers."""

import click

from paramiyonet.domain.errors import DomainError, PartiallyAppliedError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, PartiallyAppliedError):
        click.echo(f"Affected records: {', '.join(error.record_ids)}", err=True)
    ctx.exit(1)
