"""Flask CLI commands for Keep Run."""

from __future__ import annotations

import json

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("keeprun-cleanup")
    @click.option(
        "--retention-days",
        type=click.IntRange(min=1),
        default=None,
        help="Delete archived rows untouched for this many days (default from config)",
    )
    def keeprun_cleanup(retention_days: int | None) -> None:
        """Physically delete long-archived to-dos, tasks and time blocks."""

        from .extensions import get_context
        from .services.cleanup import CleanupAlreadyRunning, run_archived_cleanup

        ctx = get_context()
        days = retention_days or ctx.config.CLEANUP_RETENTION_DAYS
        click.echo(f"Cleaning up archived data older than {days} days...")
        try:
            result = run_archived_cleanup(ctx.session_factory, retention_days=days)
        except CleanupAlreadyRunning as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(json.dumps(result.to_dict(), indent=2))

    @app.cli.command("keeprun-token")
    @click.argument("user_id")
    @click.argument("email")
    def keeprun_token(user_id: str, email: str) -> None:
        """Mint a development bearer token for USER_ID / EMAIL."""

        from .extensions import get_context

        ctx = get_context()
        if not ctx.config.DEV_MODE:
            raise click.ClickException("Tokens can only be minted in dev mode.")
        click.echo(ctx.verifier.issue(user_id, email))
