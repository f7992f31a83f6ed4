"""CLI commands for seeding and resetting the demo account.

Usage:
    flask seed-demo            # Create the demo user and its default habits
    flask seed-demo --reset    # Archive everything and start over at baseline
"""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext


@click.command("seed-demo")
@click.option("--reset", is_flag=True, help="Archive existing habits and seed again")
@with_appcontext
def seed_demo_command(reset: bool):
    """Seed the demo user with the default tiered habits."""
    from habit_tks.core.users.services import ensure_demo_user

    user = ensure_demo_user()
    setup = current_app.extensions["setup_service"]
    if reset:
        result = setup.reset_account(user.id)
    elif setup.has_habits(user.id):
        click.echo(f"{user.email} already has habits; pass --reset to start over")
        return
    else:
        result = setup.setup_account(user.id)
    click.echo(result["message"])
    click.echo(f"Tier 2 unlocks on {result['tier2_unlock_date'].isoformat()}")


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(seed_demo_command)
