"""CLI: crudkit session show|set-token|clear"""

import json

import click
from rich.console import Console

console = Console()


def _get_store():
    from crudkit.cli.main import _get_session_store
    return _get_session_store()


@click.group()
def session():
    """Stored session management."""


@session.command("show")
def session_show():
    """Print the stored session."""
    current = _get_store().get_session()
    if current is None:
        console.print("[yellow]No session stored.[/yellow]")
        return
    click.echo(json.dumps(current, indent=2))


@session.command("set-token")
@click.argument("token")
def session_set_token(token):
    """Store TOKEN as the authorization token."""
    _get_store().set_session_token(token)
    console.print("[green]Token saved.[/green]")


@session.command("clear")
def session_clear():
    """Forget the stored session."""
    _get_store().clear()
    console.print("[green]Session cleared.[/green]")
