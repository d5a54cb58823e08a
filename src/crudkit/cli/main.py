"""
crudkit CLI, the `crudkit` command.

Commands:
  crudkit get|post|put|delete PATH   Call a CRUD endpoint
  crudkit session <cmd>              Show, set or clear the stored session
  crudkit config <cmd>               Show or change client settings
"""

from pathlib import Path

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install crudkit[cli]")

from pydantic import ValidationError

from crudkit.api import AsyncAPI
from crudkit.config import ClientConfig
from crudkit.session import SessionStore
from crudkit.storage import FileStorage

console = Console()
CONFIG_DIR = Path.home() / ".crudkit"
CONFIG_FILE = CONFIG_DIR / "config.json"
STORAGE_FILE = CONFIG_DIR / "storage.json"
DEFAULT_SESSION_KEY = "session"


def _client_config() -> ClientConfig:
    """Config file, overridden by CRUDKIT_* environment variables."""
    return ClientConfig.resolve(CONFIG_FILE, session_key_name=DEFAULT_SESSION_KEY)


def _get_client() -> AsyncAPI:
    return AsyncAPI(config=_client_config(), storage=FileStorage(STORAGE_FILE))


def _get_session_store() -> SessionStore:
    return SessionStore(_client_config(), FileStorage(STORAGE_FILE))


@click.group()
@click.version_option("0.1.0")
def main():
    """crudkit CLI: call CRUD endpoints with a stored session."""


@click.group("config")
def config_group():
    """Client settings (~/.crudkit/config.json)."""


@config_group.command("show")
def config_show():
    """Print the effective settings."""
    console.print_json(_client_config().model_dump_json())


@config_group.command("set")
@click.argument("key", type=click.Choice(sorted(ClientConfig.model_fields)))
@click.argument("value")
def config_set(key, value):
    """Set one setting."""
    try:
        updated = ClientConfig.from_file(CONFIG_FILE).with_setting(key, value)
    except ValidationError as e:
        raise click.BadParameter(e.errors()[0]["msg"], param_hint="VALUE")
    updated.save(CONFIG_FILE)
    console.print(f"[green]{key} saved.[/green]")


# Register subcommands from separate modules
from crudkit.cli.requests import delete_cmd, get_cmd, post_cmd, put_cmd
from crudkit.cli.session import session

main.add_command(config_group)
main.add_command(get_cmd)
main.add_command(post_cmd)
main.add_command(put_cmd)
main.add_command(delete_cmd)
main.add_command(session)


if __name__ == "__main__":
    main()
