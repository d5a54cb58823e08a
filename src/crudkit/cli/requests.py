"""CLI: crudkit get|post|put|delete"""

import asyncio
import json

import click
from rich.console import Console

from crudkit.api import query_string
from crudkit.errors import APIError, ConfigurationError

console = Console()


def _get_client():
    from crudkit.cli.main import _get_client
    return _get_client()


def _parse_query(pairs: tuple[str, ...]) -> dict[str, str]:
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--query")
        params[key] = value
    return params


def _parse_data(data):
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--data")


def _call(method: str, path: str, payload=None):
    async def _request():
        async with _get_client() as client:
            if method == "get":
                return await client.read(path)
            if method == "post":
                return await client.create(path, payload)
            if method == "put":
                return await client.update(path, payload)
            return await client.destroy(path)

    try:
        result = asyncio.run(_request())
    except APIError as e:
        console.print(f"[red]HTTP {e.status}: {e.message}[/red]")
        raise SystemExit(1)
    except ConfigurationError as e:
        console.print(f"[red]{e.message}. Run `crudkit config set base_url <url>`.[/red]")
        raise SystemExit(1)

    if result is None:
        console.print("[dim](empty response)[/dim]")
    else:
        click.echo(json.dumps(result, indent=2))


@click.command("get")
@click.argument("path")
@click.option("-q", "--query", multiple=True, help="Query parameter as key=value")
def get_cmd(path, query):
    """Read PATH."""
    params = _parse_query(query)
    _call("get", path + (query_string(params) if params else ""))


@click.command("post")
@click.argument("path")
@click.option("-d", "--data", default=None, help="JSON payload")
def post_cmd(path, data):
    """Create at PATH."""
    _call("post", path, _parse_data(data))


@click.command("put")
@click.argument("path")
@click.option("-d", "--data", default=None, help="JSON payload")
def put_cmd(path, data):
    """Update PATH."""
    _call("put", path, _parse_data(data))


@click.command("delete")
@click.argument("path")
def delete_cmd(path):
    """Delete PATH."""
    _call("delete", path)
