"""CLI entry point for the Key Protect client."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from .config import DEFAULT_SERVICE_NAME, get_settings
from .errors import ApiException, MissingParametersError
from .key_protect_v2 import KeyProtectV2
from .logging import configure_logging
from .models import HEADER, PATH, ByteStream
from .operations import OPERATIONS


def _parse_params(operation_id: str, pairs: Tuple[str, ...]) -> Dict[str, Any]:
    """Turn ``name=value`` pairs into call parameters for ``operation_id``.

    Path and header values are kept as strings. Other values are JSON-decoded
    when possible; ``@path`` reads a file as bytes.
    """
    locations = {param.name: param.location for param in OPERATIONS[operation_id].params}
    params: Dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected name=value, got {pair!r}", param_hint="--param")
        if locations.get(name) in (PATH, HEADER):
            params[name] = raw
            continue
        if raw.startswith("@"):
            params[name] = Path(raw[1:]).read_bytes()
            continue
        try:
            params[name] = json.loads(raw)
        except ValueError:
            params[name] = raw
    return params


async def _invoke(
    service_name: str,
    service_url: Optional[str],
    operation_id: str,
    params: Dict[str, Any],
) -> None:
    async with KeyProtectV2.new_instance(service_name=service_name, service_url=service_url) as client:
        response = await client.call(operation_id, params)
        if isinstance(response.result, ByteStream):
            async for chunk in response.result:
                sys.stdout.buffer.write(chunk)
            sys.stdout.buffer.flush()
            return
        click.echo(json.dumps(response.result, indent=2))


@click.group()
def main():
    """Call IBM Key Protect API operations from the shell."""


@main.command()
@click.option("--filter", "text", default=None, help="Only list operations containing this text.")
def operations(text: Optional[str]):
    """List available operations."""
    for operation in OPERATIONS.values():
        if text and text not in operation.operation_id:
            continue
        click.echo(f"{operation.operation_id:40} {operation.method:6} {operation.path}")


@main.command()
@click.argument("operation_id", type=click.Choice(sorted(OPERATIONS)), metavar="OPERATION")
@click.option("-p", "--param", "pairs", multiple=True, help="Operation parameter as name=value (repeatable).")
@click.option("--service-name", default=DEFAULT_SERVICE_NAME, show_default=True, help="Prefix for environment configuration.")
@click.option("--service-url", default=None, help="Override the service URL.")
@click.option("--log-level", default=None, help="Logging level (defaults to <SERVICE_NAME>_LOG_LEVEL).")
def call(operation_id: str, pairs: Tuple[str, ...], service_name: str, service_url: Optional[str], log_level: Optional[str]):
    """Call OPERATION and print its result as JSON."""
    configure_logging(log_level or get_settings(service_name).log_level)
    params = _parse_params(operation_id, pairs)
    try:
        asyncio.run(_invoke(service_name, service_url, operation_id, params))
    except (MissingParametersError, ApiException, TypeError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":
    main()
