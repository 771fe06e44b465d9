"""Datasource commands - run health checks and queries from the shell.

The CLI plays the host: it loads the config file, constructs a Bridge,
calls one entry point and disposes of it.
"""

import asyncio
import json
import string
import sys

import click
import structlog

from ..config import load_config
from ..datasource import Bridge
from ..errors import BridgeError, ConfigurationError
from ..formatters import print_health, print_query_response
from ..health import HealthVerdict
from ..query import DataQuery, QueryDataResponse
from ..telemetry import BridgeTelemetry

logger = structlog.get_logger(__name__)

metrics_port_option = click.option(
    "--metrics-port",
    envvar="HOMELAB_BRIDGE_METRICS_PORT",
    type=int,
    default=None,
    help="Serve bridge telemetry on this port while the command runs",
)


def _ref_ids(count: int) -> list[str]:
    """Query ids A, B, ..., Z, AA, AB, ..."""
    letters = string.ascii_uppercase
    ids = []
    for index in range(count):
        ref_id = ""
        n = index
        while True:
            ref_id = letters[n % 26] + ref_id
            n = n // 26 - 1
            if n < 0:
                break
        ids.append(ref_id)
    return ids


def _create_bridge(ctx: click.Context, metrics_port: int | None) -> Bridge:
    config = load_config(ctx.obj["config_path"])
    telemetry = BridgeTelemetry()
    if metrics_port:
        try:
            telemetry.serve(metrics_port)
        except OSError as e:
            raise ConfigurationError(
                message=f"cannot serve telemetry on port {metrics_port}: {e}"
            ) from e
        logger.info("serving bridge telemetry", port=metrics_port)
    return Bridge.create(
        config.json_data,
        config.secure_json_data,
        config.transport_options,
        telemetry=telemetry,
    )


def _fail(message: str) -> None:
    logger.error("command failed", error=message)
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.command("health")
@metrics_port_option
@click.pass_context
def health_command(ctx: click.Context, metrics_port: int | None) -> None:
    """Check liveness of the monitored system.

    Exits with status 1 if the probe reports an error.
    """

    async def _run() -> HealthVerdict:
        async with _create_bridge(ctx, metrics_port) as bridge:
            return await bridge.check_health()

    try:
        verdict = asyncio.run(_run())
    except BridgeError as e:
        _fail(e.message)
        return

    if ctx.obj["json_output"]:
        click.echo(json.dumps(verdict.to_dict(), indent=2))
    else:
        print_health(verdict)

    if not verdict.is_ok:
        sys.exit(1)


@click.command("query")
@click.argument("metrics", nargs=-1)
@metrics_port_option
@click.pass_context
def query_command(ctx: click.Context, metrics: tuple[str, ...], metrics_port: int | None) -> None:
    """Scrape the metrics endpoint and look up METRICS.

    \b
    Example usage:
      homelab-bridge query go_threads
      homelab-bridge --json query go_threads process_open_fds
    """
    queries = [
        DataQuery(ref_id=ref_id, payload={"metric": metric})
        for ref_id, metric in zip(_ref_ids(len(metrics)), metrics)
    ]

    async def _run() -> QueryDataResponse:
        async with _create_bridge(ctx, metrics_port) as bridge:
            return await bridge.query_data(queries)

    try:
        response = asyncio.run(_run())
    except BridgeError as e:
        _fail(e.message)
        return

    if ctx.obj["json_output"]:
        click.echo(json.dumps(response.to_dict(), indent=2))
    else:
        click.echo("Query results:")
        print_query_response(response)

    if any(entry.error is not None for entry in response.responses.values()):
        sys.exit(1)
