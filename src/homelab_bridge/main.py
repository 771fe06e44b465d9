"""CLI main entry point."""

import click

from .commands.config import config_group
from .commands.datasource import health_command, query_command
from .shared.logging import configure_logging


@click.group()
@click.option("-c", "--config", type=click.Path(), help="Config file path")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option(
    "--log-level",
    envvar="HOMELAB_BRIDGE_LOG_LEVEL",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Log level (default: warning)",
)
@click.option("--log-file", envvar="HOMELAB_BRIDGE_LOG_FILE", help="Log to this file instead of stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    config: str | None,
    json_output: bool,
    log_level: str,
    log_file: str | None,
) -> None:
    """Homelab metrics bridge and health monitor."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["json_output"] = json_output

    configure_logging(log_level, log_file=log_file, json_output=json_output)


cli.add_command(health_command)
cli.add_command(query_command)
cli.add_command(config_group)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
