"""Config commands - inspect the resolved bridge configuration."""

import json
import sys

import click

from ..config import load_config
from ..errors import ConfigurationError
from ..formatters import print_config_yaml

TRACKED_KEYS = ("path", "api_key", "timeout")


@click.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the resolved configuration with secrets masked."""
    try:
        config = load_config(ctx.obj["config_path"])
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    data = config.masked()
    sources = {key: config.get_source(key) for key in TRACKED_KEYS}

    if ctx.obj["json_output"]:
        click.echo(json.dumps({"values": data, "sources": sources}, indent=2))
        return

    click.echo("Homelab Bridge Configuration")
    click.echo()
    print_config_yaml(data)
    print_config_yaml(sources, section="sources")
