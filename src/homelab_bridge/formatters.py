"""CLI output formatting helpers."""

from typing import Any

import click
import yaml

from .health import HealthVerdict
from .query import QueryDataResponse


def print_config_yaml(data: dict[str, Any], section: str | None = None) -> None:
    """Print config as YAML.

    Args:
        data: Configuration data
        section: Optional section name for header
    """
    if section:
        click.echo(f"{section}:")
        yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
        for line in yaml_str.splitlines():
            click.echo(f"  {line}")
    else:
        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))


def print_health(verdict: HealthVerdict) -> None:
    """Print a health verdict."""
    mark = "✓" if verdict.is_ok else "✗"
    click.echo(f"{mark} {verdict.status.value.upper()}: {verdict.message}")


def print_query_response(response: QueryDataResponse) -> None:
    """Print one line per query entry."""
    for ref_id, entry in response.responses.items():
        if entry.error is not None:
            click.echo(f"  ✗ {ref_id}: {entry.error}")
            continue
        row = entry.frames[0].row()
        click.echo(f"  {ref_id}: {row['metric_name']} = {row['metric_value']}")
