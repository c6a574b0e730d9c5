#!/usr/bin/env python3
"""
hearth CLI - look at, and try out, a connection property bag.

Property bags are YAML files, either flat (``hearth.connection.port: 9042``)
or nested (``hearth: {connection: {port: 9042}}``).
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import yaml

from hearth.configs import (
    flatten_properties,
    policy_config_from_properties,
    read_conf_from_properties,
)
from hearth.connections import (
    build_driver_configuration,
    factory_from_properties,
    factory_names,
    session_from_properties,
)
from hearth.utility.exceptions import ConfigValidationError, HearthError

RELEASE_VERSION_QUERY = "SELECT release_version FROM system.local"


def load_properties(path: Path) -> Dict[str, Any]:
    """Read a YAML property bag and flatten it to dotted keys."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"{path} must contain a mapping of properties, "
            f"got {type(data).__name__}"
        )
    return flatten_properties(data)


@click.group()
@click.version_option(package_name="hearth")
def hearth():
    """
    hearth - policy-driven cluster sessions

    Build, inspect and test connection configurations from property bags.
    """
    pass


@hearth.command()
@click.argument(
    "props_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--parallelism",
    "-p",
    type=click.IntRange(min=1),
    default=None,
    help="Available parallelism used for the default pool size "
    "(default: CPU count)",
)
def inspect(props_file: Path, parallelism: Optional[int]):
    """Show the driver configuration a property bag produces.

    PROPS_FILE: YAML property bag

    Nothing connects to the cluster. Passwords are masked.
    """
    try:
        properties = load_properties(props_file)
        factory = factory_from_properties(properties)
        config = policy_config_from_properties(
            properties, factory_properties=factory.properties
        )
        read_conf = read_conf_from_properties(properties)
        driver_config = build_driver_configuration(
            config,
            parallelism=(lambda: parallelism) if parallelism else None,
        )
    except HearthError as e:
        click.echo(f"Configuration error: {e}")
        sys.exit(1)

    report = {
        "factory": factory.factory_name or type(factory).__name__,
        "driver_configuration": driver_config.describe(),
        "read": read_conf.model_dump(),
    }
    click.echo(yaml.safe_dump(report, sort_keys=False, default_flow_style=False))


@hearth.command()
@click.argument(
    "props_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
def ping(props_file: Path):
    """Connect with a property bag and print the cluster version.

    PROPS_FILE: YAML property bag
    """
    try:
        properties = load_properties(props_file)
        with session_from_properties(properties) as session:
            row = session.execute(RELEASE_VERSION_QUERY).one()
    except HearthError as e:
        click.echo(f"Connection failed: {e}")
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}")
        sys.exit(1)

    if not row:
        click.echo("Connected, but system.local returned no rows")
        sys.exit(1)
    click.echo(f"Connected: release_version {row['release_version']}")


@hearth.command()
def factories():
    """List the registered connection factories."""
    for name in factory_names():
        click.echo(name)


if __name__ == "__main__":
    hearth()
