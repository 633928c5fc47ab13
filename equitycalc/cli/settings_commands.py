"""Settings CLI commands for Equity Calc.

Manages settings.json - default portfolio, data directory, output format.
"""

from pathlib import Path

import click

from equitycalc.sdk import (
    ConfigNotFoundError,
    get_data_path,
    get_settings_path,
    load_settings,
    set_setting,
    unset_setting,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    \b
    Available settings:
    - portfolio: default portfolio YAML path
    - data_dir: custom data directory for exports
    - default_output_format: 'table' or 'json'
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    try:
        current = load_settings()
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective paths:")
    click.echo(f"  data_dir: {get_data_path()}")


@settings.command("set")
@click.argument("key", type=click.Choice(["portfolio", "data_dir", "default_output_format"]))
@click.argument("value")
def settings_set(key, value):
    """Set KEY to VALUE.

    \b
    Examples:
        equity-calc settings set portfolio ~/equity/portfolio.yaml
        equity-calc settings set default_output_format json
    """
    if key == "default_output_format" and value not in ("table", "json"):
        raise click.BadParameter("Must be 'table' or 'json'.", param_hint="VALUE")

    if key in ("portfolio", "data_dir"):
        path = Path(value).expanduser().resolve()
        if key == "portfolio" and not path.exists():
            click.secho(f"Note: {path} does not exist yet.", fg="yellow")
        if key == "data_dir" and path.exists() and not path.is_dir():
            raise click.ClickException(f"Path exists but is not a directory: {path}")
        value = str(path)

    try:
        settings_file = set_setting(key, value)
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Set {key}: {value}")
    click.echo(f"Saved to: {settings_file}")


@settings.command("unset")
@click.argument("key")
def settings_unset(key):
    """Remove KEY from settings.json, reverting to the default."""
    if unset_setting(key):
        click.echo(f"Cleared {key} setting.")
    else:
        click.echo(f"{key} was not set.")
