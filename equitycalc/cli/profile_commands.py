"""Profile CLI commands for Equity Calc.

Manages the tax profile (profile.yaml) - state, filing status, rates.
"""

import click
import yaml

from equitycalc.sdk import (
    ConfigNotFoundError,
    get_profile_path,
    get_profile_value,
    init_profile,
    load_profile,
    load_tax_settings,
    set_profile_value,
)


def _parse_value(value: str):
    """Numbers become int/float, everything else stays a string."""
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


@click.group()
def profile():
    """Manage your tax profile (profile.yaml).

    The profile's 'tax' section sets the state, filing status, other
    income and rate overrides used by every calculation. A portfolio's
    own 'tax' section overrides it.
    """
    pass


@profile.command("show")
def profile_show():
    """Show the profile file and the effective tax settings."""
    profile_path = get_profile_path(require_exists=False)

    click.echo(f"Profile: {profile_path}")

    if not profile_path.exists():
        click.echo("Location: not created (using default rates)")
        click.echo()
        click.echo("Create with:")
        click.echo("  equity-calc profile init")
    else:
        click.echo("---")
        click.echo(yaml.dump(load_profile(require_exists=False), default_flow_style=False, sort_keys=False))

    try:
        settings = load_tax_settings()
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))

    click.echo("Effective tax settings:")
    click.echo(f"  state: {settings.state} ({settings.state_rate:.2%})")
    click.echo(f"  filing_status: {settings.filing_status}")
    click.echo(f"  mode: {settings.mode}")
    click.echo(f"  federal_long_term_rate: {settings.federal_long_term_rate:.2%}")
    click.echo(f"  federal_short_term_rate: {settings.federal_short_term_rate:.2%}")
    if settings.other_income:
        click.echo(f"  other_income: ${settings.other_income:,.0f}")


@profile.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing profile.")
def profile_init(force):
    """Create a profile with default tax settings."""
    try:
        path = init_profile(force=force)
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created profile: {path}")


@profile.command("get")
@click.argument("key")
def profile_get(key):
    """Get a profile value.

    KEY is a dot-notation path like 'tax.state'.
    """
    value = get_profile_value(key)
    if value is None:
        raise click.ClickException(f"Key '{key}' not found in profile")
    if isinstance(value, (dict, list)):
        raise click.ClickException(
            f"Key '{key}' is a complex value. Use 'equity-calc profile show' to view."
        )
    click.echo(value)


@profile.command("set")
@click.argument("key")
@click.argument("value")
def profile_set(key, value):
    """Set a tax profile value.

    \b
    Examples:
        equity-calc profile set tax.state NY
        equity-calc profile set tax.other_income 180000
        equity-calc profile set tax.mode comprehensive
    """
    parsed_value = _parse_value(value)
    try:
        profile_file = set_profile_value(key, parsed_value)
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Set {key} = {parsed_value}")
    click.echo(f"Saved to: {profile_file}")
