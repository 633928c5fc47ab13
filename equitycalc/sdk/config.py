"""Configuration management for Equity Calc.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - portfolio: default portfolio YAML path
   - data_dir: where exports are written when no path is given
   - default_output_format: "table" or "json"

2. profile.yaml - User's tax profile
   - tax.state, tax.filing_status, tax.other_income
   - tax.federal_long_term_rate / federal_short_term_rate / state_rate overrides
   - tax.prior_amt_credits, tax.mode

Config directory resolution:
1. EQUITY_CALC_CONFIG_PATH environment variable (if set)
2. ~/.config/equity-calc/ (XDG_CONFIG_HOME fallback)

Data path follows the XDG Base Directory layout:
- Data: XDG_DATA_HOME/equity-calc/ or ~/.local/share/equity-calc/
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .schemas import TaxSettings
from .taxes.rates import get_state_rate

logger = logging.getLogger(__name__)

APP_NAME = "equity-calc"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"

SETTING_KEYS = ("portfolio", "data_dir", "default_output_format")

PROFILE_TAX_KEYS = (
    "state",
    "filing_status",
    "other_income",
    "mode",
    "tax_year",
    "federal_long_term_rate",
    "federal_short_term_rate",
    "state_rate",
    "prior_amt_credits",
)

DEFAULT_PROFILE = {
    "tax": {
        "state": "CA",
        "filing_status": "single",
        "other_income": 0,
        "mode": "simple",
    },
}


class ConfigNotFoundError(Exception):
    """Raised when no configuration is found or it cannot be used."""
    pass


class ProfileNotFoundError(Exception):
    """Raised when no profile is found."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. EQUITY_CALC_CONFIG_PATH environment variable
    2. ~/.config/equity-calc/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("EQUITY_CALC_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)

    Raises:
        ConfigNotFoundError: If the file exists but is not valid JSON
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigNotFoundError(f"Invalid settings file {settings_file}: {e}") from e


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Raises:
        ConfigNotFoundError: If key is not a known setting
    """
    if key not in SETTING_KEYS:
        raise ConfigNotFoundError(
            f"Unknown setting '{key}'. Valid settings: {', '.join(SETTING_KEYS)}"
        )
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def unset_setting(key: str) -> bool:
    """Remove a setting from settings.json.

    Returns:
        True if the key was present
    """
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_profile_path(require_exists: bool = False) -> Path:
    """Get the path to profile.yaml.

    Args:
        require_exists: If True, raises ProfileNotFoundError if not found

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    profile_path = get_config_dir() / PROFILE_FILENAME

    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found at {profile_path}\n\n"
            f"Create one with: equity-calc profile init"
        )

    return profile_path


def load_profile(require_exists: bool = True) -> dict:
    """Load the tax profile from profile.yaml.

    Returns:
        Profile dictionary (empty dict if not required and not found)

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    profile_path = get_profile_path(require_exists=require_exists)

    if not profile_path.exists():
        return {}

    with open(profile_path, "r") as f:
        return yaml.safe_load(f) or {}


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Save the tax profile to profile.yaml.

    Returns:
        Path to the saved profile file
    """
    if path is None:
        path = get_profile_path(require_exists=False)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False)

    return path


def init_profile(force: bool = False) -> Path:
    """Write the default profile.

    Raises:
        ConfigNotFoundError: If a profile already exists and force is False
    """
    path = get_profile_path(require_exists=False)
    if path.exists() and not force:
        raise ConfigNotFoundError(f"Profile already exists: {path} (use --force to overwrite)")
    return save_profile(DEFAULT_PROFILE, path)


def build_tax_settings(tax: Optional[dict] = None, **overrides: Any) -> TaxSettings:
    """Build TaxSettings from a profile-style 'tax' mapping.

    state_rate comes from the state table unless given explicitly.
    Keyword overrides win over mapping values; None overrides are ignored.

    Raises:
        ConfigNotFoundError: If the values do not form valid TaxSettings
    """
    values = dict(tax or {})
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if "state" in overrides and "state_rate" not in overrides:
        values.pop("state_rate", None)
    values.update(overrides)

    if "state" in values and values["state"]:
        values["state"] = str(values["state"]).upper()
        values.setdefault("state_rate", get_state_rate(values["state"]))

    try:
        return TaxSettings(**values)
    except ValidationError as e:
        raise ConfigNotFoundError(f"Invalid tax settings: {e}") from e


def load_tax_settings(**overrides: Any) -> TaxSettings:
    """TaxSettings from profile.yaml 'tax' section, or defaults without a profile."""
    profile = load_profile(require_exists=False)
    tax = profile.get("tax", {}) if isinstance(profile, dict) else {}
    if not tax:
        logger.debug("No tax profile configured, using default rates")
    return build_tax_settings(tax, **overrides)


def get_profile_value(key: str, default: Any = None) -> Any:
    """Get a profile value by dot-notation key (e.g. "tax.state")."""
    profile = load_profile(require_exists=False)

    value = profile
    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return default

    return value


def set_profile_value(key: str, value: Any) -> Path:
    """Set a tax profile value by dot-notation key.

    The resulting profile is validated before it is written.

    Raises:
        ConfigNotFoundError: If the key is unknown or the value is invalid
    """
    parts = key.split(".")
    if len(parts) != 2 or parts[0] != "tax" or parts[1] not in PROFILE_TAX_KEYS:
        valid = ", ".join(f"tax.{k}" for k in PROFILE_TAX_KEYS)
        raise ConfigNotFoundError(f"Unknown profile key '{key}'. Valid keys: {valid}")

    profile = load_profile(require_exists=False)
    tax = dict(profile.get("tax") or {})
    tax[parts[1]] = value
    if parts[1] == "state":
        tax.pop("state_rate", None)
    build_tax_settings(tax)

    profile["tax"] = tax
    return save_profile(profile)


def get_data_path() -> Path:
    """Get the data directory (settings data_dir, else XDG_DATA_HOME/equity-calc/).

    Returns:
        Path to the data directory (created if doesn't exist)
    """
    configured = get_setting("data_dir")
    if configured:
        data_path = Path(configured).expanduser()
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path
