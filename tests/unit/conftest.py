"""Shared fixtures for unit tests."""

import json
from datetime import date

import pytest
import yaml


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config and data directories at a temp location for every test."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    config_dir.mkdir()
    data_dir.mkdir()

    monkeypatch.setenv("EQUITY_CALC_CONFIG_PATH", str(config_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    return {"config_dir": config_dir, "data_dir": data_dir}


@pytest.fixture
def write_settings(isolated_config):
    """Write settings.json into the isolated config dir."""
    def _write(settings: dict):
        path = isolated_config["config_dir"] / "settings.json"
        path.write_text(json.dumps(settings))
        return path
    return _write


@pytest.fixture
def write_profile(isolated_config):
    """Write profile.yaml into the isolated config dir."""
    def _write(profile: dict):
        path = isolated_config["config_dir"] / "profile.yaml"
        path.write_text(yaml.dump(profile))
        return path
    return _write


def _make_grant(**overrides) -> dict:
    """Grant record: 1,200 ISO shares, 4-year monthly vesting, 1-year cliff."""
    grant = {
        "id": "g1",
        "company_name": "Acme",
        "grant_type": "ISO",
        "total_shares": 1200,
        "strike_price": 1.0,
        "current_fmv": 5.0,
        "grant_date": date(2020, 1, 1),
        "vesting_start_date": date(2020, 1, 1),
        "vesting_months": 48,
        "cliff_months": 12,
    }
    grant.update(overrides)
    return grant


@pytest.fixture
def portfolio_file(tmp_path):
    """Portfolio YAML with two grants and two scenarios."""
    data = {
        "grants": [
            {
                "id": "iso-1",
                "company_name": "Acme",
                "grant_type": "ISO",
                "total_shares": 4800,
                "strike_price": 1.0,
                "current_fmv": 5.0,
                "grant_date": "2020-01-01",
                "vesting_start_date": "2020-01-01",
                "vesting_months": 48,
                "cliff_months": 12,
            },
            {
                "id": "rsu-1",
                "company_name": "Globex",
                "grant_type": "RSU",
                "total_shares": 480,
                "current_fmv": 10.0,
                "grant_date": "2021-01-01",
                "vesting_start_date": "2021-01-01",
                "vesting_end_date": "2025-01-01",
                "vested_shares": 100,
            },
        ],
        "scenarios": [
            {"scenario_name": "IPO", "exit_type": "IPO", "exit_price": 30, "grant_ids": ["iso-1"], "shares_included": 1000},
            {"name": "Acquihire", "exit_type": "Acquisition", "share_price": 2, "grant_id": "iso-1", "shares_included": 1000},
        ],
        "tax": {"state": "TX"},
    }
    path = tmp_path / "portfolio.yaml"
    path.write_text(yaml.dump(data, sort_keys=False))
    return path


@pytest.fixture
def grant_record():
    """Factory for grant record dicts (see _make_grant)."""
    return _make_grant
