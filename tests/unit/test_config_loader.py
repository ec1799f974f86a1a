from __future__ import annotations

from pathlib import Path

import pytest

from payment_intervals.config.loader import ConfigError, apply_env_overrides, load_config
from payment_intervals.models.filter_criteria import FilterCriteria


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_directory == "./data"
    assert cfg.export_directory == "./exports"
    assert cfg.export is True
    assert (cfg.from_status, cfg.to_status) == (2, 8)
    assert cfg.date_format == "%d/%m/%Y"
    assert cfg.filters == FilterCriteria()


def test_load_config_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "analyzer.yml"
    p.write_text("source_directory: ./incoming\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.source_directory == "./incoming"
    assert (cfg.from_status, cfg.to_status) == (2, 8)
    assert cfg.successful_payments_file is None
    assert cfg.export_directory == "./exports"


def test_load_config_filters(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace(
        "filters:\n  time_difference: null\n",
        "filters:\n  time_difference: 5\n  terminal_id: T1\n",
    )
    write_config.write_text(text, encoding="utf-8")
    cfg = load_config(write_config)
    assert cfg.filters.time_difference == 5
    assert cfg.filters.terminal_id == "T1"
    assert cfg.filters.only_successful is False


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_invalid_yaml(write_config: Path):
    write_config.write_text("source_directory: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "invalid yaml" in str(e.value)


def test_load_config_missing_required(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("source_directory: ./data\n", "")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value) and "required property" in str(e.value)


def test_load_config_extra_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_wrong_status_type(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("from_status: 2", "from_status: two")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(write_config)


def test_env_overrides_statuses(write_config: Path, monkeypatch):
    monkeypatch.setenv("PAYMENT_TO_STATUS", "5")
    cfg = apply_env_overrides(load_config(write_config))
    assert (cfg.from_status, cfg.to_status) == (2, 5)


def test_env_overrides_reject_non_integer(write_config: Path, monkeypatch):
    monkeypatch.setenv("PAYMENT_FROM_STATUS", "abc")
    with pytest.raises(ConfigError):
        apply_env_overrides(load_config(write_config))


def test_env_overrides_absent_returns_same_config(write_config: Path):
    cfg = load_config(write_config)
    assert apply_env_overrides(cfg) is cfg
