from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from payment_intervals.models.analysis import DEFAULT_FROM_STATUS, DEFAULT_TO_STATUS
from payment_intervals.models.filter_criteria import FilterCriteria

"""Config loader.

Responsibilities:
- Load the YAML config (default config/analyzer.yml)
- Validate it against the bundled JSON schema (unknown keys rejected)
- Apply defaults (statuses 2 -> 8, ./exports, DD/MM/YYYY dates)
- Apply environment overrides for the target statuses
"""

__all__ = [
    "ConfigError",
    "AnalyzerConfig",
    "load_config",
    "apply_env_overrides",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/analyzer.yml")

ENV_FROM_STATUS = "PAYMENT_FROM_STATUS"
ENV_TO_STATUS = "PAYMENT_TO_STATUS"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AnalyzerConfig:
    source_directory: str
    export_directory: str = "./exports"
    export: bool = True
    from_status: int = DEFAULT_FROM_STATUS
    to_status: int = DEFAULT_TO_STATUS
    successful_payments_file: str | None = None
    date_format: str = "%d/%m/%Y"
    filters: FilterCriteria = field(default_factory=FilterCriteria)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (missing required keys, wrong types,
            unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _parse_filters(raw: dict[str, Any] | None) -> FilterCriteria:
    if not raw:
        return FilterCriteria()
    return FilterCriteria(
        date=raw.get("date") or None,
        terminal_id=raw.get("terminal_id") or None,
        payment_id=raw.get("payment_id") or None,
        time_difference=raw.get("time_difference"),
        only_successful=bool(raw.get("only_successful", False)),
    )


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def apply_env_overrides(cfg: AnalyzerConfig) -> AnalyzerConfig:
    """Return cfg with PAYMENT_FROM_STATUS / PAYMENT_TO_STATUS applied.

    Environment values win over the YAML file; CLI flags are applied later
    and win over both.
    """
    from_status = _env_int(ENV_FROM_STATUS)
    to_status = _env_int(ENV_TO_STATUS)
    if from_status is None and to_status is None:
        return cfg
    return AnalyzerConfig(
        source_directory=cfg.source_directory,
        export_directory=cfg.export_directory,
        export=cfg.export,
        from_status=from_status if from_status is not None else cfg.from_status,
        to_status=to_status if to_status is not None else cfg.to_status,
        successful_payments_file=cfg.successful_payments_file,
        date_format=cfg.date_format,
        filters=cfg.filters,
    )


def load_config(path: Path) -> AnalyzerConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    return AnalyzerConfig(
        source_directory=data["source_directory"],
        export_directory=data.get("export_directory", "./exports"),
        export=data.get("export", True),
        from_status=data.get("from_status", DEFAULT_FROM_STATUS),
        to_status=data.get("to_status", DEFAULT_TO_STATUS),
        successful_payments_file=data.get("successful_payments_file"),
        date_format=data.get("date_format", "%d/%m/%Y"),
        filters=_parse_filters(data.get("filters")),
    )
