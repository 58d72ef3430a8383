"""Options file loading with schema validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import AnalyzerOptions

SCHEMA_DIR = Path(__file__).parent / "schemas"

_schema_cache: dict[str, dict[str, Any]] = {}


def _load_schema(schema_name: str) -> dict[str, Any]:
    """Load and cache a bundled JSON schema."""
    if schema_name not in _schema_cache:
        schema_path = SCHEMA_DIR / f"{schema_name}.schema.json"
        try:
            with schema_path.open(encoding="utf-8") as f:
                _schema_cache[schema_name] = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            msg = f"Failed to load schema {schema_name}: {e}"
            raise ConfigError(msg) from e

    return _schema_cache[schema_name]


def load_options_data(config_path: Path) -> dict[str, Any]:
    """Read and validate raw option values from a YAML file.

    Args:
        config_path: Path to the YAML options file

    Returns:
        Option values present in the file

    Raises:
        ConfigError: If the file cannot be read or fails validation
    """
    if not config_path.exists():
        msg = f"Options file not found: {config_path}"
        raise ConfigError(msg)

    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Failed to parse options YAML: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Failed to read options file: {e}"
        raise ConfigError(msg) from e

    # An empty file means "all defaults"
    if data is None:
        data = {}

    try:
        jsonschema.validate(data, _load_schema("options"))
    except jsonschema.ValidationError as e:
        msg = f"Schema validation failed: {e.message}"
        raise ConfigError(
            msg,
            details={"path": list(e.absolute_path), "schema": "options"},
        ) from e

    return data


def load_options(config_path: Path, **overrides: Any) -> AnalyzerOptions:
    """Load analyzer options from a YAML file.

    Args:
        config_path: Path to the YAML options file
        **overrides: Values that take precedence over the file; None is ignored

    Returns:
        Validated analyzer options

    Raises:
        ConfigError: If the file or the merged values are invalid
    """
    data = load_options_data(config_path)
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return AnalyzerOptions.model_validate(data)
    except ValidationError as e:
        msg = f"Options validation failed: {e}"
        raise ConfigError(msg) from e
