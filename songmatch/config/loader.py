"""YAML configuration loader with environment variable overrides.

Configuration is resolved in layers (later layers override earlier):

  1. config/config.yaml  - static defaults checked into the repo
  2. .env file           - local developer overrides (not committed)
  3. Environment vars    - set at deploy time

YAML sections are flattened into settings field names, so

    cache:
      ttl_seconds: 120

becomes ``cache_ttl_seconds``.  Unknown keys are rejected.
"""

from pathlib import Path
from typing import Any

import yaml

from songmatch.config.settings import Settings
from songmatch.utils.errors import ConfigurationError


def load_settings(path: str = "config/config.yaml") -> Settings:
    """Build :class:`Settings` from YAML defaults plus environment overrides.

    Args:
        path: Path to the YAML configuration file.  A missing file is not
              an error; field defaults apply.

    Returns:
        Fully resolved settings.

    Raises:
        ConfigurationError: If the YAML is malformed or names an unknown key.
    """
    yaml_values = _flatten(_read_yaml(Path(path)))

    unknown = sorted(set(yaml_values) - set(Settings.model_fields))
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")

    # Values that came from the environment or .env are in model_fields_set
    # and must win over the YAML file.
    env_settings = Settings()
    merged: dict[str, Any] = dict(yaml_values)
    for field_name in env_settings.model_fields_set:
        merged[field_name] = getattr(env_settings, field_name)

    return Settings(**merged)


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping")
    return data


def _flatten(sections: dict[str, Any]) -> dict[str, Any]:
    """Flatten ``{section: {key: value}}`` into ``{section_key: value}``."""
    flat: dict[str, Any] = {}
    for section, values in sections.items():
        if isinstance(values, dict):
            for key, value in values.items():
                flat[f"{section}_{key}"] = value
        else:
            flat[section] = values
    return flat
