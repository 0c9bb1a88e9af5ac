"""Load AnalysisConfig from YAML, optionally with dotted-key overrides."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import AnalysisConfig


def load_config(config_path: Path | str) -> AnalysisConfig:
    """
    Parse and validate an analysis configuration file.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If any value is missing or out of range
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return pydantic_yaml.parse_yaml_raw_as(AnalysisConfig, config_path.read_text())


def apply_overrides(values: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """
    Set "section.field" keys in a dumped config.

    Raises:
        KeyError: If an override names a section or field the config lacks
    """
    for key, value in overrides.items():
        *sections, field_name = key.split(".")
        target = values
        for section in sections:
            if not isinstance(target.get(section), dict):
                raise KeyError(f"Unknown config section in override '{key}'")
            target = target[section]
        if field_name not in target:
            raise KeyError(f"Unknown config field in override '{key}'")
        target[field_name] = value
    return values


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> AnalysisConfig:
    """
    Load a config and replace selected values, e.g. from CLI flags.

    The merged values are validated again, so an override is held to the
    same ranges as the file.

    Args:
        config_path: YAML configuration file
        overrides: {"execution.run_mode": "pass_only", ...}
    """
    config = load_config(config_path)
    values = apply_overrides(config.model_dump(), overrides)
    return AnalysisConfig.model_validate(values)
