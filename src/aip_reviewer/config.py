"""Review configuration, in code or from a YAML file.

Example ``.aip-reviewer.yaml``::

    strict: true
    categories: [naming, pagination]
    skip_rules:
      - aip193/standard-codes
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from aip_reviewer.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("strict", "categories", "skip_rules")


class ReviewConfig(BaseModel):
    """Which rules run and how severities are counted.

    Unknown categories or rule ids are accepted and simply match nothing.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    strict: bool = False
    categories: tuple[str, ...] = ()
    skip_rules: tuple[str, ...] = ()
    custom_rules: tuple[Any, ...] = ()

    @field_validator("categories", "skip_rules", mode="before")
    @classmethod
    def _single_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        if value is None:
            return ()
        return value


def load_config(file_path: Path) -> ReviewConfig:
    """Read a YAML config file. Keys other than strict/categories/skip_rules are ignored."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config {file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config {file_path} is not valid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {file_path} must be a mapping")

    unknown = sorted(str(k) for k in data if k not in CONFIG_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", file_path, ", ".join(unknown))

    try:
        return ReviewConfig(**{k: data[k] for k in CONFIG_KEYS if k in data})
    except ValidationError as e:
        raise ConfigError(f"Invalid config {file_path}: {e}") from e
