"""SDK settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``CODECHAIN_``, nested via ``__``)
2. YAML config file (``config_path`` / ``CODECHAIN_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ScriptConfig(BaseSettings):
    """Limits applied when evaluating lock/unlock scripts."""

    model_config = SettingsConfigDict(
        env_prefix="CODECHAIN_SCRIPT__",
        case_sensitive=False,
    )

    max_script_length: int = Field(default=1024, gt=0, description="Longest accepted script, in bytes")
    max_steps: int = Field(default=1000, gt=0, description="Instructions executed before giving up")
    max_stack_size: int = Field(default=1024, gt=0, description="Deepest allowed value stack")


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class SDKConfig(BaseSettings):
    """Top-level SDK configuration.

    Loads settings from environment variables (``CODECHAIN_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="CODECHAIN_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    network_id: str = Field(default="tc", description="Two-character network id")
    parcel_fee: int = Field(default=10, ge=0, description="Fee used when a parcel omits one")
    config_path: str = ""

    script: ScriptConfig = Field(default_factory=ScriptConfig)

    @field_validator("network_id")
    @classmethod
    def _check_network_id(cls, value: str) -> str:
        if len(value) != 2 or not value.isascii() or value != value.lower():
            msg = f"network_id must be 2 lowercase ASCII characters, got {value!r}"
            raise ValueError(msg)
        return value

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``SDKConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
