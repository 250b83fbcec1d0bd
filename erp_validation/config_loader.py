"""Configuration loader for form rule definitions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

import voluptuous as vol
import yaml

from .const import (
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_CACHE_TTL,
    DEFAULT_DEBOUNCE_DELAY,
    DEFAULT_HISTORY_SIZE,
    SUPPORTED_CONFIG_MAJOR,
)
from .domain.exceptions import RuleConfigError
from .domain.value_objects.severity import Category, Severity
from .validation.cross_field_validation import LEVEL_ERROR, LEVEL_WARNING
from .validation.rule_registry import RuleRegistry

_LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent / "config"

RULE_SCHEMA = vol.Schema(
    {
        vol.Required("type"): str,
        vol.Optional("id"): str,
        vol.Optional("error"): str,
        vol.Optional("severity"): vol.In([severity.value for severity in Severity]),
        vol.Optional("category"): vol.In([category.value for category in Category]),
        vol.Optional("level"): vol.In([LEVEL_ERROR, LEVEL_WARNING]),
        vol.Optional("depends_on"): [str],
    },
    extra=vol.ALLOW_EXTRA,
)

FIELD_RULE_SCHEMA = RULE_SCHEMA.extend(
    {
        vol.Required("type"): vol.In(
            RuleRegistry.RULE_TYPES, msg="unknown field rule type"
        ),
    }
)

SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional("debounce_delay"): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional("cache_ttl"): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional("cache_max_entries"): vol.Any(None, vol.All(int, vol.Range(min=1))),
        vol.Optional("track_performance"): bool,
        vol.Optional("history_size"): vol.All(int, vol.Range(min=1)),
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required("version"): str,
        vol.Required("entity"): str,
        vol.Optional("settings", default=dict): SETTINGS_SCHEMA,
        vol.Optional("limits", default=dict): {str: object},
        vol.Optional("labels", default=dict): {str: str},
        vol.Optional("hints", default=dict): {str: [str]},
        vol.Optional("defaults", default=dict): {str: object},
        vol.Optional("fields", default=dict): {str: vol.Any(None, [FIELD_RULE_SCHEMA])},
        vol.Optional("cross_field", default=list): [RULE_SCHEMA],
        vol.Optional("business", default=list): [RULE_SCHEMA],
    }
)


@dataclass(frozen=True)
class EngineSettings:
    """Runtime settings of one engine instance.

    Attributes:
        debounce_delay: Quiet period before a debounced validation (seconds)
        cache_ttl: Lifetime of cached field results (seconds)
        cache_max_entries: Result cache bound, None for unbounded
        track_performance: Record validation timings
        history_size: Rolling window of the performance tracker
    """

    debounce_delay: float = DEFAULT_DEBOUNCE_DELAY
    cache_ttl: float = DEFAULT_CACHE_TTL
    cache_max_entries: Optional[int] = DEFAULT_CACHE_MAX_ENTRIES
    track_performance: bool = True
    history_size: int = DEFAULT_HISTORY_SIZE

    @classmethod
    def from_config(
        cls, config: Optional[Mapping[str, Any]], **overrides: Any
    ) -> EngineSettings:
        """Build settings from a configuration's ``settings`` block.

        Keyword overrides win over the file; unknown keys are ignored.
        """
        known = {item.name for item in fields(cls)}
        values = {
            key: val
            for key, val in ((config or {}).get("settings") or {}).items()
            if key in known
        }
        values.update({key: val for key, val in overrides.items() if key in known})
        return cls(**values)


def resolve_config_path(name_or_path: Union[str, Path]) -> Path:
    """Resolve a shipped form name (e.g. 'holiday') or a file path."""
    path = Path(name_or_path)
    if path.suffix in (".yaml", ".yml") or path.exists():
        return path
    return CONFIG_DIR / f"{name_or_path}.yaml"


def load_form_config(name_or_path: Union[str, Path]) -> dict[str, Any]:
    """Load and validate a form configuration from YAML.

    Args:
        name_or_path: Shipped form name or path to a YAML file

    Returns:
        Validated configuration dict

    Raises:
        FileNotFoundError: If configuration file not found
        RuleConfigError: If configuration is invalid
    """
    config_file = resolve_config_path(name_or_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    try:
        config = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except yaml.YAMLError as err:
        raise RuleConfigError(f"Invalid YAML: {err}") from err

    return parse_form_config(config, source=str(config_file))


def parse_form_config(
    config: Optional[Mapping[str, Any]], source: str = "<dict>"
) -> dict[str, Any]:
    """Validate an already parsed form configuration.

    Checks the version, validates the structure and applies ``defaults``
    to every cross-field and business rule lacking the key.

    Raises:
        RuleConfigError: If configuration is invalid
    """
    if not config:
        raise RuleConfigError(f"Configuration is empty: {source}")
    if not isinstance(config, Mapping):
        raise RuleConfigError(f"Configuration must be a mapping: {source}")

    if "version" not in config:
        raise RuleConfigError("Configuration missing required 'version' field")

    version = str(config["version"])
    if not version.startswith(SUPPORTED_CONFIG_MAJOR):
        raise RuleConfigError(
            f"Configuration version {version} not supported. "
            f"Only version {SUPPORTED_CONFIG_MAJOR}x is supported."
        )

    try:
        validated = CONFIG_SCHEMA({**config, "version": version})
    except vol.Invalid as err:
        raise RuleConfigError(f"Invalid rule configuration in {source}: {err}") from err

    defaults = validated["defaults"]
    for section in ("cross_field", "business"):
        for rule in validated[section]:
            for key, value in defaults.items():
                rule.setdefault(key, value)

    _LOGGER.info(
        "Loaded '%s' rules: %d fields, %d cross-field rules, %d business rules",
        validated["entity"],
        len(validated["fields"]),
        len(validated["cross_field"]),
        len(validated["business"]),
    )
    return validated
