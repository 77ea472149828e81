"""Configuration loading and management for sf-impact.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalyzerConfig)
    2. Global config (~/.sf-impact.toml)
    3. Project config (./sf-impact.toml)
    4. Explicit config file
    5. Environment variables (SF_IMPACT_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(case_sensitive_names=True)
    >>> config.case_sensitive_names
    True
    >>> config.thresholds.max_master_detail
    2
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
NamingConvention = Literal["PascalCase__c", "snake_case__c"]

ENV_PREFIX = "SF_IMPACT_"


@dataclass(frozen=True)
class ThresholdConfig:
    """Similarity thresholds, platform limits and risk weights.

    Attributes:
        Formula analysis:
            redundancy_similarity: Similarity above which two rules are redundant
            contradiction_similarity: Similarity above which a NOT-stripped
                formula is considered the negation of the other

        Platform limits:
            max_master_detail: Master-detail relationships allowed per object
            unique_field_warning: Unique field count that triggers a warning

        Naming:
            similar_name_threshold: Normalized edit similarity for near-duplicates

        Risk points (added once per matching change):
            field_delete, master_detail_change, validation_rule_create,
            required_field, unique_field, optional_field

        Risk levels (score >= threshold):
            critical_level, high_level, medium_level
    """

    # === Formula analysis ===
    redundancy_similarity: float = 0.7
    contradiction_similarity: float = 0.5

    # === Platform limits ===
    max_master_detail: int = 2  # hard Salesforce limit
    unique_field_warning: int = 10

    # === Naming ===
    similar_name_threshold: float = 0.7

    # === Risk points ===
    field_delete: int = 25
    master_detail_change: int = 20
    validation_rule_create: int = 10
    required_field: int = 15
    unique_field: int = 12
    optional_field: int = 5

    # === Risk levels ===
    critical_level: int = 75
    high_level: int = 50
    medium_level: int = 25
    max_score: int = 100

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        for field_name in (
            "redundancy_similarity",
            "contradiction_similarity",
            "similar_name_threshold",
        ):
            value = getattr(self, field_name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfigError(field_name, value, "must be between 0.0 and 1.0")

        for field_name in (
            "field_delete",
            "master_detail_change",
            "validation_rule_create",
            "required_field",
            "unique_field",
            "optional_field",
        ):
            value = getattr(self, field_name)
            if value < 0:
                raise InvalidConfigError(field_name, value, "risk points must be non-negative")

        if self.max_master_detail < 1:
            raise InvalidConfigError("max_master_detail", self.max_master_detail, "must be at least 1")
        if self.unique_field_warning < 1:
            raise InvalidConfigError(
                "unique_field_warning", self.unique_field_warning, "must be at least 1"
            )

        # Levels must be strictly ordered inside (0, max_score]
        if not 0 < self.medium_level < self.high_level < self.critical_level <= self.max_score:
            raise InvalidConfigError(
                "risk levels",
                f"{self.medium_level}/{self.high_level}/{self.critical_level}",
                f"must satisfy 0 < medium < high < critical <= {self.max_score}",
            )


@dataclass(frozen=True)
class BatchConfig:
    """Batch sizing rules for multi-ticket aggregation."""

    min_batch_size: int = 2
    max_batch_size: int = 50

    def __post_init__(self) -> None:
        if self.min_batch_size < 1:
            raise InvalidConfigError("min_batch_size", self.min_batch_size, "must be at least 1")
        if self.max_batch_size < self.min_batch_size:
            raise InvalidConfigError(
                "max_batch_size", self.max_batch_size, "must be >= min_batch_size"
            )


@dataclass(frozen=True)
class AnalyzerConfig:
    """Configuration for analysis execution.

    Attributes:
        case_sensitive_names: Match field and rule API names exactly. Off by
            default because Salesforce API names are case-insensitive; applies
            to the comparator and the impact analyzer alike.
        naming_convention: Convention proposed field names are checked against
        verbosity: Logging verbosity level
        thresholds: Algorithm thresholds (nested config)
        batch: Batch sizing (nested config)
    """

    case_sensitive_names: bool = False
    naming_convention: NamingConvention = "PascalCase__c"
    verbosity: Verbosity = "normal"

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)

    def __post_init__(self) -> None:
        if self.naming_convention not in ("PascalCase__c", "snake_case__c"):
            raise InvalidConfigError(
                "naming_convention", self.naming_convention, "expected PascalCase__c or snake_case__c"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet/normal/verbose")

    def name_key(self, name: Optional[str]) -> str:
        """Key used to match API names under the configured case policy."""
        if name is None:
            return ""
        return name if self.case_sensitive_names else name.lower()


DEFAULT_CONFIG = AnalyzerConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalyzerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalyzerConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".sf-impact.toml"
    if global_config.exists():
        merged.update(_load_toml_checked(global_config, "global config"))

    project_config = Path.cwd() / "sf-impact.toml"
    if project_config.exists():
        merged.update(_load_toml_checked(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_checked(config_file, "config file"))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    merged["thresholds"] = _nested(merged.pop("thresholds", None), ThresholdConfig, "thresholds")
    merged["batch"] = _nested(merged.pop("batch", None), BatchConfig, "batch")

    try:
        return AnalyzerConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _nested(value: Any, cls: type, section: str) -> Any:
    """Build a nested config section from a TOML table or pass an instance through."""
    if value is None:
        return cls()
    if isinstance(value, cls):
        return value
    if isinstance(value, dict):
        try:
            return cls(**value)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [{section}] config: {e}")
    raise InvalidConfigError(section, value, "expected a table")


def _load_toml_checked(path: Path, what: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {what} '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load top-level configuration from SF_IMPACT_* environment variables.

    Supported environment variables:
        SF_IMPACT_CASE_SENSITIVE_NAMES: bool (true/false/1/0)
        SF_IMPACT_NAMING_CONVENTION: PascalCase__c/snake_case__c
        SF_IMPACT_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any SF_IMPACT_* vars found.
    """
    type_hints = get_type_hints(AnalyzerConfig)
    result: dict[str, Any] = {}

    for config_field in fields(AnalyzerConfig):
        env_key = f"{ENV_PREFIX}{config_field.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hints.get(config_field.name))
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[config_field.name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be set from the environment
    (nested sections).
    """
    origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
