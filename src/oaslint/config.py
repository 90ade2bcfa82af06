"""Configuration management for oaslint using Pydantic models.

Two inputs are handled here: the optional ``.oaslint.json`` tool configuration
and the YAML rule catalog that names which rules run and at what severity.
"""

import json
import logging
import re
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".oaslint.json"

_BLOCKING_WORD = re.compile(r"\berror\b")


class RuleCatalogError(ValueError):
    """Raised when a rule catalog cannot be loaded or is malformed."""


class Severity(str, Enum):
    """Severity attached to a rule and to every violation it produces."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    HINT = "hint"
    OFF = "off"

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Parse severity text from a rule catalog.

        Any text containing the whole word ``error`` is blocking. PyYAML reads a
        bare ``off`` as boolean ``False``, so that is accepted as well.
        """
        if isinstance(value, Severity):
            return value
        if value is False:
            return cls.OFF
        if not isinstance(value, str):
            raise ValueError(f"severity must be a string, got: {value!r}")

        if _BLOCKING_WORD.search(value):
            return cls.ERROR

        aliases = {
            "warn": cls.WARN,
            "warning": cls.WARN,
            "info": cls.INFO,
            "information": cls.INFO,
            "hint": cls.HINT,
            "off": cls.OFF,
        }
        normalized = value.strip().lower()
        if normalized not in aliases:
            raise ValueError(
                f"unknown severity '{value}'. Expected one of: error, {', '.join(aliases)}"
            )
        return aliases[normalized]


class OutputFormat(str, Enum):
    """Report output formats."""
    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    def to_logging(self) -> int:
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


class RuleRecord(BaseModel):
    """A single configured rule: identifier, severity and description."""
    id: str
    severity: Severity
    description: str
    given: str | list[str] | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("severity", mode="before")
    @classmethod
    def validate_severity(cls, v):
        return Severity.parse(v)

    @field_validator("id", "description")
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @property
    def enabled(self) -> bool:
        return self.severity != Severity.OFF


class RuleCatalog(BaseModel):
    """Ordered collection of rule records, unique by id."""
    rules: list[RuleRecord] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_unique_ids(self):
        seen: set[str] = set()
        for record in self.rules:
            if record.id in seen:
                raise ValueError(f"duplicate rule id: {record.id}")
            seen.add(record.id)
        return self

    def __iter__(self) -> Iterator[RuleRecord]:  # type: ignore[override]
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __contains__(self, rule_id: object) -> bool:
        return any(record.id == rule_id for record in self.rules)

    def get(self, rule_id: str) -> RuleRecord | None:
        for record in self.rules:
            if record.id == rule_id:
                return record
        return None

    @property
    def ids(self) -> list[str]:
        return [record.id for record in self.rules]

    @classmethod
    def from_mapping(cls, rules: dict[str, Any]) -> "RuleCatalog":
        """Build a catalog from a Spectral-style ``rules`` mapping.

        Keys other than ``severity``, ``description`` and ``given`` are kept as
        rule parameters; an explicit ``parameters`` mapping is merged on top.

        Raises:
            RuleCatalogError: If an entry is not a mapping or misses required fields
        """
        records = []
        for rule_id, data in rules.items():
            if not isinstance(data, dict):
                raise RuleCatalogError(f"Rule '{rule_id}' must be a mapping, got: {type(data).__name__}")

            for required in ("severity", "description"):
                if required not in data:
                    raise RuleCatalogError(f"Rule '{rule_id}' is missing required field '{required}'")

            parameters = {
                key: value for key, value in data.items()
                if key not in ("severity", "description", "given", "parameters")
            }
            explicit = data.get("parameters") or {}
            if not isinstance(explicit, dict):
                raise RuleCatalogError(f"Rule '{rule_id}' parameters must be a mapping")
            parameters.update(explicit)

            try:
                records.append(RuleRecord(
                    id=str(rule_id),
                    severity=data["severity"],
                    description=data["description"],
                    given=data.get("given"),
                    parameters=parameters,
                ))
            except ValidationError as e:
                raise RuleCatalogError(f"Invalid rule '{rule_id}': {e}") from e

        try:
            return cls(rules=records)
        except ValidationError as e:
            raise RuleCatalogError(f"Invalid rule catalog: {e}") from e


class WalkerConfig(BaseModel):
    """Schema traversal configuration section."""
    max_depth: int = Field(alias="maxDepth", default=64)

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v):
        if v < 1:
            raise ValueError("max_depth must be >= 1")
        return v

    model_config = ConfigDict(populate_by_name=True)


class ReferencesConfig(BaseModel):
    """Reference-integrity configuration section."""
    severity: Severity = Severity.WARN

    @field_validator("severity", mode="before")
    @classmethod
    def validate_severity(cls, v):
        return Severity.parse(v)


class OutputConfig(BaseModel):
    """Output configuration section."""
    format: OutputFormat = OutputFormat.TABLE


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class LintConfig(BaseModel):
    """Complete oaslint configuration model."""
    rules: str | None = None
    walker: WalkerConfig = Field(default_factory=WalkerConfig)
    references: ReferencesConfig = Field(default_factory=ReferencesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    def rules_path(self) -> Path | None:
        """Configured rule catalog path, if any."""
        return Path(self.rules) if self.rules else None


def load_config(config_path: str | Path | None = None) -> LintConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .oaslint.json

    Returns:
        LintConfig: Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            return create_default_config()
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}")

    try:
        config = LintConfig(**config_data)
    except (TypeError, ValidationError) as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}")

    # Relative rule catalog paths are anchored at the config file's directory
    if config.rules and not Path(config.rules).is_absolute():
        config = config.model_copy(update={"rules": str(config_path.parent / config.rules)})

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .oaslint.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> LintConfig:
    """Create default configuration (no rule catalog configured)."""
    return LintConfig()


def load_rule_catalog(rules_path: str | Path) -> RuleCatalog:
    """Load a Spectral-style YAML rule catalog.

    The file must contain a top-level ``rules`` mapping of rule id to
    ``{severity, description, given?, ...}``. Catalog order follows the file.

    Args:
        rules_path: Path to the YAML rule file

    Returns:
        RuleCatalog: Validated rule records in file order

    Raises:
        RuleCatalogError: If the file is missing, unparsable or malformed
    """
    rules_path = Path(rules_path)
    try:
        with open(rules_path, encoding="utf-8-sig") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise RuleCatalogError(f"Rule file not found: {rules_path}") from e
    except OSError as e:
        raise RuleCatalogError(f"Failed to read rule file {rules_path}: {e}") from e
    except yaml.YAMLError as e:
        raise RuleCatalogError(f"Invalid YAML in rule file {rules_path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("rules"), dict):
        raise RuleCatalogError(f"Rule file {rules_path} must contain a 'rules' mapping")

    catalog = RuleCatalog.from_mapping(data["rules"])
    logger.debug(f"Loaded {len(catalog)} rules from {rules_path}")
    return catalog
