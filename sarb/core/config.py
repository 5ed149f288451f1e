"""
Hierarchical configuration management for SARB.

Configuration priority (highest to lowest):
1. CLI arguments
2. Environment variables (SARB_*)
3. Project config (.sarb.yml)
4. User config (~/.sarb/config.yml)
5. Default values
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_CONFIG_FILE = ".sarb.yml"
USER_CONFIG_DIR = ".sarb"


class BaselineConfig(BaseModel):
    """Configuration for baseline files."""

    file: Path = Path("baseline.sarb")
    results_parser: str = "sarb-json"
    history_provider: str = "git"

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: Any) -> Path:
        """Ensure file is a Path."""
        if isinstance(v, str):
            return Path(v)
        return v


class MatchingConfig(BaseModel):
    """Configuration for matching current findings against the baseline."""

    include_message: bool = False
    max_workers: int = 1

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Validate worker count is positive."""
        if v < 1:
            raise ValueError("max_workers must be >= 1")
        return v


class HistoryConfig(BaseModel):
    """Configuration for the version control history provider."""

    git_binary: str = "git"
    timeout: int = 60
    ignore_whitespace: bool = True
    detect_renames: bool = True
    walk_commits: bool = False

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be > 0 seconds")
        return v


class ReportingConfig(BaseModel):
    """Configuration for rendering pruned results."""

    output_format: str = "table"
    max_findings: Optional[int] = None

    @field_validator("max_findings")
    @classmethod
    def validate_max_findings(cls, v: Optional[int]) -> Optional[int]:
        """Validate max_findings is positive when set."""
        if v is not None and v < 1:
            raise ValueError("max_findings must be >= 1")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    file: Optional[Path] = None
    json_format: bool = False
    max_file_size_mb: int = 10
    backup_count: int = 5

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: Any) -> Optional[Path]:
        """Ensure file is a Path or None."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(v)
        return v


class SarbConfig(BaseSettings):
    """
    Main configuration model with hierarchical loading.

    Loads configuration from:
    1. Default values (lowest priority)
    2. User config file (~/.sarb/config.yml)
    3. Project config file (.sarb.yml)
    4. Environment variables (SARB_*)
    5. CLI arguments (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="SARB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    baseline: BaselineConfig = Field(default_factory=BaselineConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(
        cls,
        cli_args: Optional[dict[str, Any]] = None,
        project_path: Optional[Path] = None,
        user_config_path: Optional[Path] = None,
    ) -> SarbConfig:
        """
        Load configuration from multiple sources with priority.

        Args:
            cli_args: Command-line arguments (highest priority)
            project_path: Path to project directory for .sarb.yml
            user_config_path: Override for the user config file location

        Returns:
            Merged configuration
        """
        config_dict: dict[str, Any] = {}
        project_path = project_path or Path.cwd()

        # 1. Load user config (~/.sarb/config.yml)
        user_config_path = user_config_path or Path.home() / USER_CONFIG_DIR / "config.yml"
        config_dict = _deep_merge(config_dict, _read_yaml(user_config_path))

        # 2. Load project config (.sarb.yml)
        config_dict = _deep_merge(config_dict, _read_yaml(project_path / PROJECT_CONFIG_FILE))

        # 3. Environment variables are applied by pydantic-settings, but init
        # kwargs win over them, so file values they override are dropped here
        config_dict = _drop_env_overridden(config_dict, cls.model_config["env_prefix"])

        # 4. Apply CLI arguments (highest priority)
        if cli_args:
            config_dict = _deep_merge(config_dict, _flatten_cli_args(cli_args))

        return cls(**config_dict)

    def to_yaml(self, path: Path) -> None:
        """Write configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning an empty dict for missing files."""
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return data


def _drop_env_overridden(config: dict[str, Any], prefix: str) -> dict[str, Any]:
    """Remove file-provided values that an environment variable overrides."""
    result: dict[str, Any] = {}
    for section, value in config.items():
        if isinstance(value, dict):
            result[section] = {
                key: sub_value
                for key, sub_value in value.items()
                if f"{prefix}{section}__{key}".upper() not in os.environ
            }
        elif f"{prefix}{section}".upper() not in os.environ:
            result[section] = value
    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with values to override

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _flatten_cli_args(args: dict[str, Any]) -> dict[str, Any]:
    """
    Convert flat CLI arguments to nested config structure.

    Examples:
        {"output_format": "json"} -> {"reporting": {"output_format": "json"}}
        {"strict": True} -> {"matching": {"include_message": True}}
    """
    result: dict[str, Any] = {}

    # Map CLI args to config structure
    mappings = {
        "output_format": ("reporting", "output_format", str),
        "input_format": ("baseline", "results_parser", str),
        "strict": ("matching", "include_message", lambda v: True if v else None),
        "workers": ("matching", "max_workers", int),
        "walk_commits": ("history", "walk_commits", lambda v: True if v else None),
        "git_timeout": ("history", "timeout", int),
        "verbose": ("logging", "level", lambda v: "DEBUG" if v else None),
        "quiet": ("logging", "level", lambda v: "ERROR" if v else None),
    }

    for key, value in args.items():
        if value is None:
            continue

        if key in mappings:
            section, subkey, transform = mappings[key]
            transformed = transform(value)
            if transformed is not None:
                result.setdefault(section, {})[subkey] = transformed
        else:
            # Direct assignment for unmapped keys
            result[key] = value

    return result


def get_default_config() -> SarbConfig:
    """Get configuration with all defaults."""
    return SarbConfig()


def validate_config(config: SarbConfig) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Returns:
        List of warning messages (empty if all valid)
    """
    warnings: list[str] = []

    if config.matching.include_message:
        warnings.append(
            "Strict matching enabled: findings whose message wording changed "
            "since the baseline will be reported as new"
        )

    if config.history.walk_commits and not config.history.detect_renames:
        warnings.append("walk_commits without rename detection will drop findings in renamed files")

    return warnings
