"""Configuration Management with Pydantic.

This module implements configuration models using Pydantic for parsing and
validation of YAML/JSON configuration files with environment variable overrides.
"""

import os
import threading
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger(__name__)

# Constants
DEFAULT_MAX_SUGGESTIONS = 3
HIGH_SUGGESTION_THRESHOLD = 25
SUPPORTED_VISUALIZATION_FORMATS = ("mermaid", "dot")


class EngineConfig(BaseModel):
    """Dependency engine behaviour settings.

    Attributes:
        max_suggestions: Default number of modules returned by suggest_next_modules
    """

    max_suggestions: int = Field(
        default=DEFAULT_MAX_SUGGESTIONS,
        ge=0,
        description="Default number of suggested next modules",
    )


class LoggingConfig(BaseModel):
    """Logging settings.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render log events as JSON instead of console text
    """

    level: str = Field(
        default="INFO",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Upper-case the level so 'debug' and 'DEBUG' are equivalent.

        Args:
            v: The level value to normalize

        Returns:
            The upper-cased level
        """
        if isinstance(v, str):
            return v.strip().upper()
        return v


class ReportConfig(BaseModel):
    """Report and visualization settings.

    Attributes:
        visualization_format: Graph output format ('mermaid' or 'dot')
    """

    visualization_format: str = Field(
        default="mermaid",
        description="Default graph visualization format",
    )

    @field_validator("visualization_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate the visualization format.

        Args:
            v: The format value to validate

        Returns:
            The normalized format

        Raises:
            ValueError: If the format is not supported
        """
        normalized = v.lower().strip()
        if normalized not in SUPPORTED_VISUALIZATION_FORMATS:
            msg = f"Unsupported visualization format: {v}. Use 'mermaid' or 'dot'."
            raise ValueError(msg)
        return normalized


class AppConfig(BaseModel):
    """Main configuration combining all settings.

    Attributes:
        engine: Dependency engine settings
        logging: Logging settings
        report: Report and visualization settings
    """

    engine: EngineConfig = Field(default_factory=EngineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        """Load configuration from a YAML (or JSON) file.

        JSON is a subset of YAML, so both formats go through the same parser.

        Args:
            path: Path to the configuration file

        Returns:
            Parsed and validated AppConfig instance

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_configuration", path=str(config_path))

        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                msg = "Configuration file is empty"
                raise ValueError(msg)

            if not isinstance(config_data, dict):
                msg = "Configuration file must contain a mapping"
                raise ValueError(msg)

            config_data = cls._apply_env_overrides(config_data)
            config = cls(**config_data)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e
        else:
            logger.info(
                "configuration_loaded",
                max_suggestions=config.engine.max_suggestions,
                logging_level=config.logging.level,
            )
            return config

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a configuration from defaults plus environment overrides.

        Returns:
            AppConfig instance
        """
        return cls(**cls._apply_env_overrides({}))

    @classmethod
    def _apply_env_overrides(cls, config_data: dict) -> dict:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: MODGRAPH_<SECTION>_<KEY>
        Example: MODGRAPH_ENGINE_MAX_SUGGESTIONS, MODGRAPH_LOGGING_LEVEL

        Args:
            config_data: Base configuration dictionary from file

        Returns:
            Configuration dictionary with environment overrides applied
        """
        env_overrides = {
            ("engine", "max_suggestions"): "MODGRAPH_ENGINE_MAX_SUGGESTIONS",
            ("logging", "level"): "MODGRAPH_LOGGING_LEVEL",
            ("logging", "json_logs"): "MODGRAPH_LOGGING_JSON",
            ("report", "visualization_format"): "MODGRAPH_REPORT_FORMAT",
        }

        for path, env_var in env_overrides.items():
            value = os.environ.get(env_var)
            if value is None:
                continue

            current = config_data
            for key in path[:-1]:
                if not isinstance(current.get(key), dict):
                    current[key] = {}
                current = current[key]

            if env_var.endswith("_SUGGESTIONS"):
                try:
                    value = int(value)
                except ValueError as e:
                    msg = f"{env_var} must be an integer, got {value!r}"
                    raise ValueError(msg) from e
            elif env_var.endswith("_JSON"):
                value = value.lower() in ("true", "1", "yes")

            current[path[-1]] = value
            logger.debug(
                "env_override_applied",
                env_var=env_var,
                config_path=".".join(path),
            )

        return config_data

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of warnings.

        Returns:
            List of validation warning messages (empty if no warnings)
        """
        warnings = []

        if self.engine.max_suggestions == 0:
            warnings.append("max_suggestions is 0 - suggest_next_modules will return nothing")

        if self.engine.max_suggestions > HIGH_SUGGESTION_THRESHOLD:
            warnings.append(
                f"max_suggestions is high ({self.engine.max_suggestions}) - "
                "suggestions are a positional cutoff, not a ranking",
            )

        if self.logging.level == "DEBUG" and self.logging.json_logs:
            warnings.append("DEBUG logging with JSON output is verbose - consider json_logs: false")

        return warnings


class ConfigManager:
    """Configuration manager using singleton pattern."""

    _instance: AppConfig | None = None
    _init_lock: threading.Lock = threading.Lock()

    @classmethod
    def load_config(cls, config_path: str | Path | None = None) -> AppConfig:
        """Load configuration from file.

        Args:
            config_path: Path to configuration file. If None, looks for modgraph.yaml,
                        modgraph.yml or modgraph.json in the current directory and
                        falls back to defaults (plus environment overrides).

        Returns:
            Loaded AppConfig instance

        Raises:
            FileNotFoundError: If an explicit config file is not found
            ValueError: If config file is invalid
        """
        if config_path is None:
            for default_name in ["modgraph.yaml", "modgraph.yml", "modgraph.json"]:
                default_path = Path(default_name)
                if default_path.exists():
                    config_path = default_path
                    break
            else:
                logger.debug("no_configuration_file_using_defaults")
                return AppConfig.from_env()

        return AppConfig.from_yaml(config_path)

    @classmethod
    def get_config(
        cls,
        config_path: str | Path | None = None,
        reload: bool = False,
    ) -> AppConfig:
        """Get configuration instance (singleton pattern).

        Args:
            config_path: Path to configuration file. Only used on first call or when reload=True.
            reload: If True, force reload configuration from file.

        Returns:
            AppConfig instance
        """
        if cls._instance is not None and not reload:
            return cls._instance

        with cls._init_lock:
            if cls._instance is None or reload:
                cls._instance = cls.load_config(config_path)

            return cls._instance

    @classmethod
    def reset_config(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from file."""
    return ConfigManager.load_config(config_path)


def get_config(config_path: str | Path | None = None, reload: bool = False) -> AppConfig:
    """Get configuration instance (singleton pattern)."""
    return ConfigManager.get_config(config_path, reload)


def reset_config() -> None:
    """Reset the configuration instance."""
    ConfigManager.reset_config()


__all__ = [
    "AppConfig",
    "EngineConfig",
    "LoggingConfig",
    "ReportConfig",
    "get_config",
    "load_config",
    "reset_config",
]
