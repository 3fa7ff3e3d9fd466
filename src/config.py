"""Configuration Management with Pydantic.

This module implements configuration models using Pydantic for parsing and
validation of YAML/JSON configuration files with environment variable overrides.
"""

import os
import threading
from pathlib import Path
from typing import Literal

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator

# Initialize logger
logger = structlog.get_logger(__name__)

ENV_PREFIX = "DEPGRAPH_"
TRUE_VALUES = ("true", "1", "yes")


class GraphConfig(BaseModel):
    """Dependency graph policy settings.

    Attributes:
        fail_on_cycle: Treat a dependency cycle as a fatal error
        fail_on_dangling: Treat undeclared dependencies as errors instead of warnings
        visualization_format: Default output format for graph visualization
    """

    fail_on_cycle: bool = Field(
        default=True,
        description="Fail when the dependency graph has a cycle",
    )
    fail_on_dangling: bool = Field(
        default=False,
        description="Fail when artifacts depend on undeclared artifacts",
    )
    visualization_format: Literal["mermaid", "dot"] = Field(
        default="mermaid",
        description="Visualization format",
    )

    @field_validator("visualization_format", mode="before")
    @classmethod
    def normalize_format(cls, v: object) -> object:
        """Accept format names regardless of case and surrounding whitespace.

        Args:
            v: The raw format value

        Returns:
            The normalized format name, or the value unchanged if not a string
        """
        if isinstance(v, str):
            return v.strip().lower()
        return v


class TrackerConfig(BaseModel):
    """Main configuration combining all settings.

    Attributes:
        graph: Dependency graph policy settings
        logging_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render logs as JSON instead of colored console output
    """

    graph: GraphConfig = Field(default_factory=GraphConfig)
    logging_level: str = Field(
        default="INFO",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=True,
        description="Use JSON log rendering",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TrackerConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed and validated TrackerConfig instance

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
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e

        if config_data is None:
            config_data = {}
        elif not isinstance(config_data, dict):
            msg = "Configuration file must contain a mapping"
            raise ValueError(msg)

        config = cls.from_dict(config_data)

        logger.info(
            "configuration_loaded",
            fail_on_cycle=config.graph.fail_on_cycle,
            logging_level=config.logging_level,
        )

        return config

    @classmethod
    def from_dict(cls, config_data: dict) -> "TrackerConfig":
        """Build a configuration from a dictionary, applying environment overrides."""
        return cls(**cls._apply_env_overrides(config_data))

    @classmethod
    def _apply_env_overrides(cls, config_data: dict) -> dict:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: DEPGRAPH_<KEY>
        Example: DEPGRAPH_FAIL_ON_CYCLE, DEPGRAPH_LOGGING_LEVEL

        Args:
            config_data: Base configuration dictionary from file

        Returns:
            Configuration dictionary with environment overrides applied
        """
        env_overrides = {
            ("graph", "fail_on_cycle"): f"{ENV_PREFIX}FAIL_ON_CYCLE",
            ("graph", "fail_on_dangling"): f"{ENV_PREFIX}FAIL_ON_DANGLING",
            ("graph", "visualization_format"): f"{ENV_PREFIX}VISUALIZATION_FORMAT",
            ("logging_level",): f"{ENV_PREFIX}LOGGING_LEVEL",
            ("json_logs",): f"{ENV_PREFIX}JSON_LOGS",
        }

        for path, env_var in env_overrides.items():
            value = os.environ.get(env_var)
            if value is None:
                continue

            # Navigate to nested config section
            current = config_data
            for key in path[:-1]:
                # An empty section such as "graph:" loads as None
                if not isinstance(current.get(key), dict):
                    current[key] = {}
                current = current[key]

            final_key = path[-1]
            if env_var.endswith(("_CYCLE", "_DANGLING", "_LOGS")):
                current[final_key] = value.lower() in TRUE_VALUES
            elif env_var.endswith("_LEVEL"):
                current[final_key] = value.upper()
            else:
                current[final_key] = value

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

        if not self.graph.fail_on_cycle:
            warnings.append(
                "Cycle detection is not fatal - builds may loop or miss outputs",
            )

        if self.logging_level == "DEBUG" and self.json_logs:
            warnings.append("DEBUG logging with JSON output is verbose - consider console logs")

        return warnings


class ConfigManager:
    """Configuration manager using singleton pattern."""

    _instance: TrackerConfig | None = None
    _init_lock: threading.Lock = threading.Lock()

    @classmethod
    def load_config(cls, config_path: str | Path | None = None) -> TrackerConfig:
        """Load configuration from file.

        Args:
            config_path: Path to configuration file. If None, looks for depgraph.yaml,
                        depgraph.yml or depgraph.json in the current directory and
                        falls back to defaults when none exists.

        Returns:
            Loaded TrackerConfig instance

        Raises:
            FileNotFoundError: If an explicit config file is not found
            ValueError: If config file is invalid
        """
        if config_path is None:
            for default_name in ["depgraph.yaml", "depgraph.yml", "depgraph.json"]:
                default_path = Path(default_name)
                if default_path.exists():
                    config_path = default_path
                    break
            else:
                logger.debug("no_configuration_file_using_defaults")
                return TrackerConfig.from_dict({})

        return TrackerConfig.from_yaml(config_path)

    @classmethod
    def get_config(
        cls,
        config_path: str | Path | None = None,
        reload: bool = False,
    ) -> TrackerConfig:
        """Get configuration instance (singleton pattern).

        Uses double-checked locking so concurrent threads load the
        configuration only once.

        Args:
            config_path: Path to configuration file. Only used on first call or when reload=True.
            reload: If True, force reload configuration from file.

        Returns:
            TrackerConfig instance
        """
        if cls._instance is not None and not reload:
            return cls._instance

        with cls._init_lock:
            if reload:
                cls.reset_config()
            if cls._instance is None:
                cls._instance = cls.load_config(config_path)

            return cls._instance

    @classmethod
    def reset_config(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


def load_config(config_path: str | Path | None = None) -> TrackerConfig:
    """Load configuration from file."""
    return ConfigManager.load_config(config_path)


def get_config(config_path: str | Path | None = None, reload: bool = False) -> TrackerConfig:
    """Get configuration instance (singleton pattern)."""
    return ConfigManager.get_config(config_path, reload)


def reset_config() -> None:
    """Reset the configuration instance."""
    ConfigManager.reset_config()


__all__ = [
    "ConfigManager",
    "GraphConfig",
    "TrackerConfig",
    "get_config",
    "load_config",
    "reset_config",
]
