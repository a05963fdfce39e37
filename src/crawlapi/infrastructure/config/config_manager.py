"""Configuration manager for loading and validating .crawlapi.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from crawlapi.domain.config import ClientConfig, RetryConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".crawlapi.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .crawlapi.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .crawlapi.yml file (searched from current directory)
    3. Environment variables (CRAWLAPI_*)
    4. Explicit client arguments (handled by CrawlApiClient)
    """

    DEFAULT_CONFIG = ClientConfig().model_dump()

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .crawlapi.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: ClientConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {field}: {error['msg']}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .crawlapi.yml starting from current directory"""
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> ClientConfig:
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping")
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)
        return ClientConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        if os.getenv("CRAWLAPI_TOKEN"):
            config["token"] = os.getenv("CRAWLAPI_TOKEN")

        if os.getenv("CRAWLAPI_BASE_URL"):
            config["base_url"] = os.getenv("CRAWLAPI_BASE_URL")

        # Left as a string, pydantic reports a malformed value
        if os.getenv("CRAWLAPI_TIMEOUT_SECS"):
            config["timeout_secs"] = os.getenv("CRAWLAPI_TIMEOUT_SECS")

        return config

    def get_retry_config(self) -> RetryConfig:
        return self.config.retry

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation, e.g. "retry.max_retries")"""
        value = self.config.model_dump()
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
