"""
Configuration Management Module

Thread-safe configuration management with support for:
- YAML configuration files
- Environment-specific override files (config.<ENV>.yaml)
- Environment variable overrides for deployment values
- Dynamic configuration updates
- Dot-notation access to nested values
"""

import copy
import os
import yaml
from threading import RLock
from typing import Any, Dict, Optional, TypeVar
from pathlib import Path
from dotenv import load_dotenv
from loguru import logger

from .exceptions import ConfigurationError


T = TypeVar('T')

# Environment variable -> configuration key
ENV_OVERRIDES = {
    'STOREFRONT_API_URL': 'backend.api_url',
    'STOREFRONT_PROJECT_ID': 'store.project_id',
    'STOREFRONT_OWNERSHIP_POLICY': 'auth.ownership_failure_policy',
    'STOREFRONT_LOG_LEVEL': 'server.log_level',
}


class Config:
    """
    Thread-safe configuration manager.

    Features:
    - Load configuration from YAML files
    - Environment-specific overrides (dev, staging, production)
    - STOREFRONT_* environment variables (read from .env when present)
    - Dynamic runtime configuration updates
    - Dot-notation key access (e.g., 'backend.api_url')
    - Type-safe value retrieval with defaults

    Example:
        >>> config = Config()
        >>> api_url = config.get('backend.api_url')
        >>> config.set('auth.ownership_failure_policy', 'fail-open')
        >>> attempts = config.get('auth.max_attempts', default=5, expected_type=int)
    """

    def __init__(self, config_path: Optional[str] = None, env: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to base config.yaml file (default: <repo>/config.yaml)
            env: Environment name for overrides (default: from ENV environment variable)

        Raises:
            ConfigurationError: If configuration file cannot be loaded
        """
        self._lock = RLock()
        self._base_config: Dict[str, Any] = {}
        self._overrides: Dict[str, Any] = {}
        self.env = env or os.getenv('ENV', 'production')

        self._explicit_path = config_path is not None
        if config_path is None:
            project_dir = Path(__file__).parent.parent.parent
            config_path = project_dir / 'config.yaml'
            if not config_path.exists():
                config_path = Path.cwd() / 'config.yaml'
        else:
            config_path = Path(config_path)

        self._config_path = config_path
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file, env file and environment variables."""
        try:
            with open(self._config_path, 'r') as f:
                self._base_config = yaml.safe_load(f) or {}

            logger.info(f"Configuration loaded from {self._config_path}")

            env_config_path = self._config_path.parent / f'config.{self.env}.yaml'
            if env_config_path.exists():
                with open(env_config_path, 'r') as f:
                    env_overrides = yaml.safe_load(f) or {}
                    self._merge_config(self._base_config, env_overrides)
                    logger.info(f"Environment overrides loaded from {env_config_path}")

        except FileNotFoundError:
            if not self._explicit_path:
                # Installed without a config file: built-in defaults apply
                logger.warning(f"No configuration file at {self._config_path}, using defaults")
                self._base_config = {}
                self._apply_environment()
                return
            raise ConfigurationError(
                f"Configuration file not found: {self._config_path}",
                details={'path': str(self._config_path)}
            )
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}",
                details={'path': str(self._config_path)}
            )

        self._apply_environment()

    def _apply_environment(self) -> None:
        """Apply STOREFRONT_* environment variables on top of the file config."""
        load_dotenv()

        for env_name, key_path in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                self._set_nested_value(self._base_config, key_path, value)
                logger.debug(f"Configuration key '{key_path}' taken from {env_name}")

    def _merge_config(self, base: Dict, override: Dict) -> None:
        """
        Recursively merge override config into base config.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary
        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _get_nested_value(self, config_dict: Dict, key_path: str) -> Any:
        """
        Get value from nested dictionary using dot notation.

        Raises:
            KeyError: If key path doesn't exist
        """
        keys = key_path.split('.')
        value = config_dict

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                raise KeyError(f"Configuration key not found: {key_path}")

        return value

    def _set_nested_value(self, config_dict: Dict, key_path: str, value: Any) -> None:
        """
        Set value in nested dictionary using dot notation.

        Creates intermediate dictionaries if they don't exist.
        """
        keys = key_path.split('.')
        current = config_dict

        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(
        self,
        key_path: str,
        default: Optional[T] = None,
        expected_type: Optional[type] = None
    ) -> Any:
        """
        Get configuration value by dot-notation path.

        Checks overrides first, then base configuration.

        Args:
            key_path: Dot-separated key path (e.g., 'backend.api_url')
            default: Default value if key not found
            expected_type: Expected type of the value (validates and converts)

        Returns:
            Configuration value

        Raises:
            ConfigurationError: If key not found and no default provided
            TypeError: If value doesn't match expected_type

        Example:
            >>> api_url = config.get('backend.api_url')
            >>> timeout = config.get('backend.timeout', default=30, expected_type=int)
        """
        with self._lock:
            try:
                value = self._get_nested_value(self._overrides, key_path)
            except KeyError:
                try:
                    value = self._get_nested_value(self._base_config, key_path)
                except KeyError:
                    if default is not None:
                        value = default
                    else:
                        raise ConfigurationError(
                            f"Configuration key '{key_path}' not found and no default provided",
                            config_key=key_path
                        )

            if expected_type is not None:
                if value is None:
                    return value

                # Handle boolean conversion for string values
                if expected_type == bool and isinstance(value, str):
                    value = value.lower() in ('true', '1', 'yes', 'on')
                elif expected_type in (int, float):
                    try:
                        value = expected_type(value)
                    except (ValueError, TypeError):
                        raise TypeError(
                            f"Cannot convert '{key_path}' value to {expected_type.__name__}: {value}"
                        )
                elif not isinstance(value, expected_type):
                    raise TypeError(
                        f"Configuration key '{key_path}' has type {type(value).__name__}, "
                        f"expected {expected_type.__name__}"
                    )

            return value

    def set(self, key_path: str, value: Any) -> None:
        """
        Set configuration value (runtime override).

        Example:
            >>> config.set('auth.lockout_minutes', 30)
        """
        with self._lock:
            self._set_nested_value(self._overrides, key_path, value)
            logger.info(f"Configuration override set: {key_path} = {value}")

    def remove_override(self, key_path: str) -> bool:
        """
        Remove a runtime override.

        Returns:
            True if override was removed, False if not found
        """
        with self._lock:
            keys = key_path.split('.')
            current = self._overrides

            for key in keys[:-1]:
                if not isinstance(current, dict) or key not in current:
                    return False
                current = current[key]

            if isinstance(current, dict) and keys[-1] in current:
                del current[keys[-1]]
                logger.info(f"Configuration override removed: {key_path}")
                return True

            return False

    def get_all_overrides(self) -> Dict[str, Any]:
        """Get all current runtime overrides."""
        with self._lock:
            return copy.deepcopy(self._overrides)

    def clear_overrides(self) -> None:
        """Clear all runtime overrides."""
        with self._lock:
            self._overrides.clear()
            logger.info("All configuration overrides cleared")

    def reload(self) -> None:
        """
        Reload configuration from file.

        Preserves runtime overrides.
        """
        with self._lock:
            self._load_config()
            logger.info("Configuration reloaded from file")

    def to_dict(self) -> Dict[str, Any]:
        """Get complete configuration (base merged with overrides) as a dictionary."""
        with self._lock:
            result = copy.deepcopy(self._base_config)
            self._merge_config(result, copy.deepcopy(self._overrides))
            return result


# Global singleton instance
config = Config()
