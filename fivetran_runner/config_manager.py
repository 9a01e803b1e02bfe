"""
Configuration Manager Module
Handles loading and accessing application configuration from YAML files and environment variables.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

import yaml
from dotenv import load_dotenv


DEFAULT_BASE_URL = 'https://api.fivetran.com'


@dataclass(frozen=True)
class ApiConfig:
    """Immutable settings for the Fivetran REST API client."""

    authorization: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30
    requests_per_second: float = 5
    page_size: int = 100

    def __post_init__(self):
        if not self.authorization:
            raise ValueError("Fivetran authorization is not configured (FIVETRAN_AUTHORIZATION)")
        if not self.base_url:
            raise ValueError("Fivetran base_url must not be empty")

    @classmethod
    def from_dict(cls, data: Dict) -> 'ApiConfig':
        """Build API settings from the `fivetran` configuration section."""
        return cls(
            authorization=data.get('authorization') or '',
            base_url=(data.get('base_url') or DEFAULT_BASE_URL).rstrip('/'),
            timeout=float(data.get('timeout', 30)),
            requests_per_second=float(data.get('requests_per_second', 5)),
            page_size=int(data.get('page_size', 100)),
        )


class ConfigManager:
    """Manages application configuration from YAML files and environment variables."""

    _instance = None
    _config: Dict = None

    def __new__(cls):
        """Singleton pattern for configuration."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize configuration if not already loaded."""
        if self._config is None:
            self._load_configuration()

    def _load_configuration(self) -> None:
        """Load the configuration file."""
        load_dotenv()

        self._config_dir = self._find_config_dir()
        self._config = self._load_yaml_with_env(self._config_dir / 'config.yaml')

    def _find_config_dir(self) -> Path:
        """Find the configuration directory."""
        env_config_dir = os.getenv('CONFIG_DIR')
        if env_config_dir:
            return Path(env_config_dir)

        possible_paths = [
            Path(__file__).parent.parent / 'config',  # Repository checkout
            Path.cwd() / 'config',
            Path('/app/config'),  # Docker container
        ]

        for path in possible_paths:
            if path.exists():
                return path

        raise FileNotFoundError("Configuration directory not found")

    def _load_yaml_with_env(self, file_path: Path) -> Dict:
        """
        Load YAML file with environment variable substitution.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.
        """
        if not file_path.exists():
            return {}

        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        content = self._substitute_env_vars(content)

        return yaml.safe_load(content) or {}

    def _substitute_env_vars(self, content: str) -> str:
        """
        Substitute environment variables in string.

        Supports:
        - ${VAR_NAME} - Required variable
        - ${VAR_NAME:-default} - Variable with default value
        """
        pattern = r'\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}'

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2)

            value = os.getenv(var_name)
            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                # Unset variables become empty so required settings fail validation
                return ''

        return re.sub(pattern, replacer, content)

    # ========================================
    # Configuration Getters
    # ========================================

    def get_fivetran_config(self) -> Dict:
        """Get Fivetran API configuration."""
        return self._config.get('fivetran') or {}

    def get_api_config(self) -> ApiConfig:
        """Get the immutable API client settings."""
        return ApiConfig.from_dict(self.get_fivetran_config())

    def get_run_config(self) -> Dict:
        """Get sync run scenario configuration."""
        return self._config.get('run') or {}

    def get_sweeper_config(self) -> Dict:
        """Get retention sweeper configuration."""
        return self._config.get('sweeper') or {}

    def get_endpoints_config(self) -> Dict:
        """Get public addresses of the source and destination databases."""
        return self._config.get('endpoints') or {}

    def get_logging_config(self) -> Dict:
        """Get logging configuration."""
        return self._config.get('logging') or {}

    def reload(self) -> None:
        """Reload configuration from files."""
        self._config = None
        self._load_configuration()


# Convenience function
def get_config() -> ConfigManager:
    """Get the singleton configuration manager instance."""
    return ConfigManager()
