"""Configuration management for git-wayback."""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict, field

from .interfaces import IConfigManager
from .models import SelectionPolicy


logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class SearchConfig:
    """Wayback search configuration."""
    start_ref: str = "HEAD"
    policies: List[str] = field(default_factory=lambda: [p.value for p in SelectionPolicy])
    first_parent: bool = False


@dataclass
class DisplayConfig:
    """Display and output configuration."""
    hash_length: int = 12
    tag_width: int = 12
    color: bool = True
    show_current_tag: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"


@dataclass
class WaybackConfig:
    """Complete configuration for git-wayback."""
    wayback: SearchConfig
    display: DisplayConfig
    logging: LoggingConfig

    def __init__(self):
        self.wayback = SearchConfig()
        self.display = DisplayConfig()
        self.logging = LoggingConfig()


class ConfigManager(IConfigManager):
    """Manages configuration loading, saving, and validation."""

    DEFAULT_CONFIG_DIR = ".git-wayback"
    DEFAULT_CONFIG_NAME = "config.yml"

    def __init__(self, project_root: Optional[Path] = None):
        self.project_root = project_root or Path.cwd()
        self.config_dir = self.project_root / self.DEFAULT_CONFIG_DIR
        self.config_path = self.config_dir / self.DEFAULT_CONFIG_NAME

    def load_config(self, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """Load configuration from YAML file.

        A missing file yields the defaults. An unreadable or malformed file
        is logged and the defaults are used instead.
        """
        path = config_path or self.config_path

        if not path.exists():
            return self.get_default_config()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return self.get_default_config()

        if not isinstance(config_data, dict):
            logger.warning(f"Ignoring config at {path}: top level must be a mapping")
            return self.get_default_config()

        # Merge with defaults to ensure all keys are present
        return self._merge_configs(self.get_default_config(), config_data)

    def save_config(self, config: Dict[str, Any], config_path: Optional[Path] = None) -> bool:
        """Save configuration to YAML file."""
        path = config_path or self.config_path

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, 'w', encoding='utf-8') as f:
                yaml.dump(config, f, default_flow_style=False, indent=2)

            return True
        except OSError as e:
            logger.error(f"Failed to save config to {path}: {e}")
            return False

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values."""
        default_config = WaybackConfig()
        return {
            'wayback': asdict(default_config.wayback),
            'display': asdict(default_config.display),
            'logging': asdict(default_config.logging),
        }

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """Validate configuration and return any errors."""
        errors = []

        # A section left empty in YAML loads as None
        for section in ('wayback', 'display', 'logging'):
            if not isinstance(config.get(section, {}), dict):
                errors.append(f"{section} must be a mapping")
        if errors:
            return errors

        # Validate search config
        search = config.get('wayback', {})
        start_ref = search.get('start_ref', 'HEAD')
        if not isinstance(start_ref, str) or not start_ref.strip():
            errors.append("wayback.start_ref must be a non-empty string")

        policies = search.get('policies', [])
        known = {p.value for p in SelectionPolicy}
        if not isinstance(policies, list) or not policies:
            errors.append("wayback.policies must be a non-empty list")
        elif any(policy not in known for policy in policies):
            errors.append("wayback.policies may only contain 'tagged' and 'untagged'")

        if not isinstance(search.get('first_parent', False), bool):
            errors.append("wayback.first_parent must be true or false")

        # Validate display config
        display = config.get('display', {})
        hash_length = display.get('hash_length', 12)
        if not isinstance(hash_length, int) or not (4 <= hash_length <= 40):
            errors.append("display.hash_length must be between 4 and 40")

        tag_width = display.get('tag_width', 12)
        if not isinstance(tag_width, int) or tag_width <= 0:
            errors.append("display.tag_width must be greater than 0")

        # Validate logging config
        level = config.get('logging', {}).get('level', 'WARNING')
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            errors.append(f"logging.level must be one of {', '.join(LOG_LEVELS)}")

        return errors

    def _merge_configs(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with default config."""
        result = default.copy()

        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def create_default_config_file(self) -> bool:
        """Create a default configuration file."""
        return self.save_config(self.get_default_config())

    def get_config_path(self) -> Path:
        """Get the path to the configuration file."""
        return self.config_path
