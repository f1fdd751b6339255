"""Configuration file loader with validation"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any
from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/pipeline.yaml"

REQUIRED_KEYS = ['version', 'preprocessor', 'extraction', 'auto_tagger', 'accounts']


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load YAML configuration file with validation.
    Falls back to PIPELINE_CONFIG, then to the bundled config/pipeline.yaml.

    Args:
        config_path: Path to configuration file

    Returns:
        Dictionary with configuration

    Raises:
        ConfigurationError: If file doesn't exist or invalid YAML
    """
    config_path = config_path or os.getenv("PIPELINE_CONFIG", DEFAULT_CONFIG_PATH)

    config_file = Path(config_path)
    if not config_file.is_absolute() and not config_file.exists():
        # Resolve relative to the project root when run from elsewhere
        config_file = Path(__file__).resolve().parent.parent.parent / config_path

    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}")

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    # Validate required keys
    missing_keys = [key for key in REQUIRED_KEYS if key not in config]
    if missing_keys:
        raise ConfigurationError(f"Missing required configuration keys: {missing_keys}")

    return config


def get_section(config: Dict[str, Any], *path: str) -> Dict[str, Any]:
    """
    Get a nested configuration section

    Args:
        config: Full configuration dictionary
        path: Keys to descend, e.g. ("extraction", "cloud")

    Returns:
        Section dictionary, or empty dict if any key is missing
    """
    section = config
    for key in path:
        if not isinstance(section, dict):
            return {}
        section = section.get(key) or {}
    return section if isinstance(section, dict) else {}
