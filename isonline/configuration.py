# isonline/configuration.py

"""
Configuration loader for isonline.

Settings are read from an optional YAML file (isonline.yaml by default) and
merged over the defaults below. Command-line flags override both.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigurationError
from .models import AddressFamily, CheckConfig, CheckStrategy

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = 'ISONLINE_CONFIG'

# Default structure and values; also what save_config writes for a fresh file.
DEFAULT_CONFIG: Dict[str, Any] = {
    'port': 22,
    'timeout_ms': 1000,
    'family': 'both',      # Options: both, v4, v6
    'strategy': 'any',     # Options: any, all
    'workers': 0,          # 0 = number of CPUs x 4, capped at 255
    'log_level': 'WARNING',
    'color': True,
}

_HEADER = (
    "# isonline Configuration File\n"
    "# Command-line flags take precedence over the values below.\n\n"
)


def get_config_path(path: Optional[str] = None) -> str:
    """Returns the path to the config file."""
    return path or os.environ.get(CONFIG_ENV_VAR) or "isonline.yaml"


def save_config(config: Dict[str, Any], path: Optional[str] = None):
    """Writes the configuration to the config file."""
    config_path = get_config_path(path)
    try:
        with open(config_path, 'w') as f:
            f.write(_HEADER)
            yaml.dump(config, f, sort_keys=False, default_flow_style=False, indent=2)
    except OSError as e:
        raise ConfigurationError(f"Could not write config file to '{config_path}': {e}") from e


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads the configuration file and merges it over DEFAULT_CONFIG.

    A missing file yields the defaults. An unreadable or malformed file
    raises ConfigurationError.
    """
    config_path = get_config_path(path)
    config = DEFAULT_CONFIG.copy()
    try:
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug("No configuration file at '%s', using defaults.", config_path)
        return config
    except OSError as e:
        raise ConfigurationError(f"Could not read '{config_path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing '{config_path}': {e}") from e

    if user_config is None:
        return config
    if not isinstance(user_config, dict):
        raise ConfigurationError(f"'{config_path}' must contain a mapping of settings.")

    for key, value in user_config.items():
        if key not in DEFAULT_CONFIG:
            logger.warning("Ignoring unknown setting '%s' in '%s'.", key, config_path)
            continue
        config[key] = value
    return config


def build_check_config(config: Dict[str, Any]) -> CheckConfig:
    """Converts a merged configuration mapping into a CheckConfig."""
    try:
        port = int(config.get('port', DEFAULT_CONFIG['port']))
        timeout_ms = float(config.get('timeout_ms', DEFAULT_CONFIG['timeout_ms']))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    return CheckConfig(
        port=port,
        family=AddressFamily.parse(config.get('family', DEFAULT_CONFIG['family'])),
        timeout=timeout_ms / 1000.0,
        strategy=CheckStrategy.parse(config.get('strategy', DEFAULT_CONFIG['strategy'])),
    )
