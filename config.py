import copy
import json
import logging

from constants import CONFIG_FILE, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


def _merge(base, overrides):
    """Merge `overrides` into a copy of `base`; nested dicts are merged key-wise."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path=CONFIG_FILE):
    """Reads the configuration from the JSON file, falling back to defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(path, "r") as f:
            content = f.read().strip()
    except FileNotFoundError:
        return config  # Use defaults
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        return config

    if not content:
        return config

    try:
        loaded_config = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring malformed config %s: %s", path, e)
        return config

    if isinstance(loaded_config, dict):
        config = _merge(config, loaded_config)
    return config


def save_config(config, path=CONFIG_FILE):
    """Saves the configuration dictionary to the JSON file."""
    try:
        with open(path, "w") as f:
            json.dump(config, f, indent=2)
        logger.info("Configuration saved to %s", path)
        return True
    except (OSError, TypeError) as e:
        logger.error("Error saving config: %s", e)
        return False


def indicator_options(config, name):
    """Options for one indicator, as configured."""
    return dict(config.get("indicators", {}).get(name, {}))
