"""
Configuration defaults and config file loading.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Default paths (can be overridden)
_DATA_DIR = Path(__file__).parent.parent
CONFIG_FILE = _DATA_DIR / "config.json"

# Seconds allowed for fetching a tracking page before falling back
FETCH_TIMEOUT = 12

# Characters scanned after a "Scheduled Departure"-style label
LABEL_WINDOW = 260

ACCEPT_HEADER = "text/html,application/json,text/plain,*/*"
USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

DEFAULTS = {
    "fetch_timeout": FETCH_TIMEOUT,
    "label_window": LABEL_WINDOW,
    "user_agent": USER_AGENT,
}


def _positive_number(value, integral=False):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if integral and not isinstance(value, int):
        return False
    return value > 0


def load_config(config_file=None):
    """Load configuration from file with error handling.

    A missing file is not an error: the defaults are returned. Keys with
    unusable values are replaced by their defaults.

    Args:
        config_file: Path to config file. Defaults to config.json.

    Returns:
        Config dict with every key in DEFAULTS present.
    """
    if config_file is None:
        config_file = CONFIG_FILE

    config_path = Path(config_file)
    if not config_path.exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return dict(DEFAULTS)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"{config_path.name} is corrupted ({e}), using defaults")
        return dict(DEFAULTS)
    except OSError as e:
        logger.warning(f"Could not read {config_path} ({e}), using defaults")
        return dict(DEFAULTS)

    if not isinstance(config, dict):
        logger.warning(f"{config_path.name} has invalid format, using defaults")
        return dict(DEFAULTS)

    # Validate tunables
    if 'fetch_timeout' in config and not _positive_number(config['fetch_timeout']):
        logger.warning(f"Ignoring invalid fetch_timeout: {config['fetch_timeout']!r}")
        del config['fetch_timeout']
    if 'label_window' in config and not _positive_number(config['label_window'], integral=True):
        logger.warning(f"Ignoring invalid label_window: {config['label_window']!r}")
        del config['label_window']
    if 'user_agent' in config and not (isinstance(config['user_agent'], str) and config['user_agent'].strip()):
        logger.warning("Ignoring empty user_agent")
        del config['user_agent']

    # Set defaults for optional fields
    for key, value in DEFAULTS.items():
        config.setdefault(key, value)
    return config

