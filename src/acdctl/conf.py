"""User defaults for acdctl.

Optional, read-only config at ~/.config/acdctl/config.json (XDG-compliant)::

    {"silent": true, "brief": false, "verbose": 0}

Command-line flags can only switch these on (or raise verbosity); the file
never overrides an explicit flag and acdctl never writes it.
"""
from __future__ import annotations

import json
import logging
import os

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'acdctl')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

_BOOL_KEYS = ('silent', 'brief')


def load_config(path: str | None = None) -> dict:
    """Load user config from disk. Returns empty dict on missing/corrupt file."""
    path = path or CONFIG_PATH
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(config, dict):
        log.warning("Ignoring config %s: expected a JSON object", path)
        return {}
    return config


def get_defaults(config: dict | None = None) -> dict:
    """Normalised defaults: ``silent``/``brief`` bools, ``verbose`` int >= 0."""
    if config is None:
        config = load_config()
    defaults = {}
    for key in _BOOL_KEYS:
        value = config.get(key, False)
        if not isinstance(value, bool):
            log.warning("Ignoring config %s=%r: expected true or false", key, value)
            value = False
        defaults[key] = value
    try:
        defaults['verbose'] = max(0, int(config.get('verbose', 0)))
    except (TypeError, ValueError):
        defaults['verbose'] = 0
    return defaults
