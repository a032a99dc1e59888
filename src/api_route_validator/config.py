"""YAML configuration file support.

The file maps command names to option defaults, for example::

    validate-routes:
      app: myproject.main:app
      include-pattern: ["/api/*"]
      report-format: json

Keys may use hyphens or underscores. The result is used as click's
``default_map``, so command-line flags and environment variables still win.
"""

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The configuration file is unreadable or malformed."""


def load_config(path: Path) -> dict[str, dict]:
    """Load a config file into a click default_map."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping of command names")

    default_map = {}
    for command, options in raw.items():
        if options is None:
            continue
        if not isinstance(options, dict):
            raise ConfigError(f"Section '{command}' in {path} must be a mapping of options")
        default_map[str(command)] = {str(k).replace("-", "_"): v for k, v in options.items()}

    logger.debug("Loaded config sections %s from %s", sorted(default_map), path)
    return default_map
