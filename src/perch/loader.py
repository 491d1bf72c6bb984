"""Load a ``DeploymentConfig`` from JSON.

Recognized keys use the hosting platform's camelCase spelling::

    {
        "outputDirectory": "dist",
        "buildCommand": null,
        "framework": null,
        "rewrites": [{"source": "/(.*)", "destination": "/index.html"}],
        "cleanUrls": false
    }

A project directory is searched for ``perch.json`` first, then
``vercel.json``. A project with neither gets the default config.
"""

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from perch.config import DeploymentConfig
from perch.errors import ConfigurationError
from perch.rewrites import RewriteRule

logger = logging.getLogger("perch.loader")

CONFIG_FILENAMES = ("perch.json", "vercel.json")


def _optional_str(key: str, value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    msg = f"{key!r} must be a string or null, got {type(value).__name__}"
    raise ConfigurationError(msg)


def _str(key: str, value: Any) -> str:
    if isinstance(value, str) and value:
        return value
    msg = f"{key!r} must be a non-empty string, got {value!r}"
    raise ConfigurationError(msg)


def _bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    msg = f"{key!r} must be true or false, got {value!r}"
    raise ConfigurationError(msg)


def _rewrites(key: str, value: Any) -> tuple[RewriteRule, ...]:
    if not isinstance(value, list):
        msg = f"{key!r} must be a list of {{source, destination}} objects"
        raise ConfigurationError(msg)
    rules: list[RewriteRule] = []
    for position, item in enumerate(value):
        if not isinstance(item, Mapping):
            msg = f"{key}[{position}] must be an object, got {type(item).__name__}"
            raise ConfigurationError(msg)
        try:
            rules.append(RewriteRule.from_mapping(item))
        except TypeError as exc:
            raise ConfigurationError(f"{key}[{position}]: {exc}") from exc
    return tuple(rules)


# JSON key -> (dataclass field, converter)
_FIELDS: dict[str, tuple[str, Callable[[str, Any], Any]]] = {
    "outputDirectory": ("output_directory", _optional_str),
    "buildCommand": ("build_command", _optional_str),
    "framework": ("framework", _optional_str),
    "rewrites": ("rewrites", _rewrites),
    "index": ("index", _str),
    "cleanUrls": ("clean_urls", _bool),
    "filesystemFirst": ("filesystem_first", _bool),
    "strict": ("strict", _bool),
    "notFoundPage": ("not_found_page", _optional_str),
}


def config_from_mapping(data: Mapping[str, Any]) -> DeploymentConfig:
    """Convert a parsed JSON object into a ``DeploymentConfig``.

    Raises ``ConfigurationError`` for wrongly typed values. Unknown keys
    are ignored.
    """
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in _FIELDS:
            logger.debug("Ignoring unrecognized config key %r", key)
            continue
        field_name, convert = _FIELDS[key]
        kwargs[field_name] = convert(key, value)
    return DeploymentConfig(**kwargs)


def find_config(project_dir: str | Path) -> Path | None:
    """Return the first config file present in *project_dir*, if any."""
    directory = Path(project_dir)
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: str | Path) -> DeploymentConfig:
    """Load configuration from a project directory or a config file.

    Raises ``ConfigurationError`` if the file is not valid JSON, its top
    level is not an object, or a value has the wrong type.
    """
    path = Path(path)
    config_file = find_config(path) if path.is_dir() else path
    if config_file is None:
        logger.debug("No config file in %s; using defaults", path)
        return DeploymentConfig()
    if not config_file.is_file():
        msg = f"Config file not found: {config_file}"
        raise ConfigurationError(msg)

    try:
        text = config_file.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"{config_file}: cannot read: {exc}"
        raise ConfigurationError(msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"{config_file}: not valid UTF-8: {exc}"
        raise ConfigurationError(msg) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"{config_file}: invalid JSON: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, dict):
        msg = f"{config_file}: top level must be an object, got {type(data).__name__}"
        raise ConfigurationError(msg)

    try:
        config = config_from_mapping(data)
    except ConfigurationError as exc:
        raise ConfigurationError(f"{config_file}: {exc}") from exc
    logger.debug("Loaded %s", config_file)
    return config
