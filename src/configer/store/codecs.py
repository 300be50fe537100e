"""Decoders for the configuration file formats the store understands."""

import configparser
import io
import json
import logging
import tomllib
from typing import Any, Callable, Dict

import yaml
from dotenv import dotenv_values

from ..exceptions import ConfigParseError, UnsupportedConfigError

logger = logging.getLogger(__name__)


def _decode_toml(text: str) -> Dict[str, Any]:
    return tomllib.loads(text)


def _decode_yaml(text: str) -> Any:
    return yaml.safe_load(text) or {}


def _decode_json(text: str) -> Any:
    return json.loads(text)


def _decode_dotenv(text: str) -> Dict[str, Any]:
    # Keys without a value ("FLAG") come back as None; keep them as empty strings.
    values = dotenv_values(stream=io.StringIO(text))
    return {key: "" if value is None else value for key, value in values.items()}


def _decode_ini(text: str) -> Dict[str, Any]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.read_string(text)

    result: Dict[str, Any] = dict(parser.defaults())
    for section in parser.sections():
        result[section] = {
            key: value
            for key, value in parser.items(section)
            if key not in parser.defaults()
        }
    return result


DECODERS: Dict[str, Callable[[str], Any]] = {
    "toml": _decode_toml,
    "yaml": _decode_yaml,
    "yml": _decode_yaml,
    "json": _decode_json,
    "env": _decode_dotenv,
    "dotenv": _decode_dotenv,
    "ini": _decode_ini,
}

SUPPORTED_TYPES = tuple(DECODERS)

_DECODE_ERRORS = (
    tomllib.TOMLDecodeError,
    yaml.YAMLError,
    json.JSONDecodeError,
    configparser.Error,
)


def insensitivise(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with every map key lower-cased, recursively."""
    result: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = insensitivise(value)
        result[str(key).lower()] = value
    return result


def decode(config_type: str, text: str, source: str = "<string>") -> Dict[str, Any]:
    """Decode ``text`` as ``config_type`` into a nested, lower-cased mapping.

    Args:
        config_type: One of :data:`SUPPORTED_TYPES` (case-insensitive).
        text: Raw file contents.
        source: Name used in error details, usually the file path.

    Returns:
        Nested dictionary of configuration values.

    Raises:
        UnsupportedConfigError: If ``config_type`` is not supported.
        ConfigParseError: If the text is malformed or the document is not a map.
    """
    decoder = DECODERS.get(config_type.lower())
    if decoder is None:
        raise UnsupportedConfigError(
            f"Unsupported config type: {config_type!r}",
            details={"supported": list(SUPPORTED_TYPES)}
        )

    try:
        data = decoder(text)
    except _DECODE_ERRORS as e:
        logger.error(f"Failed to parse {config_type} config from {source}: {e}")
        raise ConfigParseError(
            f"Failed to parse {config_type} configuration",
            details={"config_path": source},
            original_exception=e
        ) from e

    if not isinstance(data, dict):
        raise ConfigParseError(
            "Configuration document must be a map at the top level",
            details={"config_path": source, "type": type(data).__name__}
        )

    return insensitivise(data)
