"""Layered key-value configuration store.

The store keeps several sources and resolves every lookup through them in
a fixed order:

1. explicit overrides (:meth:`Store.set`)
2. environment variables bound to a key (:meth:`Store.bind_env`)
3. automatic environment lookup (:meth:`Store.automatic_env`)
4. configuration read from files (:meth:`Store.read_in_config` and
   :meth:`Store.merge_in_config`)
5. defaults (:meth:`Store.set_default`)

Keys are case-insensitive and use dot notation to address nested maps,
e.g. ``"server.port"``. Environment variable names are derived from keys by
upper-casing and replacing dots with underscores, prefixed with the
configured env prefix: with prefix ``APP``, ``server.port`` reads
``APP_SERVER_PORT``.
"""

import copy
import logging
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from . import cast
from .codecs import decode, insensitivise
from ..exceptions import ConfigerError, ConfigFileNotFoundError

_MISSING = object()


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries with ``override`` taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if (key in result and
                isinstance(result[key], dict) and
                isinstance(value, dict)):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _search_path(source: Mapping[str, Any], path: List[str]) -> Any:
    value: Any = source
    for part in path:
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return _MISSING
    return value


def _set_path(target: Dict[str, Any], path: List[str], value: Any) -> None:
    for part in path[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    target[path[-1]] = value


def _flatten_keys(source: Mapping[str, Any], prefix: str = "") -> Iterable[str]:
    for key, value in source.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict) and value:
            yield from _flatten_keys(value, f"{full_key}.")
        else:
            yield full_key


class Store:
    """Configuration store with file, environment and default layers.

    Args:
        environ: Mapping consulted for environment lookups. Defaults to the
            live ``os.environ`` so changes made by the process are visible
            to later lookups.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.logger = logging.getLogger(__name__)

        self._environ: Mapping[str, str] = os.environ if environ is None else environ
        self._config_type = ""
        self._config_file = ""

        self._override: Dict[str, Any] = {}
        self._config: Dict[str, Any] = {}
        self._defaults: Dict[str, Any] = {}

        self._env_prefix = ""
        self._env_bindings: Dict[str, List[str]] = {}
        self._automatic_env = False
        self._parents: List[str] = []

    # ------------------------------------------------------------------
    # File sources
    # ------------------------------------------------------------------

    def set_config_type(self, config_type: str) -> None:
        """Set the format used to decode config files ("toml", "yaml", ...)."""
        self._config_type = config_type.lower()

    def set_config_file(self, path: str) -> None:
        """Set the path read by :meth:`read_in_config` and :meth:`merge_in_config`."""
        self._config_file = str(path)

    @property
    def config_file(self) -> str:
        return self._config_file

    def _resolved_config_type(self) -> str:
        if self._config_type:
            return self._config_type
        return Path(self._config_file).suffix.lstrip(".").lower()

    def _load_config_file(self) -> Dict[str, Any]:
        path = Path(self._config_file)

        if not self._config_file or not path.exists():
            raise ConfigFileNotFoundError(
                "Config file not found",
                details={"config_path": self._config_file}
            )

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigerError(
                "Failed to read configuration file",
                details={"config_path": self._config_file},
                original_exception=e
            ) from e

        return decode(self._resolved_config_type(), text, source=self._config_file)

    def read_in_config(self) -> None:
        """Replace the file layer with the contents of the config file.

        Raises:
            ConfigFileNotFoundError: If the file does not exist.
            ConfigParseError: If the file cannot be decoded.
            UnsupportedConfigError: If the config type is unknown.
            ConfigerError: If the file cannot be read.
        """
        self._config = self._load_config_file()
        self.logger.debug(f"Read configuration from {self._config_file}")

    def merge_in_config(self) -> None:
        """Merge the config file over the file layer; same errors as :meth:`read_in_config`."""
        self.merge_config_map(self._load_config_file())
        self.logger.debug(f"Merged configuration from {self._config_file}")

    def merge_config_map(self, data: Mapping[str, Any]) -> None:
        """Merge a nested mapping over the file layer."""
        self._config = deep_merge(self._config, insensitivise(dict(data)))

    # ------------------------------------------------------------------
    # Defaults and overrides
    # ------------------------------------------------------------------

    def set_default(self, key: str, value: Any) -> None:
        _set_path(self._defaults, key.lower().split("."), value)

    def set(self, key: str, value: Any) -> None:
        _set_path(self._override, key.lower().split("."), value)

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def set_env_prefix(self, prefix: str) -> None:
        self._env_prefix = prefix

    def env_name(self, key: str) -> str:
        """Return the environment variable name derived from ``key``."""
        full_key = ".".join(self._parents + [key.lower()])
        name = full_key.replace(".", "_")
        if self._env_prefix:
            name = f"{self._env_prefix}_{name}"
        return name.upper()

    def bind_env(self, key: str, *env_names: str) -> None:
        """Bind ``key`` to one or more environment variables.

        Without explicit names the variable is derived from the key and the
        current env prefix. When several names are given the first one set
        wins.

        Raises:
            ValueError: If ``key`` is empty.
        """
        if not key:
            raise ValueError("missing key to bind to")

        lkey = key.lower()
        names = list(env_names) if env_names else [self.env_name(lkey)]
        self._env_bindings[lkey] = names
        self.logger.debug(f"Bound key {lkey!r} to environment variables {names}")

    def automatic_env(self) -> None:
        """Consult the environment for every key looked up."""
        self._automatic_env = True

    def _getenv(self, name: str) -> Optional[str]:
        value = self._environ.get(name)
        return value if value else None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _find(self, key: str) -> Any:
        lkey = key.lower()
        path = lkey.split(".")

        value = _search_path(self._override, path)
        if value is not _MISSING:
            return value

        for name in self._env_bindings.get(lkey, ()):
            env_value = self._getenv(name)
            if env_value is not None:
                return env_value

        if self._automatic_env:
            env_value = self._getenv(self.env_name(lkey))
            if env_value is not None:
                return env_value

        value = _search_path(self._config, path)
        if value is not _MISSING:
            return value

        return _search_path(self._defaults, path)

    def get(self, key: str) -> Any:
        """Return the raw value for ``key``, or None when no source has it."""
        value = self._find(key)
        return None if value is _MISSING else value

    def is_set(self, key: str) -> bool:
        return self._find(key) is not _MISSING

    def get_bool(self, key: str) -> bool:
        return cast.to_bool(self.get(key))

    def get_int(self, key: str) -> int:
        return cast.to_int(self.get(key))

    def get_uint(self, key: str) -> int:
        return cast.to_uint(self.get(key))

    def get_float(self, key: str) -> float:
        return cast.to_float(self.get(key))

    def get_string(self, key: str) -> str:
        return cast.to_string(self.get(key))

    def get_string_slice(self, key: str) -> List[str]:
        return cast.to_string_list(self.get(key))

    def get_string_map(self, key: str) -> Dict[str, Any]:
        layers = self._subtree_layers(key.lower())
        if layers is None:
            return copy.deepcopy(cast.to_string_map(self.get(key)))

        merged: Dict[str, Any] = {}
        for layer in layers:
            merged = deep_merge(merged, layer)
        return merged

    def get_duration(self, key: str) -> timedelta:
        return cast.to_duration(self.get(key))

    def get_time(self, key: str) -> datetime:
        return cast.to_time(self.get(key))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def all_keys(self) -> List[str]:
        """Return every known leaf key in dot notation, sorted."""
        keys: Set[str] = set()
        for source in (self._override, self._config, self._defaults):
            keys.update(_flatten_keys(source))
        keys.update(self._env_bindings)
        return sorted(keys)

    def all_settings(self) -> Dict[str, Any]:
        """Return a nested snapshot of every known key, resolved through all layers."""
        settings: Dict[str, Any] = {}

        for key in self.all_keys():
            value = self._find(key)
            if value is _MISSING:
                continue

            path = key.split(".")
            target = settings
            for part in path[:-1]:
                target = target.setdefault(part, {})
                if not isinstance(target, dict):
                    break
            else:
                target[path[-1]] = copy.deepcopy(value)

        return settings

    def _subtree_layers(self, lkey: str) -> Optional[List[Dict[str, Any]]]:
        # Maps under ``lkey`` from defaults, config and override, lowest first.
        # None when the winning value at ``lkey`` is not a map.
        if not isinstance(self._find(lkey), dict):
            return None

        path = lkey.split(".")
        layers = []
        for source in (self._defaults, self._config, self._override):
            value = _search_path(source, path)
            layers.append(copy.deepcopy(value) if isinstance(value, dict) else {})
        return layers

    def sub(self, key: str) -> "Store":
        """Return a store scoped to the map at ``key``.

        Defaults, file values and overrides below ``key`` are all carried
        over. The scoped store keeps the env prefix, automatic env flag and
        any bindings below ``key``, and derives env names from the full key
        path. If ``key`` does not hold a map an empty, independent store is
        returned.
        """
        lkey = key.lower()
        scoped = Store(environ=self._environ)

        layers = self._subtree_layers(lkey)
        if layers is None:
            self.logger.debug(f"Key {lkey!r} is not a map; returning empty store")
            return scoped

        scoped._defaults, scoped._config, scoped._override = layers
        scoped._parents = self._parents + lkey.split(".")
        scoped._env_prefix = self._env_prefix
        scoped._automatic_env = self._automatic_env

        prefix = f"{lkey}."
        for bound_key, names in self._env_bindings.items():
            if bound_key.startswith(prefix):
                scoped._env_bindings[bound_key[len(prefix):]] = list(names)

        return scoped
