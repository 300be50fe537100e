"""Configuration facade and builder.

:func:`new` loads ``{prefix}default.{type}``, merges the overlay selected by
the ``ENV`` variable (``ENV=PROD`` merges ``{prefix}prod.{type}``), wires up
environment bindings and returns a read-only :class:`Configer`.
"""

# Getter names shadow builtins inside the class body; keep annotations lazy.
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import (
    ConfigerError,
    ConfigFileNotFoundError,
    ConfigLoadError,
    EnvBindError,
)
from .options import Option, Settings
from .store import Store

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Configer:
    """Read-only typed access to a configuration store.

    Keys use dot notation (e.g. ``"server.port"``) and are case-insensitive.
    Getters never raise: a missing key, or a value that cannot be converted,
    yields the zero value of the requested type. Use :meth:`exists` to tell
    "absent" apart from "present but zero".
    """

    def __init__(self, store: Optional[Store] = None):
        self._store = store if store is not None else Store(environ={})

    def bool(self, key: str) -> bool:
        return self._store.get_bool(key)

    def int(self, key: str) -> int:
        return self._store.get_int(key)

    def int64(self, key: str) -> int:
        return self._store.get_int(key)

    def uint(self, key: str) -> int:
        return self._store.get_uint(key)

    def float64(self, key: str) -> float:
        return self._store.get_float(key)

    def string(self, key: str) -> str:
        return self._store.get_string(key)

    def strings(self, key: str) -> List[str]:
        return self._store.get_string_slice(key)

    def string_map(self, key: str) -> Dict[str, Any]:
        return self._store.get_string_map(key)

    def duration(self, key: str) -> timedelta:
        return self._store.get_duration(key)

    def time(self, key: str) -> datetime:
        return self._store.get_time(key)

    def exists(self, key: str) -> bool:
        """Return True if any source (file, overlay or environment) has ``key``."""
        return self._store.is_set(key)

    def sub(self, key: str) -> "Configer":
        """Return a Configer scoped to the map at ``key``.

        If ``key`` is absent or not a map, an empty Configer is returned.
        """
        return Configer(self._store.sub(key))

    def all_settings(self) -> Dict[str, Any]:
        """Return the merged configuration as a nested dictionary."""
        return self._store.all_settings()

    def setup_logging(self) -> None:
        """Setup logging from the ``logging`` section of the configuration.

        Recognised keys are ``logging.level``, ``logging.format`` and
        ``logging.file``.
        """
        level = logging.getLevelName((self.string("logging.level") or "INFO").upper())
        if not isinstance(level, int):
            level = logging.INFO
        log_format = self.string("logging.format") or DEFAULT_LOG_FORMAT
        log_file = self.string("logging.file") or None

        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        logging.basicConfig(
            level=level,
            format=log_format,
            filename=log_file,
            filemode="a" if log_file else None,
            force=True
        )

    def __repr__(self) -> str:
        return f"Configer(keys={len(self._store.all_keys())})"


def new(*options: Option) -> Configer:
    """Create a :class:`Configer`.

    Loads the default config file, merges the environment-specific file if
    the selector variable is set, binds environment variables (explicit or
    automatic) and returns the facade.

    Args:
        *options: ``with_*`` options from :mod:`configer.options`.

    Returns:
        Configured Configer.

    Raises:
        ConfigLoadError: If the default file is missing or cannot be parsed,
            or if the overlay file exists but cannot be read or parsed.
        EnvBindError: If an explicit env binding cannot be registered.
    """
    settings = Settings()
    for option in options:
        option(settings)

    store = Store(environ=settings.environ)

    if settings.custom_store is not None:
        settings.custom_store(store)

    default_file = settings.default_config_file
    store.set_config_type(settings.config_file_type)
    store.set_config_file(default_file)

    try:
        store.read_in_config()
    except ConfigerError as e:
        logger.error(f"Failed to load default config file {default_file}: {e}")
        raise ConfigLoadError(
            "Failed to load default config file",
            details={"config_path": default_file},
            original_exception=e
        ) from e
    logger.info(f"Loaded configuration from {default_file}")

    env = settings.environ.get(settings.env_var_name)
    if env is not None:
        env_file = settings.env_config_file(env)
        store.set_config_file(env_file)
        try:
            store.merge_in_config()
        except ConfigFileNotFoundError:
            logger.debug(f"No config file for {settings.env_var_name}={env}: {env_file}")
        except ConfigerError as e:
            logger.error(f"Failed to load env config file {env_file}: {e}")
            raise ConfigLoadError(
                "Failed to load env config file",
                details={"config_path": env_file},
                original_exception=e
            ) from e
        else:
            logger.info(f"Merged configuration from {env_file}")

    if settings.env_prefix:
        store.set_env_prefix(settings.env_prefix)

    for key in settings.bind_env_keys:
        try:
            store.bind_env(key)
        except ValueError as e:
            raise EnvBindError(
                "Failed to bind env for key",
                details={"key": key},
                original_exception=e
            ) from e

    if settings.auto_env:
        store.automatic_env()

    return Configer(store)
