"""Layered configuration store used behind :class:`configer.Configer`.

The store reads TOML, YAML, JSON, dotenv and INI files, merges overlays,
binds environment variables to keys and coerces values to the requested
type. :class:`~configer.Configer` only ever talks to it through the public
methods exported here.

Classes:
    Store: File, environment, override and default layers with typed getters.

Example:
    >>> from configer.store import Store
    >>> store = Store(environ={"APP_SERVER_PORT": "7070"})
    >>> store.merge_config_map({"server": {"port": 8080}})
    >>> store.set_env_prefix("APP")
    >>> store.automatic_env()
    >>> store.get_int("server.port")
    7070
"""

from .cast import ZERO_DURATION, ZERO_TIME
from .codecs import SUPPORTED_TYPES
from .store import Store

__all__ = ["Store", "SUPPORTED_TYPES", "ZERO_DURATION", "ZERO_TIME"]
