"""configer package.

Typed, read-only access to layered configuration: a default file, an
environment-specific overlay selected by an environment variable, and
environment variable overrides.

Example:
    >>> import configer
    >>> cfg = configer.new(configer.with_env_prefix("APP"))
    >>> cfg.int("server.port")
    8080
"""

__version__ = "1.0.0"

from .config import Configer, new
from .options import (
    Settings,
    with_automatic_env,
    with_bind_env,
    with_config_file_type,
    with_custom_store,
    with_env_config_file_prefix,
    with_env_prefix,
    with_env_var_name,
    with_environ,
)
from .store import ZERO_DURATION, ZERO_TIME, Store
from .exceptions import (
    ConfigerError,
    ConfigLoadError,
    EnvBindError,
    ConfigFileNotFoundError,
    ConfigParseError,
    UnsupportedConfigError,
)

__all__ = [
    "Configer",
    "new",
    "Settings",
    "Store",
    "ZERO_DURATION",
    "ZERO_TIME",
    "with_automatic_env",
    "with_bind_env",
    "with_config_file_type",
    "with_custom_store",
    "with_env_config_file_prefix",
    "with_env_prefix",
    "with_env_var_name",
    "with_environ",
    "ConfigerError",
    "ConfigLoadError",
    "EnvBindError",
    "ConfigFileNotFoundError",
    "ConfigParseError",
    "UnsupportedConfigError",
]
