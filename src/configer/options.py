"""Construction options for :func:`configer.new`.

Each ``with_*`` function returns an option that sets exactly one field of
:class:`Settings`. Options are applied in order, so later options win.
"""

import os
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional

from .store import Store

StoreHook = Callable[[Store], None]


@dataclass
class Settings:
    """Options collected before the store is built."""

    config_file_type: str = "toml"
    config_file_prefix: str = "config/"
    env_var_name: str = "ENV"
    auto_env: bool = True
    env_prefix: str = ""
    bind_env_keys: List[str] = field(default_factory=list)
    custom_store: Optional[StoreHook] = None
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)

    @property
    def default_config_file(self) -> str:
        return f"{self.config_file_prefix}default.{self.config_file_type}"

    def env_config_file(self, env: str) -> str:
        return f"{self.config_file_prefix}{env.lower()}.{self.config_file_type}"


Option = Callable[[Settings], None]


def with_config_file_type(config_type: str) -> Option:
    """Set the configuration file type (e.g. "toml", "yaml")."""
    def apply(settings: Settings) -> None:
        settings.config_file_type = config_type
    return apply


def with_env_config_file_prefix(prefix: str) -> Option:
    """Set the path prefix for the default and environment-specific files."""
    def apply(settings: Settings) -> None:
        settings.config_file_prefix = prefix
    return apply


def with_env_var_name(name: str) -> Option:
    """Set the environment variable that selects the overlay file."""
    def apply(settings: Settings) -> None:
        settings.env_var_name = name
    return apply


def with_automatic_env(enabled: bool = True) -> Option:
    """Enable or disable automatic environment lookup for every key.

    Best paired with :func:`with_env_prefix` to avoid collisions with
    unrelated variables.
    """
    def apply(settings: Settings) -> None:
        settings.auto_env = enabled
    return apply


def with_env_prefix(prefix: str) -> Option:
    def apply(settings: Settings) -> None:
        settings.env_prefix = prefix
    return apply


def with_bind_env(*keys: str) -> Option:
    """Bind only the listed keys to environment variables.

    ``"database.host"`` binds to ``DATABASE_HOST`` (or ``APP_DATABASE_HOST``
    with env prefix ``APP``). Works with or without automatic env. A later
    call replaces the keys of an earlier one.
    """
    def apply(settings: Settings) -> None:
        settings.bind_env_keys = list(keys)
    return apply


def with_custom_store(hook: StoreHook) -> Option:
    """Run ``hook`` on the fresh store before any config file is read."""
    def apply(settings: Settings) -> None:
        settings.custom_store = hook
    return apply


def with_environ(environ: Mapping[str, str]) -> Option:
    """Use ``environ`` instead of ``os.environ`` for every environment lookup."""
    def apply(settings: Settings) -> None:
        settings.environ = environ
    return apply
