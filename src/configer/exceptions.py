"""Custom exceptions for configer.

This module defines the exception classes raised while building a
configuration. Once a :class:`~configer.Configer` exists its getters never
raise; every error surfaces from :func:`~configer.new` or from direct use
of the underlying store.

Exception Classes:
    ConfigerError: Base exception for all package errors
    ConfigLoadError: Default or overlay config file could not be loaded
    EnvBindError: An explicit environment binding could not be registered
    ConfigFileNotFoundError: Store was pointed at a file that does not exist
    ConfigParseError: Store could not decode a config file
    UnsupportedConfigError: Store was asked for an unknown config type

Example:
    >>> from configer.exceptions import ConfigLoadError
    >>> raise ConfigLoadError("Failed to load default config file",
    ...                       details={"config_path": "config/default.toml"})
"""

from typing import Any, Optional


class ConfigerError(Exception):
    """Base exception class for configer.

    Args:
        message: Human-readable error description
        details: Additional error context or debugging information
        original_exception: Original exception that caused this error (if any)

    Attributes:
        message: The error message
        details: Additional error context
        original_exception: Original exception (if wrapped)
    """

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.details = details
        self.original_exception = original_exception

        error_parts = [message]
        if details:
            error_parts.append(f"Details: {details}")
        if original_exception:
            error_parts.append(f"Caused by: {original_exception}")

        super().__init__(" | ".join(error_parts))


class ConfigLoadError(ConfigerError):
    """Exception raised when a configuration file cannot be loaded.

    Raised when:
    - The default config file is missing or cannot be parsed
    - An overlay config file exists but cannot be read or parsed

    Example:
        >>> raise ConfigLoadError("Failed to load env config file",
        ...                       details={"config_path": "config/prod.toml"})
    """
    pass


class EnvBindError(ConfigerError):
    """Exception raised when a key cannot be bound to an environment variable.

    Example:
        >>> raise EnvBindError("Failed to bind env for key", details={"key": ""})
    """
    pass


class ConfigFileNotFoundError(ConfigerError):
    """Exception raised by the store when a config file does not exist."""
    pass


class ConfigParseError(ConfigerError):
    """Exception raised by the store when a config file cannot be decoded."""
    pass


class UnsupportedConfigError(ConfigerError):
    """Exception raised by the store for an unknown config file type."""
    pass
