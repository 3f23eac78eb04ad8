"""
Configuration Exceptions.

Part of the engine's MicrostructureError hierarchy, so callers can catch a
single base class for anything the engine raises.
"""

from ..core.exceptions import MicrostructureError


class ConfigError(MicrostructureError):
    """Base exception for configuration errors."""

    default_message = "Configuration error"


class ConfigFileNotFoundError(ConfigError):
    """The configuration file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Configuration file not found: {path}", code="CONFIG_NOT_FOUND")


class ConfigParseError(ConfigError):
    """The file is not valid YAML or not a mapping."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            f"Cannot parse configuration file {path}: {reason}",
            code="CONFIG_PARSE",
        )


class ConfigValidationError(ConfigError):
    """The merged configuration failed model validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        lines = "\n".join(f"  - {error}" for error in errors)
        super().__init__(f"Invalid configuration:\n{lines}", code="CONFIG_INVALID")
