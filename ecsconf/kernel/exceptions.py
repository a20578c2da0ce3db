"""Core exception hierarchy for ecsconf.

Every failure raised while loading a service configuration derives from
:class:`ConfigError`, so callers can abort on one exception type while still
telling the stages apart. Each exception keeps its context (file path,
plugin name, versions) as attributes and is raised ``from`` the underlying
cause.
"""

from __future__ import annotations

# ============================================================================
# Base Exceptions
# ============================================================================


class EcsconfError(Exception):
    """Base exception for all ecsconf errors."""

    pass


class ConfigError(EcsconfError):
    """Base exception for failures while loading a configuration.

    Loading is all-or-nothing: when one of these is raised no partially
    resolved ``Config`` is handed back to the caller.
    """

    pass


# ============================================================================
# Input Errors
# ============================================================================


class UnsupportedFormatError(ConfigError):
    """Raised when the config file extension is not a known dialect.

    Examples
    --------
    Example usage::

        raise UnsupportedFormatError("ecspresso.toml", ".toml")
    """

    def __init__(self, path: str, extension: str) -> None:
        super().__init__(f"unsupported config file extension: {extension!r} ({path})")
        self.path = path
        self.extension = extension


class TemplateEvaluationError(ConfigError):
    """Raised when a jsonnet document fails to evaluate.

    Covers syntax errors, missing external variables and failing native
    functions alike.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"failed to evaluate jsonnet file {path}: {reason}")
        self.path = path
        self.reason = reason


class ReadError(ConfigError):
    """Raised when a document cannot be read or its variables substituted."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"failed to read {path}: {reason}")
        self.path = path
        self.reason = reason


class DecodeError(ConfigError):
    """Raised when a document does not decode into the ``Config`` shape."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"failed to parse config {path}: {reason}")
        self.path = path
        self.reason = reason


# ============================================================================
# Normalization Errors
# ============================================================================


class ConstraintSyntaxError(ConfigError):
    """Raised when ``required_version`` is not a valid constraint expression.

    Examples
    --------
    Example usage::

        raise ConstraintSyntaxError(">== 2", "unknown operator")
    """

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"required_version has invalid format {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason


class CredentialResolutionError(ConfigError):
    """Raised when the AWS session for the config cannot be established."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to load aws config: {reason}")
        self.reason = reason


class PluginSetupError(ConfigError):
    """Raised when a plugin is unknown or its setup routine fails.

    Examples
    --------
    Example usage::

        raise PluginSetupError("tfstate", "plugin tfstate is not available")
    """

    def __init__(self, plugin: str, reason: str) -> None:
        super().__init__(f"failed to setup plugin {plugin!r}: {reason}")
        self.plugin = plugin
        self.reason = reason


class LoadCancelledError(ConfigError):
    """Raised when a load is cancelled before a cancellable stage starts."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"config load cancelled before {stage}")
        self.stage = stage


# ============================================================================
# Version Gate Errors
# ============================================================================


class VersionMismatchError(ConfigError):
    """Raised when the running version does not satisfy ``required_version``."""

    def __init__(self, version: str, constraints: str) -> None:
        super().__init__(
            f"version {version} does not satisfy constraints required_version: {constraints}"
        )
        self.version = version
        self.constraints = constraints


__all__ = [
    "ConfigError",
    "ConstraintSyntaxError",
    "CredentialResolutionError",
    "DecodeError",
    "EcsconfError",
    "LoadCancelledError",
    "PluginSetupError",
    "ReadError",
    "TemplateEvaluationError",
    "UnsupportedFormatError",
    "VersionMismatchError",
]
