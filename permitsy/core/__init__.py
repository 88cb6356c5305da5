"""Core configuration, errors, results and logging."""

from .exceptions import (
    BackendConnectionError,
    BackendError,
    BackendNotConnectedError,
    ConfigurationError,
    MissingEnvironmentVariableError,
    PermitsyError,
    RecordNotFoundError,
    SchemaMismatchError,
    ValidationError,
)
from .result import DiagnosticResult, OperationResult
from .settings import PermitsySettings, get_settings, reset_settings

__all__ = [
    "PermitsyError",
    "ConfigurationError",
    "MissingEnvironmentVariableError",
    "ValidationError",
    "BackendError",
    "BackendConnectionError",
    "BackendNotConnectedError",
    "RecordNotFoundError",
    "SchemaMismatchError",
    "OperationResult",
    "DiagnosticResult",
    "PermitsySettings",
    "get_settings",
    "reset_settings",
]
