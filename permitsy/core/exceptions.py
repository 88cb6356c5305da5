"""Custom exception classes for Permitsy."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from permitsy.constants import ErrorCodes


class PermitsyError(Exception):
    """Base exception for Permitsy."""

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize Permitsy error.

        Args:
            message: Error message
            recoverable: Whether the error is recoverable with retry
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Configuration Errors
class ConfigurationError(PermitsyError):
    """Configuration error occurred."""

    def __init__(
        self,
        message: str = "Configuration error",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    def __init__(self, variable_name: str):
        super().__init__(
            f"Required environment variable '{variable_name}' is not set",
            recoverable=False,
            details={"variable": variable_name},
        )


# Validation Errors
class ValidationError(PermitsyError):
    """Input validation error."""

    def __init__(self, message: str = "Validation error", field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
        """
        self.field = field
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(message, recoverable=False, details={"field": field} if field else {})


# Backend Errors
_MISSING_COLUMN_MARKERS = (
    "column",
    "does not exist",
)
_SCHEMA_CACHE_MARKER = "schema cache"


class BackendError(PermitsyError):
    """Error reported by the hosted backend (REST gateway or Postgres)."""

    def __init__(
        self,
        message: str = "Backend request failed",
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        status: Optional[int] = None,
        recoverable: bool = False,
    ):
        """
        Initialize backend error.

        Args:
            message: Error message from the backend
            code: Postgres SQLSTATE or gateway error code
            details: Backend supplied details
            hint: Backend supplied hint
            status: HTTP status code of the failed response
            recoverable: Whether a retry could succeed
        """
        self.code = code
        self.hint = hint
        self.status = status
        super().__init__(
            message,
            recoverable,
            details={"code": code, "details": details, "hint": hint, "status": status},
        )

    @classmethod
    def from_response(cls, status: Optional[int], body: Any) -> "BackendError":
        """
        Build an error from a decoded error response body.

        Args:
            status: HTTP status code, if known
            body: Decoded JSON body (dict) or raw text

        Returns:
            BackendError instance
        """
        fallback = f"HTTP {status}" if status else "Backend request failed"
        if isinstance(body, dict):
            return cls(
                message=str(body.get("message") or body.get("error") or fallback),
                code=body.get("code"),
                details=body.get("details"),
                hint=body.get("hint"),
                status=status,
            )
        text = str(body).strip() if body else ""
        return cls(message=text or fallback, status=status)

    def _has_code(self, codes: Iterable[str]) -> bool:
        return self.code is not None and self.code in codes

    @property
    def is_unique_violation(self) -> bool:
        """True for duplicate key violations."""
        return self._has_code((ErrorCodes.UNIQUE_VIOLATION,))

    @property
    def is_foreign_key_violation(self) -> bool:
        """True for foreign key constraint violations."""
        return self._has_code((ErrorCodes.FOREIGN_KEY_VIOLATION,))

    @property
    def is_missing_table(self) -> bool:
        """True when the target table does not exist."""
        if self._has_code((ErrorCodes.UNDEFINED_TABLE, ErrorCodes.SCHEMA_CACHE_TABLE)):
            return True
        lowered = self.message.lower()
        if "column" in lowered:
            return False
        return "relation" in lowered and "does not exist" in lowered

    @property
    def is_missing_column(self) -> bool:
        """True when a referenced column does not exist."""
        if self._has_code((ErrorCodes.UNDEFINED_COLUMN, ErrorCodes.SCHEMA_CACHE_COLUMN)):
            return True
        lowered = self.message.lower()
        if all(marker in lowered for marker in _MISSING_COLUMN_MARKERS):
            return True
        return "could not find" in lowered and "column" in lowered and _SCHEMA_CACHE_MARKER in lowered

    @property
    def is_not_found(self) -> bool:
        """True when a single-row request matched no rows."""
        return self._has_code((ErrorCodes.SINGLE_ROW_NOT_FOUND,))


class BackendConnectionError(BackendError):
    """Raised when the backend cannot be reached."""

    def __init__(self, message: str = "Failed to reach backend"):
        super().__init__(message, recoverable=True)


class BackendNotConnectedError(BackendError):
    """Raised when the client is used before connect() or after close()."""

    def __init__(self):
        super().__init__(
            "Backend client is not connected. Call connect() first.",
            recoverable=False,
        )


class RecordNotFoundError(PermitsyError):
    """Raised when a requested record does not exist."""

    def __init__(self, resource_type: str, resource_id: Any):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            recoverable=False,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class SchemaMismatchError(PermitsyError):
    """Deployment error: the backend schema differs from the expected one."""

    def __init__(self, table: str, missing: Optional[Iterable[str]] = None, reason: str = ""):
        """
        Initialize schema mismatch error.

        Args:
            table: Table that failed validation
            missing: Missing column names (empty when the table itself is absent)
            reason: Backend message that revealed the mismatch
        """
        self.table = table
        self.missing = list(missing or [])
        if self.missing:
            message = f"Table '{table}' is missing columns: {', '.join(self.missing)}"
        else:
            message = f"Table '{table}' does not match the expected schema"
        if reason:
            message += f" ({reason})"
        message += ". Apply the pending migrations before deploying."
        super().__init__(
            message,
            recoverable=False,
            details={"table": table, "missing": self.missing, "reason": reason},
        )
