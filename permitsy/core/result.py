"""Result pattern for accessor and service operations.

Accessors never raise into the presentation layer; they return an
``OperationResult`` that carries a success flag, a human readable message and
an optional payload.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def _dump(value: Any) -> Any:
    if isinstance(value, OperationResult):
        return value.to_dict()
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


@dataclass
class OperationResult(Generic[T]):
    """Outcome of an operation against the backend."""

    success: bool
    message: str
    data: Optional[T] = None

    @classmethod
    def ok(cls, message: str, data: Optional[T] = None) -> "OperationResult[T]":
        """
        Create a successful result.

        Args:
            message: Success message
            data: Optional payload

        Returns:
            Successful result
        """
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, data: Optional[T] = None) -> "OperationResult[T]":
        """
        Create a failed result.

        Args:
            message: Failure message
            data: Optional diagnostic payload

        Returns:
            Failed result
        """
        return cls(success=False, message=message, data=data)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a JSON-friendly dictionary."""
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = _dump(self.data)
        return result


@dataclass
class DiagnosticResult(OperationResult[Dict[str, Any]]):
    """Operation result stamped with the time the diagnostic ran."""

    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic result to dictionary."""
        result = super().to_dict()
        result["timestamp"] = self.timestamp
        return result
