from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class OperationResult:
    """Resultado de una operación del núcleo: éxito con datos o fallo con su error."""

    success: bool
    data: Any = None
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: Exception) -> "OperationResult":
        return cls(success=False, error=error)
