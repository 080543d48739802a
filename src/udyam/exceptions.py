"""
Jerarquía de errores del motor de formularios.

- SchemaError: esquema mal formado, fatal al cargar (la sesión no inicia)
- FieldError: violación de una regla de campo, recuperable, nunca transiciona
- GatewayError: verificación remota fallida o expirada, recuperable
- StateError: transición intentada desde un estado inválido
"""

from enum import Enum
from typing import Optional


class UdyamError(Exception):
    """Error base del paquete."""


class SchemaError(UdyamError):
    """El documento de esquema no es válido (Malformed)."""

    def __init__(self, message: str, step: Optional[int] = None, field: Optional[str] = None):
        self.message = message
        self.step = step
        self.field = field
        location = ""
        if step is not None:
            location = f"paso {step}"
            if field:
                location += f", campo '{field}'"
            location = f" ({location})"
        super().__init__(f"Esquema mal formado{location}: {message}")


class FieldErrorCode(str, Enum):
    """Tipos de violación de un campo."""
    MISSING = "missing"
    TOO_LONG = "too_long"
    FORMAT_INVALID = "format_invalid"
    NOT_AN_OPTION = "not_an_option"


class FieldError(UdyamError):
    """
    Violación de una regla de validación de campo.

    Los validadores la retornan como valor (no la lanzan) para poder
    recolectar todas las violaciones de un paso a la vez.
    """

    def __init__(self, code: FieldErrorCode, field: str, message: str):
        self.code = code
        self.field = field
        self.message = message
        super().__init__(message)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FieldError):
            return NotImplemented
        return (self.code, self.field, self.message) == (other.code, other.field, other.message)

    def __hash__(self) -> int:
        return hash((self.code, self.field, self.message))

    def __repr__(self) -> str:
        return f"FieldError({self.code.value}, {self.field!r}, {self.message!r})"


class GatewayError(UdyamError):
    """Fallo de la verificación remota (rechazo, red o timeout)."""

    def __init__(self, message: str, error_type: str = "unknown", status_code: Optional[int] = None):
        self.message = message
        self.error_type = error_type  # "network", "timeout", "validation", "server", "rejected"
        self.status_code = status_code
        super().__init__(message)


class StateError(UdyamError):
    """Transición no permitida en el estado actual del wizard."""
