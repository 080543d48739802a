"""
Resultados estructurados de los colaboradores externos.

Cada operación del gateway retorna {success: true, data} o
{success: false, reason}; el lookup postal retorna localidad y región.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class GatewayResult(BaseModel):
    """Resultado de una operación de verificación."""
    success: bool
    data: dict[str, Any] = Field(default_factory=dict)
    reason: Optional[str] = None     # Motivo del rechazo (solo si success=False)
    message: Optional[str] = None    # Mensaje informativo del backend

    @classmethod
    def ok(cls, data: Optional[dict] = None, message: Optional[str] = None) -> "GatewayResult":
        return cls(success=True, data=data or {}, message=message)

    @classmethod
    def fail(cls, reason: str) -> "GatewayResult":
        return cls(success=False, reason=reason)


class PostalAddress(BaseModel):
    """Localidad y región asociadas a un código PIN."""
    pincode: str
    city: str
    state: str
    district: Optional[str] = None
