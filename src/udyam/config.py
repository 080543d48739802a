"""Configuración del motor y constantes del dominio Udyam."""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Patrones de formato (longitudes exactas modeladas como regex)
# ============================================================================

AADHAAR_PATTERN = r"^[0-9]{12}$"
OTP_PATTERN = r"^[0-9]{6}$"
PAN_PATTERN = r"^[A-Za-z]{5}[0-9]{4}[A-Za-z]$"
PINCODE_PATTERN = r"^[0-9]{6}$"
MOBILE_PATTERN = r"^[0-9]{10}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"
NAME_PATTERN = r"^[a-zA-Z\s]+$"


# Tipos de organización del formulario PAN del portal
ORGANISATION_TYPES = (
    "Proprietorship",
    "Partnership",
    "Hindu Undivided Family",
    "Private Limited Company",
    "Public Limited Company",
    "Limited Liability Partnership",
    "Self Help Group",
    "Cooperative Society",
    "Trust",
    "Other",
)


# ============================================================================
# Ajustes de ejecución
# ============================================================================

ENV_PREFIX = "UDYAM_"

DEFAULT_API_URL = "http://localhost:3001"
PUBLIC_PINCODE_API_URL = "https://api.postalpincode.in"


class Settings(BaseModel):
    """Ajustes del motor y del gateway HTTP."""
    api_url: str = Field(default=DEFAULT_API_URL, description="URL base del backend de verificación")
    connect_timeout: float = Field(default=3.0, gt=0, description="Timeout de conexión (s)")
    read_timeout: float = Field(default=10.0, gt=0, description="Timeout de lectura (s)")
    gateway_timeout: Optional[float] = Field(default=30.0, gt=0, description="Límite total por llamada al gateway (s)")
    autofill_debounce_ms: int = Field(default=500, ge=0, description="Periodo de silencio antes del lookup de PIN (ms)")
    public_pincode_fallback: bool = True
    log_level: str = "WARNING"

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Nivel de log inválido: {value}")
        return level

    @property
    def autofill_delay(self) -> float:
        """Periodo de silencio del auto-completado en segundos."""
        return self.autofill_debounce_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        """
        Construye los ajustes a partir de variables de entorno UDYAM_*.

        Args:
            environ: Mapeo de variables (default: os.environ)

        Returns:
            Settings con los valores encontrados sobre los defaults
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
