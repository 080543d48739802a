"""
Modelo del esquema declarativo de formularios.

Representación tipada e inmutable del documento producido por el scraper:
campos, pasos y metadatos. Solo datos, sin comportamiento de validación
de valores (eso vive en udyam.core.validators).
"""

import json
import re
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from udyam.exceptions import SchemaError


class FieldKind(str, Enum):
    """Tipos de campo soportados (conjunto cerrado)."""
    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    TEL = "tel"
    SELECT = "select"
    OTP = "otp"


class Normalization(str, Enum):
    """Transformaciones aplicables al valor antes de validar."""
    UPPER = "upper"


class FieldDescriptor(BaseModel):
    """Descripción declarativa de un campo de formulario."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    kind: FieldKind = Field(..., alias="type")
    label: str
    required: bool = False
    pattern: Optional[str] = None
    max_length: Optional[int] = Field(default=None, alias="maxlength", gt=0)
    options: Optional[tuple[str, ...]] = None
    # Extras de presentación del scraper
    id: Optional[str] = None
    placeholder: Optional[str] = None
    normalize: Optional[Normalization] = None

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"el patrón {value!r} no es una expresión regular válida ({e})")
        return value

    @model_validator(mode="after")
    def _select_has_options(self) -> "FieldDescriptor":
        if self.kind == FieldKind.SELECT and not self.options:
            raise ValueError(f"el campo select '{self.name}' no tiene opciones")
        return self


class StepDescriptor(BaseModel):
    """Un paso del esquema con su lista ordenada de campos."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    index: int = Field(..., alias="step", gt=0)
    title: str
    fields: tuple[FieldDescriptor, ...] = ()

    @model_validator(mode="after")
    def _unique_names(self) -> "StepDescriptor":
        seen = set()
        for f in self.fields:
            if f.name in seen:
                raise ValueError(f"nombre de campo duplicado '{f.name}' en el paso {self.index}")
            seen.add(f.name)
        return self

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """Busca un campo por nombre."""
        for f in self.fields:
            if f.name == name:
                return f
        return None


class SchemaMetadata(BaseModel):
    """Metadatos de captura del esquema."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # El scraper emite "scrapedAt" y "source"; también se aceptan por nombre
    captured_at: datetime = Field(..., alias="scrapedAt")
    source: str = Field(..., alias="sourceIdentifier")
    version: str


class FormSchema(BaseModel):
    """Documento de esquema completo, inmutable durante la sesión."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    steps: tuple[StepDescriptor, ...] = Field(..., alias="forms")
    metadata: SchemaMetadata

    @model_validator(mode="after")
    def _unique_indexes(self) -> "FormSchema":
        seen = set()
        for s in self.steps:
            if s.index in seen:
                raise ValueError(f"índice de paso duplicado: {s.index}")
            seen.add(s.index)
        return self

    def step(self, index: int) -> Optional[StepDescriptor]:
        """Retorna el paso con el índice dado, o None."""
        for s in self.steps:
            if s.index == index:
                return s
        return None


# ============================================================================
# Carga
# ============================================================================

def _format_validation_error(exc: ValidationError) -> str:
    """Convierte los errores de pydantic en un mensaje legible."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_schema(document: dict) -> FormSchema:
    """
    Valida un documento de esquema ya decodificado.

    Args:
        document: Diccionario con claves "forms" y "metadata"

    Returns:
        FormSchema validado

    Raises:
        SchemaError: Si el documento está mal formado
    """
    if not isinstance(document, dict):
        raise SchemaError("el documento debe ser un objeto JSON")
    try:
        return FormSchema.model_validate(document)
    except ValidationError as e:
        raise SchemaError(_format_validation_error(e)) from e


def load_schema(path: Union[str, Path]) -> FormSchema:
    """
    Carga y valida un esquema desde un archivo JSON.

    Raises:
        SchemaError: Si el archivo no se puede leer, no es JSON o está mal formado
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError(f"no se pudo leer {path}: {e}") from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"JSON inválido en {path}: {e}") from e
    return parse_schema(document)
