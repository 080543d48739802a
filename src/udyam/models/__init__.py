"""
Modelos de datos para Udyam.

Este módulo contiene los modelos Pydantic del esquema de formularios
y de los resultados del gateway.
"""

from udyam.models.schema import (
    FieldKind,
    Normalization,
    FieldDescriptor,
    StepDescriptor,
    SchemaMetadata,
    FormSchema,
    parse_schema,
    load_schema,
)
from udyam.models.results import GatewayResult, PostalAddress

__all__ = [
    # Esquema
    "FieldKind",
    "Normalization",
    "FieldDescriptor",
    "StepDescriptor",
    "SchemaMetadata",
    "FormSchema",
    "parse_schema",
    "load_schema",
    # Resultados de colaboradores
    "GatewayResult",
    "PostalAddress",
]
