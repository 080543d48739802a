"""
Esquemas de formulario incluidos con el paquete.

udyam_schema.json es la captura del scraper de los pasos 1-2 del
portal de registro Udyam.
"""

from pathlib import Path

from udyam.models.schema import FormSchema, load_schema

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "udyam_schema.json"


def load_default_schema() -> FormSchema:
    """Carga el esquema Udyam incluido con el paquete."""
    return load_schema(DEFAULT_SCHEMA_PATH)


__all__ = ["DEFAULT_SCHEMA_PATH", "load_default_schema"]
