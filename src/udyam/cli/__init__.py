"""
CLI de Udyam - Registro de empresas MSME.

Este módulo organiza los comandos CLI:
- schema: Validación e inspección de esquemas
- wizard: Asistente interactivo de registro
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from udyam.cli.schema import schema_app
from udyam.cli.theme import get_console, print_error
from udyam.config import Settings
from udyam.exceptions import SchemaError

# Crear aplicación principal
app = typer.Typer(
    name="udyam",
    help="Motor de formularios multi-paso para el registro Udyam.",
    no_args_is_help=True,
)

app.add_typer(schema_app, name="schema")


def configure_logging(level: str) -> None:
    """Envía los logs del paquete a la consola Rich."""
    handler = RichHandler(console=get_console(), show_path=False, rich_tracebacks=True)
    logger = logging.getLogger("udyam")
    logger.handlers[:] = [handler]
    logger.setLevel(level)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Muestra logs de depuración")] = False,
):
    """
    Udyam - Registro guiado en cuatro pasos.

    Aadhaar, OTP, PAN y datos de la empresa, validados localmente y
    verificados contra el backend de registro.
    """
    configure_logging("DEBUG" if verbose else Settings.from_env().log_level)


@app.command()
def wizard(
    schema: Annotated[Optional[Path], typer.Option("--schema", "-s", help="Esquema JSON alternativo")] = None,
    api_url: Annotated[Optional[str], typer.Option("--api-url", help="URL base del backend de verificación")] = None,
    offline: Annotated[bool, typer.Option("--offline", help="Usa el gateway en memoria (OTP 123456)")] = False,
):
    """Asistente interactivo de registro Udyam."""
    from udyam.cli.wizard import wizard_main

    settings = Settings.from_env()
    if api_url:
        settings = settings.model_copy(update={"api_url": api_url.rstrip("/")})
    try:
        wizard_main(schema, settings, offline=offline)
    except SchemaError as e:
        print_error(str(e))
        raise typer.Exit(1)
