"""
Comandos CLI para inspeccionar esquemas de formulario.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from udyam.cli.theme import create_table, get_console, print_error, print_header, print_success
from udyam.core.registry import StepRegistry
from udyam.data import DEFAULT_SCHEMA_PATH, load_default_schema
from udyam.exceptions import SchemaError
from udyam.models.schema import FormSchema, load_schema

# Crear sub-aplicación
schema_app = typer.Typer(help="Inspección y validación de esquemas de formulario")


def _load(path: Optional[Path]) -> FormSchema:
    """Carga el esquema o termina con código 1."""
    try:
        schema = load_schema(path) if path else load_default_schema()
        # El registro exige los pasos de identidad y de empresa
        StepRegistry(schema)
    except SchemaError as e:
        print_error(str(e))
        raise typer.Exit(1)
    return schema


@schema_app.command("check")
def schema_check(
    path: Annotated[Path, typer.Argument(help="Archivo JSON del esquema")],
):
    """
    Valida un esquema de formulario.

    Ejemplo:
        udyam schema check udyam_schema.json
    """
    schema = _load(path)
    total_fields = sum(len(step.fields) for step in schema.steps)
    print_success(f"Esquema válido: {len(schema.steps)} pasos, {total_fields} campos")


@schema_app.command("show")
def schema_show(
    path: Annotated[Optional[Path], typer.Argument(help="Archivo JSON del esquema (default: esquema incluido)")] = None,
):
    """
    Muestra los pasos del wizard y sus campos.

    Ejemplo:
        udyam schema show
        udyam schema show mi_esquema.json
    """
    schema = _load(path)
    registry = StepRegistry(schema)
    metadata = schema.metadata

    print_header(
        f"Esquema {metadata.version}",
        f"{metadata.source} - {path or DEFAULT_SCHEMA_PATH}",
    )

    console = get_console()
    for stage in registry.stages:
        definition = registry.definition(stage)
        step_num, total = registry.position(stage)
        origin = "sintético" if definition.synthetic else f"esquema paso {definition.descriptor.index}"
        table = create_table(
            f"Paso {step_num}/{total}: {definition.title} ({origin})",
            ["Campo", "Tipo", "Obligatorio", "Máx.", "Formato"],
        )
        for descriptor in definition.descriptor.fields:
            table.add_row(
                descriptor.name,
                descriptor.kind.value,
                "sí" if descriptor.required else "no",
                str(descriptor.max_length) if descriptor.max_length else "-",
                descriptor.pattern or (f"{len(descriptor.options)} opciones" if descriptor.options else "-"),
            )
        console.print(table)
