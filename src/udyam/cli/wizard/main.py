"""
Punto de entrada principal del wizard.
"""

import asyncio
from pathlib import Path
from typing import Optional

from udyam.cli.theme import print_header
from udyam.cli.wizard.steps import WizardNavigator
from udyam.config import Settings
from udyam.core.state_machine import FormStateMachine, WizardState
from udyam.data import load_default_schema
from udyam.gateway import create_gateway
from udyam.models.schema import load_schema


def build_machine(
    schema_path: Optional[Path] = None,
    settings: Optional[Settings] = None,
    offline: bool = False,
) -> FormStateMachine:
    """
    Construye la máquina de estados para una sesión.

    Raises:
        SchemaError: Si el esquema está mal formado
    """
    settings = settings or Settings.from_env()
    schema = load_schema(schema_path) if schema_path else load_default_schema()
    gateway, postal_lookup = create_gateway(settings, offline=offline)
    return FormStateMachine.from_schema(schema, gateway, postal_lookup, settings)


def wizard_main(
    schema_path: Optional[Path] = None,
    settings: Optional[Settings] = None,
    offline: bool = False,
) -> Optional[WizardState]:
    """
    Asistente interactivo de registro Udyam.
    """
    machine = build_machine(schema_path, settings, offline)
    print_header(
        "Registro Udyam",
        f"Esquema {machine.registry.schema.metadata.version} - {machine.registry.schema.metadata.source}",
    )
    return asyncio.run(WizardNavigator(machine).run())
