"""
Pasos interactivos del wizard con navegación hacia atrás.

Cada paso pregunta los campos definidos por el registro (esquema o
sintéticos) y delega validación, verificación y transición en la
FormStateMachine.
"""

from enum import Enum
from typing import Any, Optional

import questionary

from udyam.cli.theme import (
    get_console,
    print_error,
    print_field_errors,
    print_info,
    print_note,
    print_step,
    print_success,
    print_warning,
    create_table,
)
from udyam.cli.wizard.styles import get_wizard_style
from udyam.core.state_machine import FormStateMachine, SubmitStatus, WizardState
from udyam.core.validators import FieldValidator
from udyam.models.schema import FieldDescriptor, FieldKind


class StepResult(Enum):
    """Resultado de un paso del wizard."""
    NEXT = "next"       # Enviar y continuar al siguiente paso
    BACK = "back"       # Volver al paso anterior
    CANCEL = "cancel"   # Cancelar wizard


ACTION_SUBMIT = "Verificar y continuar"
ACTION_BACK = "<< Volver al paso anterior"
ACTION_CANCEL = "Cancelar registro"


def _prompt_validator(validator: FieldValidator):
    """Adapta un FieldValidator al contrato de validate de questionary."""
    def validate(text: str) -> Any:
        error = validator.validate(text)
        if error is None:
            return True
        return error.message
    return validate


class FormStep:
    """Paso del wizard que pregunta los campos del paso actual."""

    def __init__(self, machine: FormStateMachine):
        self.machine = machine
        self.definition = machine.current_definition
        self.validator = machine.registry.validator(self.definition.stage)
        self.style = get_wizard_style()

    @property
    def title(self) -> str:
        return self.definition.title

    async def execute(self) -> StepResult:
        """Pregunta cada campo y luego la acción a realizar."""
        buffer = self.machine.state.form_buffer
        autofill = self.machine.autofill

        for descriptor in self.definition.descriptor.fields:
            answer = await self._ask(descriptor, buffer.get(descriptor.name))
            if answer is None:
                return StepResult.CANCEL
            self.machine.set_field(descriptor.name, answer)

            # Esperar el lookup de PIN para ofrecer ciudad/estado como default
            if autofill is not None and autofill.pending and descriptor.name == autofill.field_name:
                await autofill.wait_idle()

        choices = [ACTION_SUBMIT]
        if self.machine.registry.previous_stage(self.definition.stage) is not None:
            choices.append(ACTION_BACK)
        choices.append(ACTION_CANCEL)

        action = await questionary.select(
            "¿Qué desea hacer?",
            choices=choices,
            style=self.style,
        ).ask_async()

        if action == ACTION_SUBMIT:
            return StepResult.NEXT
        if action == ACTION_BACK:
            return StepResult.BACK
        return StepResult.CANCEL

    async def _ask(self, descriptor: FieldDescriptor, default: Optional[Any]) -> Optional[str]:
        label = descriptor.label if descriptor.required else f"{descriptor.label} (opcional)"
        default = "" if default is None else str(default)

        if descriptor.kind == FieldKind.SELECT:
            options = list(descriptor.options or ())
            return await questionary.select(
                label,
                choices=options,
                default=default if default in options else None,
                style=self.style,
            ).ask_async()

        return await questionary.text(
            label,
            default=default,
            validate=_prompt_validator(self.validator.field(descriptor.name)),
            instruction=descriptor.placeholder,
            multiline=descriptor.kind == FieldKind.TEXTAREA,
            style=self.style,
        ).ask_async()


class WizardNavigator:
    """Controlador de navegación del wizard."""

    def __init__(self, machine: FormStateMachine):
        self.machine = machine

    async def run(self) -> Optional[WizardState]:
        """Ejecuta el wizard hasta completar el registro o cancelar."""
        machine = self.machine

        while not machine.is_completed:
            step = FormStep(machine)
            step_num, total = machine.progress()
            print_step(step_num, total, step.title, step.definition.description)

            if machine.state.pending_success:
                print_success(machine.state.pending_success)
            if machine.state.pending_error:
                print_error(machine.state.pending_error)

            result = await step.execute()

            if result == StepResult.NEXT:
                outcome = await machine.submit()
                if outcome.status == SubmitStatus.INVALID:
                    print_field_errors(outcome.errors)
                    print_note("Corrija los campos indicados")
            elif result == StepResult.BACK:
                machine.retreat()
                print_info("<< Volviendo al paso anterior...")
            else:
                machine.reset()
                print_warning("Wizard cancelado")
                return None

        print_success(machine.state.pending_success or "Registro completado")
        self.print_summary(machine.state)
        return machine.state

    @staticmethod
    def print_summary(state: WizardState) -> None:
        """Imprime los datos principales del registro completado."""
        table = create_table("Resumen del Registro", ["Dato", "Valor"])
        labels = [
            ("udyamNumber", "Número Udyam"),
            ("registrationId", "ID de registro"),
            ("businessName", "Empresa"),
            ("businessType", "Tipo de organización"),
            ("pan", "PAN"),
            ("city", "Ciudad"),
            ("state", "Estado"),
        ]
        for key, label in labels:
            if key in state.accumulated_data:
                table.add_row(label, str(state.accumulated_data[key]))
        get_console().print(table)
