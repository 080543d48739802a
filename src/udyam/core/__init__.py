"""Núcleo del motor de formularios: compilador, registro, estados y auto-completado."""

from udyam.core.validators import (
    FieldValidator,
    CompiledValidator,
    StepValidation,
    compile_field,
    compile_step,
)
from udyam.core.registry import (
    WizardStage,
    StepDefinition,
    StepRegistry,
)
from udyam.core.autofill import (
    FormBuffer,
    AutoFillCoordinator,
)
from udyam.core.state_machine import (
    SubmitStatus,
    SubmitOutcome,
    WizardState,
    FormStateMachine,
)

__all__ = [
    # Compilador de validadores
    "FieldValidator",
    "CompiledValidator",
    "StepValidation",
    "compile_field",
    "compile_step",
    # Registro de pasos
    "WizardStage",
    "StepDefinition",
    "StepRegistry",
    # Auto-completado
    "FormBuffer",
    "AutoFillCoordinator",
    # Máquina de estados
    "SubmitStatus",
    "SubmitOutcome",
    "WizardState",
    "FormStateMachine",
]
