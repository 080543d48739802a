"""
Máquina de estados del wizard de registro.

Posee el WizardState de la sesión y serializa todas las transiciones:
validar -> enviar al gateway -> fusionar datos y avanzar, o quedarse
en el paso con el error reportado.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from udyam.config import Settings
from udyam.core.autofill import AutoFillCoordinator, FormBuffer
from udyam.core.registry import StepDefinition, StepRegistry, WizardStage
from udyam.exceptions import FieldError, GatewayError, StateError
from udyam.gateway.base import PostalLookup, VerificationGateway
from udyam.models.results import GatewayResult
from udyam.models.schema import FormSchema

logger = logging.getLogger(__name__)

PINCODE_FIELD = "pincode"
AUTOFILL_TARGETS = ("city", "state")


class SubmitStatus(str, Enum):
    """Resultado de un envío."""
    ADVANCED = "advanced"     # Verificado, avanzó al paso siguiente
    COMPLETED = "completed"   # Verificado el paso final, registro completo
    INVALID = "invalid"       # Errores de campo, sin llamada al gateway
    REJECTED = "rejected"     # El gateway rechazó o falló
    DISCARDED = "discarded"   # El wizard se reinició durante la llamada


@dataclass
class SubmitOutcome:
    """Resultado de FormStateMachine.submit()."""
    status: SubmitStatus
    stage: WizardStage
    errors: dict[str, FieldError] = field(default_factory=dict)
    message: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status in (SubmitStatus.ADVANCED, SubmitStatus.COMPLETED)


@dataclass
class WizardState:
    """Estado mutable de una sesión del wizard."""
    current_step: WizardStage = WizardStage.IDENTITY
    accumulated_data: dict[str, Any] = field(default_factory=dict)
    pending_error: Optional[str] = None
    pending_success: Optional[str] = None
    verification_artifacts: dict[int, dict[str, Any]] = field(default_factory=dict)
    form_buffer: FormBuffer = field(default_factory=FormBuffer)
    field_errors: dict[str, FieldError] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.current_step == WizardStage.COMPLETED

    def clear(self, first_step: WizardStage) -> None:
        """Reinicio completo; conserva el mismo buffer."""
        self.current_step = first_step
        self.accumulated_data.clear()
        self.verification_artifacts.clear()
        self.form_buffer.clear()
        self.field_errors.clear()
        self.pending_error = None
        self.pending_success = None


class FormStateMachine:
    """Controlador de navegación y verificación del wizard."""

    def __init__(
        self,
        registry: StepRegistry,
        gateway: VerificationGateway,
        postal_lookup: Optional[PostalLookup] = None,
        settings: Optional[Settings] = None,
    ):
        self.registry = registry
        self.gateway = gateway
        self.settings = settings or Settings()
        self.state = WizardState(current_step=registry.first_stage)
        self._in_flight = False
        self._epoch = 0
        self.autofill = self._build_autofill(postal_lookup)

    @classmethod
    def from_schema(
        cls,
        schema: FormSchema,
        gateway: VerificationGateway,
        postal_lookup: Optional[PostalLookup] = None,
        settings: Optional[Settings] = None,
    ) -> "FormStateMachine":
        return cls(StepRegistry(schema), gateway, postal_lookup, settings)

    def _build_autofill(self, postal_lookup: Optional[PostalLookup]) -> Optional[AutoFillCoordinator]:
        if postal_lookup is None:
            return None
        business = self.registry.definition(WizardStage.BUSINESS)
        validator = self.registry.validator(WizardStage.BUSINESS).field(PINCODE_FIELD)
        if validator is None:
            logger.info("El paso final no tiene campo '%s'; auto-completado deshabilitado", PINCODE_FIELD)
            return None
        targets = tuple(t for t in AUTOFILL_TARGETS if t in business.field_names)
        return AutoFillCoordinator(
            postal_lookup,
            self.state.form_buffer,
            validator,
            targets=targets,
            delay=self.settings.autofill_delay,
        )

    # =========================================================================
    # Consultas
    # =========================================================================

    @property
    def current_stage(self) -> WizardStage:
        return self.state.current_step

    @property
    def current_definition(self) -> Optional[StepDefinition]:
        if self.state.is_completed:
            return None
        return self.registry.definition(self.state.current_step)

    @property
    def is_completed(self) -> bool:
        return self.state.is_completed

    @property
    def is_busy(self) -> bool:
        """True mientras hay una llamada al gateway pendiente."""
        return self._in_flight

    def progress(self) -> tuple[int, int]:
        """Paso actual (1-based) y total de pasos."""
        return self.registry.position(self.state.current_step)

    # =========================================================================
    # Edición
    # =========================================================================

    def set_field(self, name: str, value: Any) -> None:
        """
        Escribe un valor del usuario en el buffer del paso actual.

        El lookup de PIN solo se programa si hay un event loop en ejecución.
        """
        definition = self._active_definition()
        if name not in definition.field_names:
            raise StateError(f"El campo '{name}' no pertenece al paso '{definition.title}'")
        self.state.form_buffer.set(name, value)
        if (
            self.autofill is not None
            and definition.stage == WizardStage.BUSINESS
            and name == self.autofill.field_name
        ):
            self.autofill.observe(value)

    def set_fields(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    # =========================================================================
    # Transiciones
    # =========================================================================

    async def submit(self, values: Optional[Mapping[str, Any]] = None) -> SubmitOutcome:
        """
        Valida el paso actual, lo verifica con el gateway y avanza.

        Args:
            values: Valores a escribir en el buffer antes de validar

        Returns:
            SubmitOutcome con el estado del envío

        Raises:
            StateError: Si el wizard está completo o ya hay un envío en curso
        """
        definition = self._active_definition()
        if self._in_flight:
            raise StateError("Ya hay una verificación en curso para este paso")
        if values:
            self.set_fields(values)

        stage = definition.stage
        validation = self.registry.validator(stage).validate(self.state.form_buffer.as_dict())
        if not validation.ok:
            self.state.field_errors = dict(validation.errors)
            self.state.pending_error = None
            logger.debug("Paso %s con %d errores de campo", stage.name, len(validation.errors))
            return SubmitOutcome(SubmitStatus.INVALID, stage, errors=dict(validation.errors))

        self.state.field_errors = {}
        payload = self._build_payload(definition, validation.cleaned)

        epoch = self._epoch
        self._in_flight = True
        try:
            result = await self._call_gateway(definition, payload)
        finally:
            if epoch == self._epoch:
                self._in_flight = False

        if epoch != self._epoch:
            logger.info("Resultado de %s descartado: el wizard se reinició", definition.operation)
            return SubmitOutcome(SubmitStatus.DISCARDED, stage)

        if not result.success:
            self.state.pending_error = result.reason or "La verificación falló. Intente nuevamente."
            self.state.pending_success = None
            logger.warning("Paso %s rechazado: %s", stage.name, self.state.pending_error)
            return SubmitOutcome(SubmitStatus.REJECTED, stage, message=self.state.pending_error)

        self._merge(definition, validation.cleaned, result)
        next_stage = self.registry.next_stage(stage)
        self._enter(next_stage)
        self.state.pending_error = None
        self.state.pending_success = result.message or definition.success_message
        logger.info("Paso %s verificado, avanzando a %s", stage.name, next_stage.name)

        status = SubmitStatus.COMPLETED if next_stage == WizardStage.COMPLETED else SubmitStatus.ADVANCED
        return SubmitOutcome(status, stage, message=self.state.pending_success, data=dict(result.data))

    def retreat(self) -> WizardStage:
        """
        Vuelve al paso anterior.

        Conserva accumulated_data pero limpia el buffer y los mensajes:
        el paso anterior debe completarse y verificarse de nuevo.
        """
        definition = self._active_definition()
        if self._in_flight:
            raise StateError("No se puede retroceder con una verificación en curso")
        previous = self.registry.previous_stage(definition.stage)
        if previous is None:
            raise StateError("Ya está en el primer paso")
        self._enter(previous)
        self.state.pending_error = None
        self.state.pending_success = None
        logger.info("Retrocediendo de %s a %s", definition.stage.name, previous.name)
        return previous

    def reset(self) -> None:
        """Reinicia la sesión y descarta cualquier resultado en vuelo."""
        self._epoch += 1
        self._in_flight = False
        if self.autofill is not None:
            self.autofill.cancel()
        self.state.clear(self.registry.first_stage)
        logger.info("Wizard reiniciado")

    # =========================================================================
    # Internos
    # =========================================================================

    def _active_definition(self) -> StepDefinition:
        if self.state.is_completed:
            raise StateError("El registro ya fue completado")
        return self.registry.definition(self.state.current_step)

    def _build_payload(self, definition: StepDefinition, cleaned: dict[str, str]) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for key in definition.carry:
            if key not in self.state.accumulated_data:
                raise StateError(f"Falta '{key}' de un paso anterior")
            payload[key] = self.state.accumulated_data[key]
        payload.update(cleaned)
        return payload

    async def _call_gateway(self, definition: StepDefinition, payload: dict[str, Any]) -> GatewayResult:
        operation = getattr(self.gateway, definition.operation)
        timeout = self.settings.gateway_timeout
        try:
            if timeout:
                return await asyncio.wait_for(operation(payload), timeout)
            return await operation(payload)
        except GatewayError as e:
            return GatewayResult.fail(e.message)
        except asyncio.TimeoutError:
            return GatewayResult.fail("La verificación excedió el tiempo de espera. Intente nuevamente.")

    def _merge(self, definition: StepDefinition, cleaned: dict[str, str], result: GatewayResult) -> None:
        data = self.state.accumulated_data
        data.update(cleaned)
        for source, target in definition.result_keys.items():
            if source in result.data:
                data[target] = result.data[source]
        self.state.verification_artifacts[int(definition.stage)] = dict(result.data)

    def _enter(self, stage: WizardStage) -> None:
        """Cambia de paso con el buffer limpio y precarga los campos declarados."""
        if self.autofill is not None:
            self.autofill.cancel()
        self.state.form_buffer.clear()
        self.state.field_errors = {}
        self.state.current_step = stage
        if stage == WizardStage.COMPLETED:
            return
        definition = self.registry.definition(stage)
        for name in definition.prefill:
            if name in self.state.accumulated_data and name in definition.field_names:
                self.state.form_buffer.set(name, self.state.accumulated_data[name])
