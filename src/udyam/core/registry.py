"""
Registro de pasos del wizard.

Mapea cada etapa del wizard a su conjunto de campos (del esquema o
sintético) y a su validador compilado. Secuencia canónica:

    IDENTITY (esquema paso 1) -> OTP (sintético) -> TAX_ID (sintético)
    -> BUSINESS (esquema paso 2, paso final) -> COMPLETED
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from udyam.config import (
    DATE_PATTERN,
    ORGANISATION_TYPES,
    OTP_PATTERN,
    PAN_PATTERN,
)
from udyam.core.validators import CompiledValidator, compile_step
from udyam.exceptions import SchemaError, StateError
from udyam.models.schema import (
    FieldDescriptor,
    FieldKind,
    FormSchema,
    Normalization,
    StepDescriptor,
)


class WizardStage(IntEnum):
    """Etapas del wizard; COMPLETED es terminal."""
    IDENTITY = 1
    OTP = 2
    TAX_ID = 3
    BUSINESS = 4
    COMPLETED = 5


IDENTITY_SCHEMA_STEP = 1
BUSINESS_SCHEMA_STEP = 2


@dataclass(frozen=True)
class StepDefinition:
    """Definición de un paso del wizard."""
    stage: WizardStage
    title: str
    description: str
    descriptor: StepDescriptor
    operation: str                      # Método del VerificationGateway
    synthetic: bool = False
    carry: tuple[str, ...] = ()         # Claves de accumulated_data agregadas al payload
    result_keys: dict[str, str] = field(default_factory=dict)  # clave del gateway -> clave acumulada
    prefill: tuple[str, ...] = ()       # Campos precargados desde accumulated_data
    success_message: str = ""

    @property
    def field_names(self) -> list[str]:
        return self.descriptor.field_names


# =============================================================================
# PASOS SINTÉTICOS
# =============================================================================

OTP_STEP = StepDescriptor(
    index=2,
    title="OTP Verification",
    fields=(
        FieldDescriptor(
            name="otp",
            id="txtOTP",
            kind=FieldKind.OTP,
            label="OTP",
            required=True,
            pattern=OTP_PATTERN,
            max_length=6,
            placeholder="Enter 6 digit OTP",
        ),
    ),
)

TAX_ID_STEP = StepDescriptor(
    index=3,
    title="PAN Verification",
    fields=(
        FieldDescriptor(
            name="pan",
            kind=FieldKind.TEXT,
            label="PAN Number",
            required=True,
            pattern=PAN_PATTERN,
            max_length=10,
            normalize=Normalization.UPPER,
            placeholder="ABCDE1234F",
        ),
        FieldDescriptor(
            name="businessType",
            kind=FieldKind.SELECT,
            label="Type of Organisation",
            required=True,
            options=ORGANISATION_TYPES,
        ),
        FieldDescriptor(
            name="aadhaarName",
            kind=FieldKind.TEXT,
            label="Name of PAN Holder",
            required=True,
            max_length=100,
            placeholder="Enter name as per PAN",
        ),
        FieldDescriptor(
            name="dateOfBirth",
            kind=FieldKind.TEXT,
            label="DOB or DOI as per PAN",
            required=True,
            pattern=DATE_PATTERN,
            placeholder="YYYY-MM-DD",
        ),
    ),
)


def _without_otp_fields(step: StepDescriptor) -> StepDescriptor:
    """Quita los campos OTP del paso de identidad; pertenecen al paso sintético."""
    fields = tuple(f for f in step.fields if f.kind != FieldKind.OTP and f.name != "otp")
    return step.model_copy(update={"fields": fields})


# =============================================================================
# REGISTRO
# =============================================================================

class StepRegistry:
    """Registro inmutable de pasos y validadores de una sesión."""

    def __init__(self, schema: FormSchema):
        self.schema = schema
        self._definitions = self._build(schema)
        self._validators: dict[WizardStage, CompiledValidator] = {}

    @staticmethod
    def _build(schema: FormSchema) -> dict[WizardStage, StepDefinition]:
        identity = schema.step(IDENTITY_SCHEMA_STEP)
        business = schema.step(BUSINESS_SCHEMA_STEP)
        if identity is None:
            raise SchemaError("falta el paso de verificación de identidad", step=IDENTITY_SCHEMA_STEP)
        if business is None:
            raise SchemaError("falta el paso de datos de la empresa", step=BUSINESS_SCHEMA_STEP)

        return {
            WizardStage.IDENTITY: StepDefinition(
                stage=WizardStage.IDENTITY,
                title="Aadhaar Verification",
                description="Ingrese su número Aadhaar y nombre para la verificación",
                descriptor=_without_otp_fields(identity),
                operation="verify_identity",
                result_keys={"registrationId": "registrationId"},
                success_message="Aadhaar verificado. Ingrese el OTP para completar la verificación.",
            ),
            WizardStage.OTP: StepDefinition(
                stage=WizardStage.OTP,
                title="OTP Verification",
                description="Ingrese el OTP de 6 dígitos enviado al móvil vinculado a Aadhaar",
                descriptor=OTP_STEP,
                operation="verify_otp",
                synthetic=True,
                carry=("aadhaar",),
                result_keys={"verified": "aadhaarVerified"},
                success_message="OTP verificado. Ahora verifique su PAN.",
            ),
            WizardStage.TAX_ID: StepDefinition(
                stage=WizardStage.TAX_ID,
                title="PAN Verification",
                description="Ingrese su PAN y los datos adicionales para verificar su identidad",
                descriptor=TAX_ID_STEP,
                operation="verify_tax_id",
                synthetic=True,
                result_keys={
                    "name": "panHolderName",
                    "status": "panStatus",
                    "type": "organisationClass",
                },
                success_message="PAN verificado. Complete los datos de su empresa.",
            ),
            WizardStage.BUSINESS: StepDefinition(
                stage=WizardStage.BUSINESS,
                title="Business Details",
                description="Complete los datos de su empresa para finalizar el registro",
                descriptor=business.model_copy(update={"title": "Business Details"}),
                operation="submit_registration",
                carry=("registrationId",),
                result_keys={"udyamNumber": "udyamNumber", "completed": "completed"},
                prefill=("businessType", "aadhaarName"),
                success_message="Datos enviados. Registro completado.",
            ),
        }

    @property
    def stages(self) -> tuple[WizardStage, ...]:
        """Etapas en orden de navegación (sin COMPLETED)."""
        return tuple(sorted(self._definitions))

    @property
    def first_stage(self) -> WizardStage:
        return self.stages[0]

    @property
    def final_stage(self) -> WizardStage:
        return self.stages[-1]

    def definition(self, stage: WizardStage) -> StepDefinition:
        if stage not in self._definitions:
            raise StateError(f"La etapa {stage!r} no tiene pasos asociados")
        return self._definitions[stage]

    def validator(self, stage: WizardStage) -> CompiledValidator:
        """Validador compilado de la etapa (memoizado durante la sesión)."""
        if stage not in self._validators:
            self._validators[stage] = compile_step(self.definition(stage).descriptor)
        return self._validators[stage]

    def next_stage(self, stage: WizardStage) -> WizardStage:
        """Etapa siguiente; después del paso final viene COMPLETED."""
        stages = self.stages
        position = stages.index(stage)
        if position + 1 < len(stages):
            return stages[position + 1]
        return WizardStage.COMPLETED

    def previous_stage(self, stage: WizardStage) -> Optional[WizardStage]:
        """Etapa anterior, o None si es la primera."""
        if stage == WizardStage.COMPLETED:
            return None
        position = self.stages.index(stage)
        return self.stages[position - 1] if position > 0 else None

    def position(self, stage: WizardStage) -> tuple[int, int]:
        """Posición 1-based de la etapa y total de pasos."""
        total = len(self.stages)
        if stage == WizardStage.COMPLETED:
            return total, total
        return self.stages.index(stage) + 1, total
