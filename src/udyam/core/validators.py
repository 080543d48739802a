"""
Compilador de validadores a partir de descriptores de campo.

Convierte un FieldDescriptor en un FieldValidator ejecutable y un
StepDescriptor en un CompiledValidator que agrega todos sus campos.

Reglas por campo, en orden (la primera violación gana):
1. Requerido y vacío (o solo espacios) -> MISSING
2. Opcional y vacío -> válido (se omiten las demás reglas)
3. max_length excedido -> TOO_LONG
4. Patrón sin coincidencia completa -> FORMAT_INVALID
5. select fuera de las opciones -> NOT_AN_OPTION

Las longitudes exactas (Aadhaar, OTP, PIN, PAN) se expresan como patrones.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from udyam.config import EMAIL_PATTERN, OTP_PATTERN
from udyam.exceptions import FieldError, FieldErrorCode
from udyam.models.schema import FieldDescriptor, FieldKind, Normalization, StepDescriptor


Rule = Callable[[str], Optional[FieldError]]

# Campos que se normalizan aunque el esquema no lo declare
DEFAULT_NORMALIZATION = {
    "pan": Normalization.UPPER,
}


# =============================================================================
# REGLAS
# =============================================================================

def _max_length_rule(descriptor: FieldDescriptor) -> Rule:
    limit = descriptor.max_length

    def rule(value: str) -> Optional[FieldError]:
        if len(value) > limit:
            return FieldError(
                FieldErrorCode.TOO_LONG,
                descriptor.name,
                f"{descriptor.label} debe tener como máximo {limit} caracteres",
            )
        return None

    return rule


def _pattern_rule(descriptor: FieldDescriptor, pattern: str) -> Rule:
    regex = re.compile(pattern)

    def rule(value: str) -> Optional[FieldError]:
        if regex.fullmatch(value) is None:
            return FieldError(
                FieldErrorCode.FORMAT_INVALID,
                descriptor.name,
                f"El formato de {descriptor.label} no es válido",
            )
        return None

    return rule


def _options_rule(descriptor: FieldDescriptor) -> Rule:
    options = tuple(descriptor.options or ())

    def rule(value: str) -> Optional[FieldError]:
        if value not in options:
            return FieldError(
                FieldErrorCode.NOT_AN_OPTION,
                descriptor.name,
                f"Seleccione una opción válida para {descriptor.label}",
            )
        return None

    return rule


# =============================================================================
# REGLAS POR TIPO DE CAMPO
# =============================================================================

def _text_rules(descriptor: FieldDescriptor) -> list[Rule]:
    if descriptor.pattern:
        return [_pattern_rule(descriptor, descriptor.pattern)]
    return []


def _email_rules(descriptor: FieldDescriptor) -> list[Rule]:
    return [_pattern_rule(descriptor, descriptor.pattern or EMAIL_PATTERN)]


def _otp_rules(descriptor: FieldDescriptor) -> list[Rule]:
    return [_pattern_rule(descriptor, descriptor.pattern or OTP_PATTERN)]


def _select_rules(descriptor: FieldDescriptor) -> list[Rule]:
    return _text_rules(descriptor) + [_options_rule(descriptor)]


_KIND_RULES: dict[FieldKind, Callable[[FieldDescriptor], list[Rule]]] = {
    FieldKind.TEXT: _text_rules,
    FieldKind.TEXTAREA: _text_rules,
    FieldKind.TEL: _text_rules,
    FieldKind.EMAIL: _email_rules,
    FieldKind.OTP: _otp_rules,
    FieldKind.SELECT: _select_rules,
}


def _normalizer_for(descriptor: FieldDescriptor) -> Callable[[str], str]:
    mode = descriptor.normalize or DEFAULT_NORMALIZATION.get(descriptor.name)
    if mode == Normalization.UPPER:
        return str.upper
    return lambda value: value


# =============================================================================
# VALIDADORES COMPILADOS
# =============================================================================

class FieldValidator:
    """Validador ejecutable de un campo."""

    def __init__(self, descriptor: FieldDescriptor, rules: list[Rule], transform: Callable[[str], str]):
        self.descriptor = descriptor
        self._rules = tuple(rules)
        self._transform = transform

    @property
    def name(self) -> str:
        return self.descriptor.name

    def normalize(self, value: Any) -> str:
        """
        Retorna el valor que el motor almacena para este campo.

        None se considera ausente (""). Solo se aplica la normalización
        declarada del campo (p.ej. PAN en mayúsculas); los espacios se
        conservan y los valida el patrón.
        """
        if value is None:
            return ""
        text = value if isinstance(value, str) else str(value)
        return self._transform(text)

    def check(self, text: str) -> Optional[FieldError]:
        """Aplica las reglas a un valor ya normalizado."""
        if not text.strip():
            if self.descriptor.required:
                return FieldError(
                    FieldErrorCode.MISSING,
                    self.descriptor.name,
                    f"{self.descriptor.label} es obligatorio",
                )
            return None
        for rule in self._rules:
            error = rule(text)
            if error is not None:
                return error
        return None

    def validate(self, value: Any) -> Optional[FieldError]:
        """Normaliza y valida un valor crudo."""
        return self.check(self.normalize(value))

    __call__ = validate


@dataclass
class StepValidation:
    """Resultado de validar un paso completo."""
    cleaned: dict[str, str] = field(default_factory=dict)
    errors: dict[str, FieldError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class CompiledValidator:
    """Conjunción de los validadores de campo de un paso."""

    def __init__(self, descriptor: StepDescriptor, fields: dict[str, FieldValidator]):
        self.descriptor = descriptor
        self.fields = fields

    def field(self, name: str) -> Optional[FieldValidator]:
        return self.fields.get(name)

    def validate(self, values: Mapping[str, Any]) -> StepValidation:
        """
        Evalúa todos los campos y retorna el conjunto completo de violaciones.

        Los valores válidos no vacíos quedan normalizados en `cleaned`;
        las claves que no pertenecen al paso se ignoran.
        """
        result = StepValidation()
        for name, validator in self.fields.items():
            text = validator.normalize(values.get(name))
            error = validator.check(text)
            if error is not None:
                result.errors[name] = error
            elif text.strip():
                result.cleaned[name] = text
        return result


def compile_field(descriptor: FieldDescriptor) -> FieldValidator:
    """Compila un descriptor de campo en su validador."""
    builder = _KIND_RULES.get(descriptor.kind)
    if builder is None:
        raise ValueError(f"Tipo de campo no soportado: {descriptor.kind}")

    rules: list[Rule] = []
    if descriptor.max_length:
        rules.append(_max_length_rule(descriptor))
    rules.extend(builder(descriptor))
    return FieldValidator(descriptor, rules, _normalizer_for(descriptor))


def compile_step(descriptor: StepDescriptor) -> CompiledValidator:
    """Compila todos los campos de un paso en un validador agregado."""
    return CompiledValidator(
        descriptor,
        {f.name: compile_field(f) for f in descriptor.fields},
    )
