"""Configuración de pytest para tests de udyam."""

import copy
import json

import pytest

from udyam.config import Settings
from udyam.core.registry import StepRegistry, WizardStage
from udyam.core.state_machine import FormStateMachine
from udyam.data import DEFAULT_SCHEMA_PATH, load_default_schema
from udyam.gateway.memory import InMemoryGateway


@pytest.fixture(scope="session")
def _schema_document():
    return json.loads(DEFAULT_SCHEMA_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def schema_document(_schema_document):
    """Documento del esquema incluido, copia mutable por test."""
    return copy.deepcopy(_schema_document)


@pytest.fixture
def schema():
    """Esquema Udyam incluido con el paquete."""
    return load_default_schema()


@pytest.fixture
def registry(schema):
    return StepRegistry(schema)


@pytest.fixture
def settings():
    """Ajustes rápidos para tests (debounce corto)."""
    return Settings(autofill_debounce_ms=10, gateway_timeout=2.0)


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def machine(schema, gateway, settings):
    """Máquina de estados sin auto-completado."""
    return FormStateMachine.from_schema(schema, gateway, settings=settings)


@pytest.fixture
def autofill_machine(schema, gateway, settings):
    """Máquina de estados con el gateway en memoria como lookup postal."""
    return FormStateMachine.from_schema(schema, gateway, gateway, settings)


@pytest.fixture
def valid_values():
    """Valores válidos para cada paso del wizard."""
    return {
        WizardStage.IDENTITY: {"aadhaar": "123456789012", "aadhaarName": "Rahul Sharma"},
        WizardStage.OTP: {"otp": "123456"},
        WizardStage.TAX_ID: {
            "pan": "abcpe1234f",
            "businessType": "Proprietorship",
            "aadhaarName": "Rahul Sharma",
            "dateOfBirth": "1990-05-14",
        },
        WizardStage.BUSINESS: {
            "businessName": "Sharma Traders",
            "pincode": "400001",
            "city": "Mumbai",
            "state": "Maharashtra",
            "address": "12 MG Road, Fort",
        },
    }


@pytest.fixture
def advance(valid_values):
    """Corrutina que avanza una máquina hasta la etapa indicada."""
    async def _advance(machine, stage):
        while machine.current_stage < stage:
            outcome = await machine.submit(valid_values[machine.current_stage])
            assert outcome.ok, outcome
    return _advance
