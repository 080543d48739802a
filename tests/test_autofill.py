"""
Tests para core/autofill.py - Auto-completado de ciudad y estado.
"""

import asyncio

import pytest

from udyam.core.autofill import AutoFillCoordinator, FormBuffer
from udyam.core.registry import WizardStage
from udyam.exceptions import GatewayError
from udyam.gateway.base import PostalLookup
from udyam.models.results import PostalAddress


class TestFormBuffer:
    """Tests de la regla de no sobrescribir ediciones manuales."""

    def test_fills_empty_field(self):
        buffer = FormBuffer()
        assert buffer.autofill("city", "Mumbai")
        assert buffer.get("city") == "Mumbai"

    def test_keeps_manual_value(self):
        buffer = FormBuffer()
        buffer.set("city", "Navi Mumbai")
        assert not buffer.autofill("city", "Mumbai")
        assert buffer.get("city") == "Navi Mumbai"

    def test_replaces_previous_autofill(self):
        buffer = FormBuffer()
        buffer.autofill("city", "Mumbai")
        assert buffer.autofill("city", "New Delhi")
        assert buffer.get("city") == "New Delhi"

    def test_keeps_edit_after_autofill(self):
        buffer = FormBuffer()
        buffer.autofill("city", "Mumbai")
        buffer.set("city", "Thane")
        assert not buffer.autofill("city", "New Delhi")
        assert buffer.get("city") == "Thane"

    def test_edit_cleared_after_autofill(self):
        """Test que vaciar un campo auto-completado no lo libera."""
        buffer = FormBuffer()
        buffer.autofill("city", "Mumbai")
        buffer.set("city", "")
        assert not buffer.autofill("city", "New Delhi")

    def test_clear(self):
        buffer = FormBuffer()
        buffer.autofill("city", "Mumbai")
        buffer.clear()
        assert buffer.as_dict() == {}
        assert buffer.autofill("city", "New Delhi")


class RecordingLookup(PostalLookup):
    """Lookup de prueba que registra los PIN consultados."""

    def __init__(self, addresses, delay=0.0):
        self.addresses = addresses
        self.delay = delay
        self.queries = []

    async def lookup(self, pincode):
        self.queries.append(pincode)
        if self.delay:
            await asyncio.sleep(self.delay)
        if pincode not in self.addresses:
            raise GatewayError(f"PIN {pincode} no encontrado", error_type="validation")
        return self.addresses[pincode]


@pytest.fixture
def pincode_validator(registry):
    return registry.validator(WizardStage.BUSINESS).field("pincode")


@pytest.fixture
def addresses():
    return {
        "400001": PostalAddress(pincode="400001", city="Mumbai", state="Maharashtra"),
        "110001": PostalAddress(pincode="110001", city="New Delhi", state="Delhi"),
    }


class TestCoordinator:
    """Tests del coordinador con debounce."""

    def test_lookup_after_delay(self, pincode_validator, addresses):
        lookup = RecordingLookup(addresses)
        buffer = FormBuffer()
        coordinator = AutoFillCoordinator(lookup, buffer, pincode_validator, delay=0.01)

        async def scenario():
            coordinator.observe("400001")
            assert coordinator.pending
            await coordinator.wait_idle()

        asyncio.run(scenario())
        assert lookup.queries == ["400001"]
        assert buffer.get("city") == "Mumbai"
        assert buffer.get("state") == "Maharashtra"

    def test_debounce_keeps_last_value(self, pincode_validator, addresses):
        lookup = RecordingLookup(addresses)
        buffer = FormBuffer()
        coordinator = AutoFillCoordinator(lookup, buffer, pincode_validator, delay=0.02)

        async def scenario():
            coordinator.observe("400001")
            coordinator.observe("110001")
            await coordinator.wait_idle()

        asyncio.run(scenario())
        assert lookup.queries == ["110001"]
        assert buffer.get("city") == "New Delhi"

    def test_invalid_pincode_not_looked_up(self, pincode_validator, addresses):
        lookup = RecordingLookup(addresses)
        coordinator = AutoFillCoordinator(lookup, FormBuffer(), pincode_validator, delay=0.0)

        async def scenario():
            assert coordinator.observe("4000") is None
            assert coordinator.observe("") is None
            assert not coordinator.pending

        asyncio.run(scenario())
        assert lookup.queries == []

    def test_observe_without_loop(self, pincode_validator, addresses):
        """Test que fuera de un event loop no se programa el lookup."""
        lookup = RecordingLookup(addresses)
        coordinator = AutoFillCoordinator(lookup, FormBuffer(), pincode_validator, delay=0.0)

        assert coordinator.observe("400001") is None
        assert not coordinator.pending
        assert lookup.queries == []

    def test_stale_result_discarded(self, pincode_validator, addresses):
        """Test que un resultado en vuelo se descarta al cancelar."""
        lookup = RecordingLookup(addresses, delay=0.05)
        buffer = FormBuffer()
        coordinator = AutoFillCoordinator(lookup, buffer, pincode_validator, delay=0.0)

        async def scenario():
            task = coordinator.observe("400001")
            while not lookup.queries:
                await asyncio.sleep(0)
            coordinator.cancel()
            await asyncio.wait({task})

        asyncio.run(scenario())
        assert buffer.get("city") is None

    def test_lookup_failure_leaves_fields(self, pincode_validator, addresses):
        lookup = RecordingLookup(addresses)
        buffer = FormBuffer()
        buffer.set("city", "Pune")
        coordinator = AutoFillCoordinator(lookup, buffer, pincode_validator, delay=0.0)

        async def scenario():
            coordinator.observe("999999")
            await coordinator.wait_idle()

        asyncio.run(scenario())
        assert lookup.queries == ["999999"]
        assert buffer.get("city") == "Pune"
        assert buffer.get("state") is None

    def test_targets_limit_fields(self, pincode_validator, addresses):
        buffer = FormBuffer()
        coordinator = AutoFillCoordinator(
            RecordingLookup(addresses), buffer, pincode_validator, targets=("state",), delay=0.0,
        )

        async def scenario():
            coordinator.observe("400001")
            await coordinator.wait_idle()

        asyncio.run(scenario())
        assert buffer.as_dict() == {"state": "Maharashtra"}


class TestMachineAutofill:
    """Tests del auto-completado integrado en la máquina de estados."""

    def test_pincode_fills_city_and_state(self, autofill_machine, gateway, advance):
        async def scenario():
            await advance(autofill_machine, WizardStage.BUSINESS)
            autofill_machine.set_field("pincode", "400001")
            await autofill_machine.autofill.wait_idle()

        asyncio.run(scenario())
        buffer = autofill_machine.state.form_buffer
        assert buffer.get("city") == "Mumbai"
        assert buffer.get("state") == "Maharashtra"
        assert gateway.calls_to("lookup") == [{"pincode": "400001"}]

    def test_sync_set_field_keeps_value(self, autofill_machine, gateway, advance):
        """Test que set_field desde código síncrono guarda el PIN sin lookup."""
        asyncio.run(advance(autofill_machine, WizardStage.BUSINESS))

        autofill_machine.set_field("pincode", "400001")

        assert autofill_machine.state.form_buffer.get("pincode") == "400001"
        assert not autofill_machine.autofill.pending
        assert gateway.calls_to("lookup") == []

    def test_manual_city_preserved(self, autofill_machine, advance):
        async def scenario():
            await advance(autofill_machine, WizardStage.BUSINESS)
            autofill_machine.set_field("city", "Navi Mumbai")
            autofill_machine.set_field("pincode", "400001")
            await autofill_machine.autofill.wait_idle()

        asyncio.run(scenario())
        buffer = autofill_machine.state.form_buffer
        assert buffer.get("city") == "Navi Mumbai"
        assert buffer.get("state") == "Maharashtra"

    def test_new_pincode_replaces_autofill(self, autofill_machine, advance):
        async def scenario():
            await advance(autofill_machine, WizardStage.BUSINESS)
            autofill_machine.set_field("pincode", "400001")
            await autofill_machine.autofill.wait_idle()
            autofill_machine.set_field("pincode", "110001")
            await autofill_machine.autofill.wait_idle()

        asyncio.run(scenario())
        buffer = autofill_machine.state.form_buffer
        assert buffer.get("city") == "New Delhi"
        assert buffer.get("state") == "Delhi"

    def test_unknown_pincode_is_silent(self, autofill_machine, advance):
        async def scenario():
            await advance(autofill_machine, WizardStage.BUSINESS)
            autofill_machine.set_field("pincode", "999999")
            await autofill_machine.autofill.wait_idle()

        asyncio.run(scenario())
        buffer = autofill_machine.state.form_buffer
        assert buffer.get("city") is None
        assert autofill_machine.state.pending_error is None

    def test_retreat_cancels_pending_lookup(self, autofill_machine, gateway, advance):
        async def scenario():
            await advance(autofill_machine, WizardStage.BUSINESS)
            autofill_machine.set_field("pincode", "400001")
            autofill_machine.retreat()
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert autofill_machine.current_stage == WizardStage.TAX_ID
        assert gateway.calls_to("lookup") == []
        assert autofill_machine.state.form_buffer.get("city") is None

    def test_submit_with_autofilled_values(self, autofill_machine, advance):
        async def scenario():
            await advance(autofill_machine, WizardStage.BUSINESS)
            autofill_machine.set_fields({
                "businessName": "Sharma Traders",
                "address": "12 MG Road, Fort",
                "pincode": "560001",
            })
            await autofill_machine.autofill.wait_idle()
            return await autofill_machine.submit()

        outcome = asyncio.run(scenario())
        assert outcome.ok
        assert autofill_machine.state.accumulated_data["city"] == "Bengaluru"
        assert autofill_machine.state.accumulated_data["state"] == "Karnataka"
