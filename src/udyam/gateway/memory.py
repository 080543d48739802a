"""
Gateway en memoria con el comportamiento del backend de desarrollo.

Emite un OTP fijo por número Aadhaar, verifica el código por
coincidencia exacta, genera identificadores mock-reg-* y números
UDYAM-*, y resuelve un pequeño catálogo de códigos PIN.
"""

import asyncio
import re
import secrets
import string
from typing import Any, Mapping, Optional

from udyam.config import PAN_PATTERN
from udyam.exceptions import GatewayError
from udyam.gateway.base import PostalLookup, VerificationGateway
from udyam.models.results import GatewayResult, PostalAddress


DEFAULT_OTP = "123456"

DEFAULT_PINCODES = {
    "400001": PostalAddress(pincode="400001", city="Mumbai", state="Maharashtra", district="Mumbai City"),
    "110001": PostalAddress(pincode="110001", city="New Delhi", state="Delhi", district="Central Delhi"),
    "560001": PostalAddress(pincode="560001", city="Bengaluru", state="Karnataka", district="Bangalore"),
    "600001": PostalAddress(pincode="600001", city="Chennai", state="Tamil Nadu", district="Chennai"),
    "700001": PostalAddress(pincode="700001", city="Kolkata", state="West Bengal", district="Kolkata"),
}

# Cuarto carácter del PAN -> clase de titular
PAN_HOLDER_CLASSES = {
    "P": "Individual",
    "C": "Company",
    "H": "Hindu Undivided Family",
    "F": "Firm",
    "A": "Association of Persons",
    "T": "Trust",
    "B": "Body of Individuals",
    "L": "Local Authority",
    "J": "Artificial Juridical Person",
    "G": "Government",
}


def _random_code(length: int = 9) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class InMemoryGateway(VerificationGateway, PostalLookup):
    """Gateway simulado; registra cada llamada en `calls`."""

    def __init__(
        self,
        otp: str = DEFAULT_OTP,
        pincodes: Optional[dict[str, PostalAddress]] = None,
        latency: float = 0.0,
    ):
        self.otp = otp
        self.pincodes = dict(DEFAULT_PINCODES if pincodes is None else pincodes)
        self.latency = latency
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.issued_otps: dict[str, str] = {}
        self.registrations: set[str] = set()

    async def _record(self, operation: str, values: Mapping[str, Any]) -> None:
        self.calls.append((operation, dict(values)))
        if self.latency:
            await asyncio.sleep(self.latency)

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        """Payloads recibidos por una operación."""
        return [values for name, values in self.calls if name == operation]

    async def verify_identity(self, values: Mapping[str, Any]) -> GatewayResult:
        await self._record("verify_identity", values)
        aadhaar = values.get("aadhaar")
        if not aadhaar:
            return GatewayResult.fail("Número Aadhaar requerido")

        registration_id = f"mock-reg-{secrets.token_hex(5)}"
        self.registrations.add(registration_id)
        self.issued_otps[aadhaar] = self.otp
        return GatewayResult.ok(
            {"registrationId": registration_id, "otpSent": True, "expiresIn": "10 minutes"},
            message="Aadhaar verificado. Ingrese el OTP enviado a su móvil.",
        )

    async def verify_otp(self, values: Mapping[str, Any]) -> GatewayResult:
        await self._record("verify_otp", values)
        aadhaar = values.get("aadhaar")
        issued = self.issued_otps.get(aadhaar)
        if issued is None:
            return GatewayResult.fail("No se emitió un OTP para este número Aadhaar")
        if values.get("otp") != issued:
            return GatewayResult.fail("OTP inválido")
        return GatewayResult.ok({"aadhaar": aadhaar, "verified": True})

    async def verify_tax_id(self, values: Mapping[str, Any]) -> GatewayResult:
        await self._record("verify_tax_id", values)
        pan = str(values.get("pan", ""))
        if not re.fullmatch(PAN_PATTERN, pan):
            return GatewayResult.fail("Formato de PAN inválido (ejemplo: ABCDE1234F)")

        pan = pan.upper()
        holder = " ".join(str(values.get("aadhaarName", "")).split()).upper()
        return GatewayResult.ok({
            "pan": pan,
            "name": holder,
            "dateOfBirth": values.get("dateOfBirth"),
            "type": PAN_HOLDER_CLASSES.get(pan[3], "Other"),
            "status": "Active",
            "verified": True,
        })

    async def submit_registration(self, values: Mapping[str, Any]) -> GatewayResult:
        await self._record("submit_registration", values)
        registration_id = values.get("registrationId")
        if registration_id not in self.registrations:
            return GatewayResult.fail("Identificador de registro desconocido")
        return GatewayResult.ok(
            {
                "registrationId": registration_id,
                "completed": True,
                "udyamNumber": f"UDYAM-{_random_code()}",
            },
            message="Datos de la empresa enviados. Registro completado.",
        )

    async def lookup(self, pincode: str) -> PostalAddress:
        await self._record("lookup", {"pincode": pincode})
        address = self.pincodes.get(pincode)
        if address is None:
            raise GatewayError(f"PIN {pincode} no encontrado", error_type="validation")
        return address
