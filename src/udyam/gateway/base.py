"""
Contratos de los colaboradores externos de verificación.

El motor solo consume estas interfaces; transporte, autenticación y
reintentos son responsabilidad de cada implementación.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from udyam.models.results import GatewayResult, PostalAddress


class VerificationGateway(ABC):
    """Una operación de verificación por paso del wizard."""

    @abstractmethod
    async def verify_identity(self, values: Mapping[str, Any]) -> GatewayResult:
        """Aadhaar + nombre -> registrationId y acuse de envío del OTP."""
        pass

    @abstractmethod
    async def verify_otp(self, values: Mapping[str, Any]) -> GatewayResult:
        """Aadhaar + código -> indicador de verificación."""
        pass

    @abstractmethod
    async def verify_tax_id(self, values: Mapping[str, Any]) -> GatewayResult:
        """PAN + tipo de organización + titular + fecha -> datos normalizados del PAN."""
        pass

    @abstractmethod
    async def submit_registration(self, values: Mapping[str, Any]) -> GatewayResult:
        """Datos de la empresa + registrationId -> número de registro final."""
        pass


class PostalLookup(ABC):
    """Búsqueda de localidad y región por código PIN."""

    @abstractmethod
    async def lookup(self, pincode: str) -> PostalAddress:
        """
        Retorna la dirección postal del PIN.

        Raises:
            GatewayError: Si el PIN no existe o el servicio falla
        """
        pass
