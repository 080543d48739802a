"""
Colaboradores externos de verificación.

- base: Contratos VerificationGateway y PostalLookup
- http: Cliente REST del backend y lookup público de India Post
- memory: Gateway en memoria para desarrollo y pruebas
"""

from udyam.config import Settings
from udyam.gateway.base import PostalLookup, VerificationGateway
from udyam.gateway.http import FallbackPostalLookup, HttpGateway, PublicPincodeLookup
from udyam.gateway.memory import InMemoryGateway


def create_gateway(settings: Settings, offline: bool = False) -> tuple[VerificationGateway, PostalLookup]:
    """
    Construye el gateway y el lookup postal según los ajustes.

    Args:
        settings: Ajustes de conexión
        offline: Si True, usa el gateway en memoria

    Returns:
        Tupla (gateway, lookup_postal)
    """
    if offline:
        gateway = InMemoryGateway()
        return gateway, gateway

    gateway = HttpGateway.from_settings(settings)
    if settings.public_pincode_fallback:
        return gateway, FallbackPostalLookup(gateway, PublicPincodeLookup())
    return gateway, gateway


__all__ = [
    "VerificationGateway",
    "PostalLookup",
    "HttpGateway",
    "PublicPincodeLookup",
    "FallbackPostalLookup",
    "InMemoryGateway",
    "create_gateway",
]
