"""
Cliente HTTP del backend de verificación Udyam.

Rutas:
- POST /api/registration/step1       (Aadhaar + nombre)
- POST /api/registration/verify-otp  (Aadhaar + OTP)
- POST /api/verification/pan         (PAN)
- POST /api/registration/step2       (datos de la empresa)
- GET  /api/pincode/<pin>            (ciudad y estado)

Resiliencia:
- Timeouts de conexión y lectura
- Reintentos con backoff para 429 y 5xx, solo en GET
- Clasificación de errores (red, timeout, validación, servidor)

requests es bloqueante; cada llamada corre en un hilo de trabajo.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from udyam.config import DEFAULT_API_URL, PUBLIC_PINCODE_API_URL, Settings
from udyam.exceptions import GatewayError
from udyam.gateway.base import PostalLookup, VerificationGateway
from udyam.models.results import GatewayResult, PostalAddress

logger = logging.getLogger(__name__)


ENDPOINTS = {
    "verify_identity": "/api/registration/step1",
    "verify_otp": "/api/registration/verify-otp",
    "verify_tax_id": "/api/verification/pan",
    "submit_registration": "/api/registration/step2",
    "pincode": "/api/pincode/{pincode}",
}


def build_session() -> requests.Session:
    """Sesión con reintentos para GET ante 429/5xx."""
    retry_strategy = Retry(
        total=3,
        backoff_factor=0.5,  # 0.5s, 1s, 2s
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],  # POST de verificación no es idempotente
        raise_on_status=False,
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Content-Type": "application/json"})
    return session


def _response_json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def _extract_error(body: Any, response: requests.Response) -> str:
    """Mensaje de error del cuerpo {error, details} o del status HTTP."""
    if isinstance(body, dict):
        error = body.get("error") or body.get("message")
        details = body.get("details")
        if isinstance(details, list):
            messages = [d.get("message") for d in details if isinstance(d, dict) and d.get("message")]
            if messages:
                return f"{error or 'Validación fallida'}: {'; '.join(messages)}"
        elif isinstance(details, str) and details:
            return f"{error or 'Error'}: {details}"
        if error:
            return str(error)
    return f"HTTP {response.status_code}: {response.reason}"


class _HttpClient:
    """Base con manejo de timeouts y clasificación de errores."""

    def __init__(
        self,
        base_url: str,
        connect_timeout: float = 3.0,
        read_timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = (connect_timeout, read_timeout)
        self.session = session or build_session()

    def _send(self, method: str, path: str, payload: Optional[dict] = None) -> tuple[requests.Response, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error("%s %s timeout: %s", method, url, e)
            raise GatewayError("El servicio de verificación no respondió a tiempo", error_type="timeout")
        except requests.exceptions.RequestException as e:
            logger.error("%s %s error de red: %s", method, url, e)
            raise GatewayError(f"Error de red: {e}", error_type="network")
        return response, _response_json(response)


class HttpGateway(_HttpClient, VerificationGateway, PostalLookup):
    """Gateway contra el backend REST de registro."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        connect_timeout: float = 3.0,
        read_timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url, connect_timeout, read_timeout, session)

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpGateway":
        return cls(settings.api_url, settings.connect_timeout, settings.read_timeout)

    def _post(self, path: str, payload: dict) -> GatewayResult:
        """
        POST de verificación.

        Las respuestas 4xx son rechazos reportados (GatewayResult fallido);
        los 5xx y errores de red se lanzan como GatewayError.
        """
        response, body = self._send("POST", path, payload)
        if response.ok and isinstance(body, dict) and body.get("success"):
            try:
                return GatewayResult.ok(body.get("data") or {}, message=body.get("message"))
            except ValidationError as e:
                logger.error("POST %s con respuesta mal formada: %s", path, e)
                raise GatewayError(f"Respuesta mal formada de {path}", error_type="server") from e

        reason = _extract_error(body, response)
        if response.status_code >= 500:
            logger.error("POST %s falló con status %s: %s", path, response.status_code, reason)
            raise GatewayError(reason, error_type="server", status_code=response.status_code)
        logger.info("POST %s rechazado (%s): %s", path, response.status_code, reason)
        return GatewayResult.fail(reason)

    async def verify_identity(self, values: Mapping[str, Any]) -> GatewayResult:
        return await asyncio.to_thread(self._post, ENDPOINTS["verify_identity"], dict(values))

    async def verify_otp(self, values: Mapping[str, Any]) -> GatewayResult:
        return await asyncio.to_thread(self._post, ENDPOINTS["verify_otp"], dict(values))

    async def verify_tax_id(self, values: Mapping[str, Any]) -> GatewayResult:
        return await asyncio.to_thread(self._post, ENDPOINTS["verify_tax_id"], dict(values))

    async def submit_registration(self, values: Mapping[str, Any]) -> GatewayResult:
        return await asyncio.to_thread(self._post, ENDPOINTS["submit_registration"], dict(values))

    def _lookup(self, pincode: str) -> PostalAddress:
        response, body = self._send("GET", ENDPOINTS["pincode"].format(pincode=pincode))
        if not response.ok or not isinstance(body, dict) or not body.get("success"):
            raise GatewayError(_extract_error(body, response), error_type="validation", status_code=response.status_code)
        data = body.get("data") or {}
        try:
            return PostalAddress(
                pincode=pincode,
                city=data["city"],
                state=data["state"],
                district=data.get("district"),
            )
        except (KeyError, TypeError, ValidationError) as e:
            raise GatewayError(f"Respuesta de PIN incompleta o mal formada para {pincode}", error_type="server") from e

    async def lookup(self, pincode: str) -> PostalAddress:
        return await asyncio.to_thread(self._lookup, pincode)


class PublicPincodeLookup(_HttpClient, PostalLookup):
    """Lookup contra la API pública de India Post."""

    def __init__(
        self,
        base_url: str = PUBLIC_PINCODE_API_URL,
        connect_timeout: float = 3.0,
        read_timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url, connect_timeout, read_timeout, session)

    def _lookup(self, pincode: str) -> PostalAddress:
        response, body = self._send("GET", f"/pincode/{pincode}")
        if not response.ok:
            raise GatewayError(_extract_error(body, response), error_type="server", status_code=response.status_code)
        # Formato: [{"Status": "Success", "PostOffice": [{...}]}]
        try:
            entry = body[0] if isinstance(body, list) and body else {}
            offices = entry.get("PostOffice") or []
            office = offices[0] if offices else None
            if office is None:
                raise GatewayError(f"PIN {pincode} no encontrado", error_type="validation")

            city = office.get("Block")
            if not city or city == "NA":
                city = office.get("Division") or office.get("District")
            if not city or not office.get("State"):
                raise GatewayError(f"Respuesta de PIN incompleta para {pincode}", error_type="server")
            return PostalAddress(
                pincode=pincode,
                city=city,
                state=office["State"],
                district=office.get("District"),
            )
        except (AttributeError, KeyError, TypeError, ValidationError) as e:
            raise GatewayError(f"Respuesta de PIN mal formada para {pincode}", error_type="server") from e

    async def lookup(self, pincode: str) -> PostalAddress:
        return await asyncio.to_thread(self._lookup, pincode)


class FallbackPostalLookup(PostalLookup):
    """Prueba cada lookup en orden; gana el primero que responde."""

    def __init__(self, *lookups: PostalLookup):
        if not lookups:
            raise ValueError("Se requiere al menos un lookup")
        self.lookups = lookups

    async def lookup(self, pincode: str) -> PostalAddress:
        last_error: Optional[GatewayError] = None
        for lookup in self.lookups:
            try:
                return await lookup.lookup(pincode)
            except GatewayError as e:
                logger.debug("%s falló para %s: %s", type(lookup).__name__, pincode, e.message)
                last_error = e
        raise last_error
