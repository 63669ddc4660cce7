"""Backend REST sobre HTTP (httpx).

Por qué aquí:
- Es I/O puro: traduce peticiones tipadas del dominio a llamadas HTTP y
  respuestas JSON a modelos tipados.
- Los mapeos CRUD siguen el estándar REST: create=POST, read=GET,
  update=PUT, delete=DELETE.

Reglas:
- Un cliente httpx de un solo uso por llamada.
- Sin reintentos: cada llamada produce exactamente un `BackendResult`.
- Un 401 siempre es fallo y, si la petición lo permite, emite `LoginSignal`.
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Any, TypeVar
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.auth import UserAuth
from core.domain.crud import CrudType, HttpMethod
from core.domain.models import BackendRequest, BackendResponse, MProfilePicture
from core.domain.result import BackendResult
from core.errors import DecodingError, EncodingError, TransportError, UnauthorizedError
from core.services.login_signal import LoginSignal

logger = logging.getLogger(__name__)

Res = TypeVar("Res", bound=BackendResponse)

AV_USER_HEADER = "AV-User"
JSON_CONTENT_TYPE = "application/json"
UPLOAD_RESOURCE = "upload"
EMPTY_JSON_BODY = b"{}"


def join_endpoint(endpoint: str, resource: str) -> str:
    """Une endpoint y recurso con exactamente una `/` entre ambos."""

    return f"{endpoint.rstrip('/')}/{resource.lstrip('/')}"


def describe_parameter(value: Any) -> str:
    """Representación canónica de un valor de query."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def make_url(endpoint: str, request: BackendRequest, method: HttpMethod) -> str:
    """URL completa: endpoint + recurso (+ query solo si hay parámetros)."""

    url = join_endpoint(endpoint, request.resource)
    parameters = request.get_parameters(method.to_crud)
    if not parameters:
        return url

    query = urlencode(
        [(str(key), describe_parameter(value)) for key, value in parameters.items()],
        quote_via=quote,
    )
    return f"{url}?{query}"


def new_request(method: HttpMethod, url: str, **kwargs: Any) -> httpx.Request:
    """`httpx.Request` que convierte una URL inválida en `EncodingError`."""

    try:
        return httpx.Request(method.value, url, **kwargs)
    except httpx.InvalidURL as exc:
        raise EncodingError(f"Cannot build {method.value} {url}: {exc}") from exc


def make_json_request(endpoint: str, request: BackendRequest, method: HttpMethod) -> httpx.Request:
    """Construye una petición con cuerpo JSON.

    - Si la operación no lleva cuerpo se envía el objeto vacío `{}`.
    - Si el modelo no se puede serializar o la URL es inválida lanza
      `EncodingError`.
    """

    if request.has_empty_body(method.to_crud):
        body = EMPTY_JSON_BODY
    else:
        try:
            body = request.model_dump_json(by_alias=True).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"Cannot encode {type(request).__name__}: {exc}") from exc

    return new_request(
        method,
        make_url(endpoint, request, method),
        content=body,
        headers={"Content-Type": JSON_CONTENT_TYPE},
    )


def build_multipart_body(data: bytes, boundary: str) -> bytes:
    """Cuerpo multipart con una única parte `file` (filename `profile`)."""

    head = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="file"; filename="profile"\r\n'
        "Content-Type: application/octet-stream\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--".encode("utf-8")
    return head + data + tail


class HttpBackendService:
    """Implementación HTTP de `core.interfaces.backend.BackendService`."""

    def __init__(
        self,
        endpoint: str,
        user_auth: UserAuth,
        login_signal: LoginSignal,
        *,
        settings: AppSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._user_auth = user_auth
        self._login_signal = login_signal
        self._settings = settings or AppSettings()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def create(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        return await self._perform_json(request, HttpMethod.POST, response_type)

    async def read(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        try:
            http_request = new_request(HttpMethod.GET, make_url(self._endpoint, request, HttpMethod.GET))
        except EncodingError as exc:
            logger.warning("Request not sent: %s", exc)
            return BackendResult.failure()

        return await self.perform(
            http_request,
            request_login=request.can_request_login(CrudType.READ),
            response_type=response_type,
        )

    async def update(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        return await self._perform_json(request, HttpMethod.PUT, response_type)

    async def delete(self, request: BackendRequest, response_type: type[Res]) -> BackendResult[Res]:
        return await self._perform_json(request, HttpMethod.DELETE, response_type)

    async def upload_profile_picture(self, image_data: bytes) -> BackendResult[MProfilePicture]:
        boundary = str(uuid.uuid4())
        try:
            http_request = new_request(
                HttpMethod.POST,
                join_endpoint(self._endpoint, UPLOAD_RESOURCE),
                content=build_multipart_body(image_data, boundary),
                headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
            )
        except EncodingError as exc:
            logger.warning("Upload not sent: %s", exc)
            return BackendResult.failure()

        return await self.perform(http_request, request_login=True, response_type=MProfilePicture)

    async def _perform_json(
        self,
        request: BackendRequest,
        method: HttpMethod,
        response_type: type[Res],
    ) -> BackendResult[Res]:
        try:
            http_request = make_json_request(self._endpoint, request, method)
        except EncodingError as exc:
            logger.warning("Request not sent: %s", exc)
            return BackendResult.failure()

        return await self.perform(
            http_request,
            request_login=request.can_request_login(method.to_crud),
            response_type=response_type,
        )

    async def perform(
        self,
        request: httpx.Request,
        *,
        request_login: bool,
        response_type: type[Res],
    ) -> BackendResult[Res]:
        """Despacha `request` y decodifica la respuesta en `response_type`."""

        logger.debug("Requesting: %s %s", request.method, request.url)
        self._authorize(request)

        try:
            response = await self._send(request)
            value = self._decode(response, response_type)
        except UnauthorizedError as exc:
            logger.warning("%s", exc)
            if request_login:
                self._login_signal.emit("unauthorized")
            return BackendResult.failure()
        except TransportError as exc:
            logger.warning("Transport failure for %s %s: %s", request.method, request.url, exc)
            return BackendResult.failure()
        except DecodingError as exc:
            logger.debug("Decoding failure for %s %s: %s", request.method, request.url, exc)
            return BackendResult.failure()

        return BackendResult.ok(value)

    def _authorize(self, request: httpx.Request) -> None:
        username = self._user_auth.username
        if not self._user_auth.live_auth and username:
            request.headers[AV_USER_HEADER] = username

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            async with build_async_client(self._settings, transport=self._transport) as client:
                for name, value in client.headers.items():
                    request.headers.setdefault(name, value)
                request.extensions.setdefault("timeout", client.timeout.as_dict())
                return await client.send(request)
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

    @staticmethod
    def _decode(response: httpx.Response, response_type: type[Res]) -> Res:
        if response.status_code == 401:
            # El cuerpo se descarta aunque sea JSON válido.
            raise UnauthorizedError(f"{response.request.method} {response.request.url} -> 401")

        if not response.content:
            raise DecodingError(f"Empty body (HTTP {response.status_code})")
        try:
            return response_type.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodingError(
                f"Body is not a valid {response_type.__name__} (HTTP {response.status_code})"
            ) from exc
