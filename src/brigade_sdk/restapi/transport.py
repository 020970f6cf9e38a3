"""Brigade REST API transport.

Provides the HTTP client that owns the connection, the TLS policy and the
bearer credential, the request builder every resource client routes
through, and the shared status and body handling for responses.
"""

import time
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import pydantic
import structlog

from ..meta import ListOptions, WireModel
from .errors import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    NotFoundError,
    TransportError,
)

logger = structlog.get_logger(__name__)

# All resources live under this path prefix.
API_VERSION_PATH = "v2"

T = TypeVar("T", bound=WireModel)


@dataclass(frozen=True)
class ClientConfig:
    """TLS policy for a transport client.

    Attributes:
        allow_insecure_tls: Skip certificate verification. Only meant for
            local development servers with self-signed certificates.
    """

    allow_insecure_tls: bool = False


def _query_value(value: str | int | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RequestBuilder:
    """A single request being assembled before it is sent.

    Builders are created by :meth:`TransportClient.build_request` with the
    bearer credential and pagination parameters already applied. Callers
    layer query parameters, a JSON body or an authentication override on
    top, then call :meth:`send`. Every mutator returns the builder so calls
    can be chained.
    """

    def __init__(self, client: httpx.AsyncClient, method: str, url: str):
        self._client = client
        self.method = method.upper()
        self.url = url
        self.params: list[tuple[str, str]] = []
        self.headers: dict[str, str] = {}
        self.body: dict[str, Any] | None = None
        self._auth: httpx.Auth | None = None

    def query(self, name: str, value: str | int | bool) -> "RequestBuilder":
        """Append a query parameter. Repeated names are kept in order."""
        self.params.append((name, _query_value(value)))
        return self

    def header(self, name: str, value: str) -> "RequestBuilder":
        self.headers[name] = value
        return self

    def bearer_auth(self, token: str) -> "RequestBuilder":
        """Authenticate with a bearer token, replacing any other credential."""
        self._auth = None
        self.headers["Authorization"] = f"Bearer {token}"
        return self

    def basic_auth(self, username: str, password: str) -> "RequestBuilder":
        """Authenticate with HTTP Basic credentials, replacing any bearer token."""
        self.headers.pop("Authorization", None)
        self._auth = httpx.BasicAuth(username, password)
        return self

    def json(self, body: WireModel | dict[str, Any]) -> "RequestBuilder":
        """Attach a JSON body. Models are encoded in their wire format."""
        self.body = body.to_wire() if isinstance(body, WireModel) else body
        return self

    def build(self) -> httpx.Request:
        """Build the request without sending it.

        Basic credentials are applied by httpx at send time, so they do not
        appear on the returned request.
        """
        return self._client.build_request(
            self.method,
            self.url,
            params=self.params or None,
            headers=self.headers,
            json=self.body,
        )

    async def send(self) -> httpx.Response:
        """Send the request and wait for the response.

        Exactly one HTTP request is issued; nothing is retried. The status
        code is not checked here.

        Returns:
            The raw httpx response.

        Raises:
            TransportError: If the request URL is invalid or the request
                fails at the network, TLS or timeout level.
        """
        start_time = time.time()
        try:
            logger.debug(
                "Making API request",
                method=self.method,
                url=self.url,
                params=self.params,
            )
            request = self.build()
            response = await self._client.send(request, auth=self._auth)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            duration = time.time() - start_time
            logger.exception(
                "API request failed",
                method=self.method,
                url=self.url,
                duration_seconds=round(duration, 3),
            )
            msg = f"{self.method} {self.url} failed: {exc}"
            raise TransportError(msg) from exc

        duration = time.time() - start_time
        logger.debug(
            "API request completed",
            method=self.method,
            url=self.url,
            status=response.status_code,
            duration_seconds=round(duration, 3),
        )
        return response


class TransportClient:
    """HTTP transport for the Brigade REST API.

    Owns one ``httpx.AsyncClient`` configured with the TLS policy and,
    optionally, the bearer token sent with every request. The token is fixed
    for the lifetime of the client; to switch credentials, build a new
    client. Holding no other mutable state, a transport can be shared by any
    number of resource clients and concurrent calls.

    Can be used as an async context manager for automatic cleanup.
    """

    def __init__(
        self,
        base_address: str,
        config: ClientConfig | None = None,
        token: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the transport client.

        Args:
            base_address: Base URL of the API server (e.g., "https://localhost:8080").
            config: TLS policy (default: certificates are verified).
            token: Bearer token attached to every request, if any.
            transport: Optional httpx transport to send requests through
                instead of the network.

        Raises:
            ConfigurationError: If base_address is empty or not a valid URL, or
                the HTTP client cannot be built from the TLS policy.
        """
        if not base_address:
            msg = "base_address cannot be empty"
            raise ConfigurationError(msg)
        try:
            httpx.URL(base_address)
        except httpx.InvalidURL as exc:
            msg = f"Invalid base_address {base_address!r}: {exc}"
            raise ConfigurationError(msg) from exc

        self.base_address = base_address.rstrip("/")
        self.config = config or ClientConfig()
        self._token = token

        try:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                verify=not self.config.allow_insecure_tls,
                transport=transport,
            )
        except (OSError, ValueError, TypeError) as exc:
            msg = f"Cannot build HTTP client: {exc}"
            raise ConfigurationError(msg) from exc

        if self.config.allow_insecure_tls:
            logger.warning(
                "TLS certificate verification disabled",
                base_address=self.base_address,
            )

    @property
    def token(self) -> str | None:
        """The bearer token sent with every request, if any."""
        return self._token

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def __aenter__(self) -> "TransportClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager and release the HTTP client."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if open."""
        if not self._client.is_closed:
            await self._client.aclose()

    def url(self, *segments: str) -> str:
        """Build a versioned API URL from path segments.

        Each segment is percent-encoded on its own, so an id containing a
        slash cannot escape its path position.
        """
        path = "/".join(quote(segment, safe="") for segment in segments)
        return f"{self.base_address}/{API_VERSION_PATH}/{path}"

    def build_request(
        self,
        method: str,
        url: str,
        options: ListOptions | None = None,
    ) -> RequestBuilder:
        """Start a request carrying this client's credential and paging options.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            url: Absolute request URL, usually from :meth:`url`.
            options: Pagination options added as ``continue`` and ``limit``
                query parameters when set.

        Returns:
            An unsent request builder.
        """
        builder = RequestBuilder(self._client, method, url)
        if self._token is not None:
            builder.bearer_auth(self._token)
        if options is not None:
            for name, value in options.query_params():
                builder.query(name, value)
        return builder


def error_from_response(response: httpx.Response) -> APIError:
    """Build the API error matching a non-2xx response.

    The message is taken from a structured error body when one can be
    decoded (``{"error": "..."}``, ``{"error": {"message": "..."}}``,
    ``{"message": "..."}`` or ``{"reason": "..."}``), otherwise from the
    reason phrase.
    """
    status = response.status_code
    message = response.reason_phrase or f"HTTP {status}"
    details: dict[str, Any] = {}

    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        details = data
        error_field = data.get("error")
        if isinstance(error_field, str):
            message = error_field
        elif isinstance(error_field, dict):
            if isinstance(error_field.get("message"), str):
                message = error_field["message"]
        elif isinstance(data.get("message"), str):
            message = data["message"]
        elif isinstance(data.get("reason"), str):
            message = data["reason"]

    error_cls: type[APIError] = APIError
    if status in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
        error_cls = AuthenticationError
    elif status == httpx.codes.NOT_FOUND:
        error_cls = NotFoundError

    logger.error(
        "API error response",
        status=status,
        url=str(response.request.url),
        error_message=message,
    )
    return error_cls(message, status=status, details=details)


def ensure_success(response: httpx.Response) -> None:
    """Raise the matching :class:`APIError` unless the status is 2xx.

    The body of a successful response is neither read as JSON nor
    validated, which lets callers discard empty 204 responses.
    """
    if not response.is_success:
        raise error_from_response(response)


def decode_response(response: httpx.Response, model: type[T]) -> T:
    """Check the status of a response and decode its body into ``model``.

    Args:
        response: Response returned by :meth:`RequestBuilder.send`.
        model: Wire model the body is expected to match.

    Returns:
        The validated model instance.

    Raises:
        APIError: If the status code is not 2xx.
        DecodeError: If the body is not JSON or does not match the model.
    """
    ensure_success(response)
    try:
        return model.model_validate_json(response.content)
    except pydantic.ValidationError as exc:
        logger.error(
            "Failed to decode API response",
            model=model.__name__,
            status=response.status_code,
            error_count=exc.error_count(),
        )
        msg = f"Response does not match {model.__name__}: {exc}"
        raise DecodeError(msg, body=response.text) from exc
