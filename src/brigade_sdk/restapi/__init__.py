"""Brigade REST API transport package.

Provides the generic machinery shared by every resource client: an HTTP
transport owning the connection, TLS policy and bearer credential, a
request builder, response decoding, and a typed CRUD client for a single
collection. Resource payloads and their specialised clients live in the
modules of the parent package.

Exports:
    ClientConfig: TLS policy for a transport.
    TransportClient: HTTP client with authentication and paging support.
    RequestBuilder: A request being assembled before it is sent.
    ResourceClient: Generic typed client for one REST collection.
    decode_response: Status check plus decoding into a wire model.
    ensure_success: Status check for responses whose body is discarded.
    errors: Module containing the error hierarchy.
"""

from . import errors
from .errors import (
    APIError,
    AuthenticationError,
    BrigadeError,
    ConfigurationError,
    DecodeError,
    NotFoundError,
    TransportError,
)
from .resource import ResourceClient
from .transport import (
    API_VERSION_PATH,
    ClientConfig,
    RequestBuilder,
    TransportClient,
    decode_response,
    ensure_success,
)

__all__ = [
    "API_VERSION_PATH",
    "APIError",
    "AuthenticationError",
    "BrigadeError",
    "ClientConfig",
    "ConfigurationError",
    "DecodeError",
    "NotFoundError",
    "RequestBuilder",
    "ResourceClient",
    "TransportClient",
    "TransportError",
    "decode_response",
    "ensure_success",
    "errors",
]
