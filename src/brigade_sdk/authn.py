"""Session bootstrap.

Before any bearer token exists, the root user exchanges its password for a
session token. The token's value is then passed to a new
:class:`~brigade_sdk.restapi.TransportClient` used for everything else.
"""

import structlog
from pydantic import Field

from .meta import APIVersion, Kind, WireModel
from .restapi import TransportClient, decode_response

logger = structlog.get_logger(__name__)

ROOT_USERNAME = "root"


class Token(WireModel):
    """A session token issued by the server."""

    kind: Kind = Kind.TOKEN
    api_version: APIVersion = APIVersion.V2
    value: str = Field(repr=False)


class SessionsClient:
    """Client for the ``sessions`` endpoint."""

    def __init__(self, transport: TransportClient):
        self.transport = transport

    async def create_root_session(self, password: str) -> Token:
        """Exchange the root password for a session token.

        Authenticates with HTTP Basic credentials (``root`` and the
        password) instead of a bearer token, even if the transport holds
        one. Nothing is retried or cached.

        Args:
            password: The root user's password.

        Returns:
            The issued token.

        Raises:
            ValueError: If password is empty.
            AuthenticationError: If the server rejects the password.
        """
        if not password:
            msg = "password cannot be empty"
            raise ValueError(msg)

        response = await (
            self.transport.build_request("POST", self.transport.url("sessions"))
            .query("root", True)
            .basic_auth(ROOT_USERNAME, password)
            .send()
        )
        token = decode_response(response, Token)
        logger.info("Created root session", base_address=self.transport.base_address)
        return token
