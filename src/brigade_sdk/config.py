"""Configuration, logging setup and client wiring for applications.

Turns a JSON configuration file into a ready-to-use set of clients:
resolves the credential (explicit token, token file, or a root session
bootstrapped with the root password) and builds the projects and events
clients over one shared transport.
"""

import json
import logging
import os
import pathlib
from dataclasses import dataclass

import httpx
import pydantic
import structlog

from .authn import SessionsClient
from .events import EventsClient
from .projects import ProjectsClient
from .restapi import ClientConfig, ConfigurationError, TransportClient

CONFIG_ENV_VAR = "BRIGADE_SDK_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "brigade-sdk.json"
logger = structlog.get_logger(__name__)


class SdkConfig(pydantic.BaseModel):
    """Configuration for connecting to a Brigade API server."""

    address: str = pydantic.Field(description="Base URL of the Brigade API server")
    allow_insecure_tls: bool = pydantic.Field(
        False,
        description="Skip TLS certificate verification (development only)",
    )
    token: str | None = pydantic.Field(
        None,
        description="Bearer token for API requests",
        repr=False,
    )
    token_file: str | None = pydantic.Field(
        None,
        description="Path to file containing the bearer token",
    )
    root_password: str | None = pydantic.Field(
        None,
        description="Root password used to bootstrap a session token",
        repr=False,
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")
    log_to_stdlib: bool = pydantic.Field(
        False,
        description="Route log lines through the standard logging module",
    )

    @pydantic.field_validator("address")
    @classmethod
    def _address_not_empty(cls, value: str) -> str:
        if not value.strip():
            msg = "address cannot be empty"
            raise ValueError(msg)
        return value.strip()

    @property
    def client_config(self) -> ClientConfig:
        return ClientConfig(allow_insecure_tls=self.allow_insecure_tls)


def configure_logging(log_level_name: str, *, stdlib: bool = False) -> None:
    """Configure structlog for logfmt output.

    Meant to be called once by applications at startup, never at library
    import time: the SDK itself only ever asks structlog for loggers.

    Args:
        log_level_name: Minimum level, e.g. "DEBUG" or "INFO".
        stdlib: Hand rendered lines to the standard ``logging`` module under
            each module's logger name instead of printing them, so
            applications that already configure ``logging`` handlers
            receive SDK events through them.
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.EventRenamer("msg"),
        structlog.processors.format_exc_info,
        structlog.processors.LogfmtRenderer(
            key_order=("timestamp", "level", "msg"),
        ),
    ]
    if stdlib:
        logging.getLogger("brigade_sdk").setLevel(log_level)
        structlog.configure(
            processors=[structlog.stdlib.filter_by_level, *processors],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        return

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config(config_path: str | pathlib.Path) -> SdkConfig:
    """Load configuration from JSON file."""
    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    return SdkConfig(**data)


def read_token_file(token_file: str | pathlib.Path) -> str:
    """Read a bearer token from a file, stripping surrounding whitespace."""
    token_path = pathlib.Path(token_file)
    if not token_path.exists():
        msg = f"Token file not found: {token_file}"
        raise FileNotFoundError(msg)
    token = token_path.read_text().strip()
    if not token:
        msg = f"Token file is empty: {token_file}"
        raise ConfigurationError(msg)
    return token


async def resolve_token(
    config: SdkConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Find the bearer token to use for API requests.

    Sources are tried in order: the explicit token, the token file, then a
    root session created with the root password over a short-lived,
    unauthenticated transport.

    Args:
        config: Validated SDK configuration.
        transport: Optional httpx transport for the bootstrap request.

    Returns:
        The bearer token.

    Raises:
        ConfigurationError: If no credential source is configured.
        FileNotFoundError: If the configured token file does not exist.
    """
    if config.token:
        return config.token
    if config.token_file:
        logger.info("Reading token from file", token_file=config.token_file)
        return read_token_file(config.token_file)
    if config.root_password:
        async with TransportClient(
            config.address,
            config.client_config,
            transport=transport,
        ) as bootstrap:
            token = await SessionsClient(bootstrap).create_root_session(
                config.root_password,
            )
        return token.value

    msg = "No credential configured: set token, token_file or root_password"
    raise ConfigurationError(msg)


@dataclass
class PlatformClients:
    """Resource clients sharing one authenticated transport.

    Closing the bundle closes the transport, so every client in it stops
    working at the same time.
    """

    transport: TransportClient
    projects: ProjectsClient
    events: EventsClient

    async def __aenter__(self) -> "PlatformClients":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()


async def connect(
    config: SdkConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PlatformClients:
    """Construct authenticated clients from validated config."""
    token = await resolve_token(config, transport=transport)
    rest = TransportClient(
        config.address,
        config.client_config,
        token,
        transport=transport,
    )
    logger.info("Created shared REST transport", base_address=rest.base_address)
    return PlatformClients(
        transport=rest,
        projects=ProjectsClient(rest),
        events=EventsClient(rest),
    )


async def connect_from_file(config_path: str | None = None) -> PlatformClients:
    """Construct clients using a config path or environment default."""
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    config = load_config(resolved_path)
    configure_logging(config.log_level, stdlib=config.log_to_stdlib)
    return await connect(config)
