"""Brigade SDK.

Typed asynchronous client for the Brigade v2 REST API: projects, events
and the root session bootstrap, built on a shared httpx transport.
"""

from .authn import SessionsClient, Token
from .events import Event, EventsClient, EventsSelector
from .meta import ListEnvelope, ListOptions
from .projects import Project, ProjectsClient
from .restapi import BrigadeError, ClientConfig, TransportClient

__version__ = "0.1.0"
__all__ = [
    "BrigadeError",
    "ClientConfig",
    "Event",
    "EventsClient",
    "EventsSelector",
    "ListEnvelope",
    "ListOptions",
    "Project",
    "ProjectsClient",
    "SessionsClient",
    "Token",
    "TransportClient",
]
