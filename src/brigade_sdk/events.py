"""Event payloads and the events client.

Events are submitted by gateways (or any client) and fanned out by the
server to every project subscribed to their source and type. Besides the
usual collection operations, the events client can cancel a single event
and cancel or delete many events at once by selector.
"""

import structlog
from pydantic import Field

from .meta import Kind, ListEnvelope, ListOptions, ObjectMeta, TypedModel, WireModel
from .restapi import (
    RequestBuilder,
    ResourceClient,
    TransportClient,
    decode_response,
    ensure_success,
)
from .worker import Worker, WorkerPhase, phases_query_param

logger = structlog.get_logger(__name__)


class EventSubscription(WireModel):
    """Source and types of events a project wants to receive."""

    source: str
    types: list[str]
    labels: dict[str, str] | None = None


class GitDetails(WireModel):
    """The revision an event refers to, for events coming from a git host."""

    clone_url: str | None = Field(default=None, alias="cloneURL")
    commit: str | None = None
    ref: str | None = None


class Event(TypedModel):
    metadata: ObjectMeta | None = None
    project_id: str | None = Field(default=None, alias="projectID")
    source: str
    type: str
    labels: dict[str, str] | None = None
    short_title: str | None = None
    long_title: str | None = None
    git: GitDetails | None = None
    payload: str | None = None
    worker: Worker | None = None


class EventsSelector(WireModel):
    """Filters for listing, cancelling or deleting events.

    Unset filters are not sent. ``worker_phases`` is encoded as a single
    comma-separated ``workerPhases`` parameter.
    """

    project_id: str | None = Field(default=None, alias="projectID")
    worker_phases: list[WorkerPhase] | None = None

    def query_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self.project_id:
            params.append(("projectID", self.project_id))
        if self.worker_phases:
            params.append(("workerPhases", phases_query_param(self.worker_phases)))
        return params

    def apply(self, builder: RequestBuilder) -> RequestBuilder:
        for name, value in self.query_params():
            builder.query(name, value)
        return builder


class CancelManyEventsResult(WireModel):
    count: int


class DeleteManyEventsResult(WireModel):
    count: int


class EventsClient(ResourceClient[Event]):
    """Client for the ``events`` collection."""

    def __init__(self, transport: TransportClient):
        super().__init__(transport, "events", Event, Kind.EVENT)

    async def create(self, obj: Event) -> ListEnvelope[Event]:  # type: ignore[override]
        """Submit an event.

        The server answers with the events it created, one per project
        subscribed to the event, so the result is a list rather than the
        submitted event.
        """
        created = await self.submit("POST", self.url(), obj, self.list_model)
        logger.debug(
            "Submitted event",
            source=obj.source,
            type=obj.type,
            created_count=len(created.items or []),
        )
        return created

    async def cancel(self, event_id: str) -> None:
        """Cancel a single event. The response body is discarded unread."""
        response = await self.transport.build_request(
            "PUT",
            self.item_url(event_id, "cancellation"),
        ).send()
        ensure_success(response)
        logger.debug("Cancelled event", event_id=event_id)

    async def cancel_many(self, selector: EventsSelector) -> CancelManyEventsResult:
        """Cancel every event matching the selector."""
        builder = self.transport.build_request("POST", self.url("cancellations"))
        response = await selector.apply(builder).send()
        return decode_response(response, CancelManyEventsResult)

    async def delete_many(self, selector: EventsSelector) -> DeleteManyEventsResult:
        """Delete every event matching the selector."""
        builder = self.transport.build_request("POST", self.url("deletions"))
        response = await selector.apply(builder).send()
        return decode_response(response, DeleteManyEventsResult)

    async def list(
        self,
        options: ListOptions | None = None,
        selector: EventsSelector | None = None,
    ) -> ListEnvelope[Event]:
        """Fetch one page of events, optionally filtered by a selector."""
        builder = self.list_request(options)
        if selector is not None:
            selector.apply(builder)
        response = await builder.send()
        return decode_response(response, self.list_model)
