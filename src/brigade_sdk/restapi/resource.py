"""Generic CRUD client for a single REST collection."""

from typing import Generic, TypeVar

import structlog

from ..meta import Kind, ListEnvelope, ListOptions, TypedModel, WireModel
from .transport import (
    RequestBuilder,
    TransportClient,
    decode_response,
    ensure_success,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=WireModel)
R = TypeVar("R", bound=WireModel)


class ResourceClient(Generic[T]):
    """Typed get/create/update/delete/list operations over one collection.

    Binds a shared :class:`TransportClient` to a collection path such as
    ``"projects"`` and a payload model. Every operation issues exactly one
    request through the transport and decodes the response into the model.

    Payloads sent by :meth:`create` and :meth:`update` first go through
    :meth:`prepare`, which works on a deep copy: the caller's object is never
    modified.
    """

    def __init__(
        self,
        transport: TransportClient,
        collection: str,
        model: type[T],
        kind: Kind | None = None,
    ):
        """Initialize the resource client.

        Args:
            transport: Transport shared with other resource clients.
            collection: Collection path segment (e.g., "projects").
            model: Wire model of the collection's items.
            kind: Type tag stamped onto outbound payloads, if the model
                carries one.

        Raises:
            ValueError: If collection is empty.
        """
        if not collection:
            msg = "collection cannot be empty"
            raise ValueError(msg)
        self.transport = transport
        self.collection = collection
        self.model = model
        self.kind = kind
        self.list_model = ListEnvelope[model]  # type: ignore[valid-type]

    def url(self, *segments: str) -> str:
        """Build the URL of the collection, or of a path below it."""
        return self.transport.url(self.collection, *segments)

    def item_url(self, resource_id: str, *segments: str) -> str:
        if not resource_id:
            msg = "resource id cannot be empty"
            raise ValueError(msg)
        return self.url(resource_id, *segments)

    def prepare(self, obj: T) -> T:
        """Return the copy of ``obj`` that is actually sent on create/update.

        The copy carries the collection's type tag, overriding whatever the
        caller set. Subclasses extend this to clear server-managed fields.
        """
        if self.kind is not None and isinstance(obj, TypedModel):
            return obj.stamped(self.kind)  # type: ignore[return-value]
        return obj.model_copy(deep=True)

    async def submit(
        self,
        method: str,
        url: str,
        obj: T,
        response_model: type[R],
    ) -> R:
        """Send a prepared copy of ``obj`` as the JSON body of a request."""
        payload = self.prepare(obj)
        response = (
            await self.transport.build_request(method, url).json(payload).send()
        )
        return decode_response(response, response_model)

    async def get(self, resource_id: str) -> T:
        """Fetch a single resource by id.

        Raises:
            NotFoundError: If no resource has this id.
            DecodeError: If the body does not match the model.
        """
        response = await self.transport.build_request(
            "GET",
            self.item_url(resource_id),
        ).send()
        return decode_response(response, self.model)

    async def create(self, obj: T) -> T:
        """Create a resource and return it as stored by the server.

        Server-assigned fields (id, creation time) come from the response,
        never from ``obj``.
        """
        created = await self.submit("POST", self.url(), obj, self.model)
        logger.debug("Created resource", collection=self.collection)
        return created

    async def update(self, resource_id: str, obj: T) -> T:
        """Replace the resource with the given id and return the stored result."""
        updated = await self.submit(
            "PUT",
            self.item_url(resource_id),
            obj,
            self.model,
        )
        logger.debug(
            "Updated resource",
            collection=self.collection,
            resource_id=resource_id,
        )
        return updated

    async def delete(self, resource_id: str) -> None:
        """Delete a resource. The response body is discarded unread."""
        response = await self.transport.build_request(
            "DELETE",
            self.item_url(resource_id),
        ).send()
        ensure_success(response)
        logger.debug(
            "Deleted resource",
            collection=self.collection,
            resource_id=resource_id,
        )

    def list_request(self, options: ListOptions | None = None) -> RequestBuilder:
        """Return the unsent list request for callers that add filter parameters."""
        return self.transport.build_request("GET", self.url(), options)

    async def list(self, options: ListOptions | None = None) -> ListEnvelope[T]:
        """Fetch one page of the collection.

        Pages are never chained automatically: pass the returned
        ``metadata.continue_`` back in ``options`` to get the next one.
        """
        response = await self.list_request(options).send()
        return decode_response(response, self.list_model)
