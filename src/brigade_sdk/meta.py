"""Object metadata, type tags and list envelopes shared by all resources.

Every payload exchanged with the Brigade API is a :class:`WireModel`: a
Pydantic model whose fields are snake_case in Python and camelCase on the
wire, and whose unset optional fields are left out of the JSON document
rather than sent as ``null``.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

M = TypeVar("M", bound="TypedModel")
T = TypeVar("T", bound="WireModel")


class WireModel(BaseModel):
    """Base model for everything sent to or received from the API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-compatible dict sent as a request body."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Return the JSON document for this payload."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class APIVersion(str, Enum):
    """API versions understood by the client."""

    V2 = "brigade.sh/v2"


class Kind(str, Enum):
    """Resource kinds carried in the ``kind`` discriminator."""

    TOKEN = "Token"
    PROJECT = "Project"
    EVENT = "Event"


class TypeMeta(WireModel):
    """The ``kind``/``apiVersion`` pair identifying a resource type."""

    kind: Kind
    api_version: APIVersion = APIVersion.V2


class TypedModel(WireModel):
    """A resource whose type tag is flattened into its own JSON object."""

    kind: Kind | None = None
    api_version: APIVersion | None = None

    @property
    def type_meta(self) -> TypeMeta | None:
        if self.kind is None or self.api_version is None:
            return None
        return TypeMeta(kind=self.kind, api_version=self.api_version)

    def stamped(self: M, kind: Kind) -> M:
        """Return a deep copy carrying the given kind and the current API version.

        Any type tag already present on the object is overridden. The
        original object is left untouched.
        """
        return self.model_copy(
            update={"kind": kind, "api_version": APIVersion.V2},
            deep=True,
        )


class ObjectMeta(WireModel):
    """Identity and server-managed bookkeeping for a resource."""

    id: str
    created: datetime | None = None


class ListOptions(WireModel):
    """Pagination controls for list operations.

    ``continue_`` is the continuation token taken from the metadata of the
    previous page; ``limit`` caps the number of items in the returned page.
    """

    continue_: str | None = Field(default=None, alias="continue")
    limit: int | None = None

    def query_params(self) -> list[tuple[str, str]]:
        """Translate the options into query parameters, skipping unset ones."""
        params: list[tuple[str, str]] = []
        if self.continue_ is not None:
            params.append(("continue", self.continue_))
        if self.limit is not None:
            params.append(("limit", str(self.limit)))
        return params


class ListMeta(WireModel):
    """Paging metadata returned with every list response."""

    continue_: str | None = Field(default=None, alias="continue")
    remaining_item_count: int | None = None


class ListEnvelope(WireModel, Generic[T]):
    """One page of a listing.

    Items keep the order the server returned them in. Pass
    ``metadata.continue_`` back as ``ListOptions.continue_`` to fetch the
    next page.
    """

    metadata: ListMeta = Field(default_factory=ListMeta)
    items: list[T] | None = None

    @property
    def has_more(self) -> bool:
        """Check if the server reported another page."""
        return bool(self.metadata.continue_)

    def next_options(self, limit: int | None = None) -> ListOptions | None:
        """Build the options for the next page, or None on the last page."""
        if not self.has_more:
            return None
        return ListOptions(continue_=self.metadata.continue_, limit=limit)
