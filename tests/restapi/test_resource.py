"""Tests for the generic ResourceClient.

Uses a minimal typed model so the CRUD machinery is exercised on its own,
independently of the project and event payloads built on top of it.
"""

import pytest

from brigade_sdk.meta import Kind, ListEnvelope, ListOptions, ObjectMeta, TypedModel
from brigade_sdk.restapi import (
    DecodeError,
    NotFoundError,
    ResourceClient,
    TransportClient,
)


class Widget(TypedModel):
    metadata: ObjectMeta
    color: str | None = None


@pytest.fixture
def widgets(rest_client: TransportClient) -> ResourceClient[Widget]:
    """Resource client for a fictional widgets collection."""
    return ResourceClient(rest_client, "widgets", Widget, Kind.PROJECT)


def _widget_json(widget_id: str, color: str = "red") -> dict:
    return {
        "kind": "Project",
        "apiVersion": "brigade.sh/v2",
        "metadata": {"id": widget_id, "created": "2024-03-01T12:00:00Z"},
        "color": color,
    }


def test_empty_collection_rejected(rest_client: TransportClient):
    """A resource client must be bound to a collection path."""
    with pytest.raises(ValueError, match="collection"):
        ResourceClient(rest_client, "", Widget)


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_requests_item_url_and_decodes(widgets, handler):
    """get issues GET /v2/{collection}/{id} and decodes the body."""
    handler.respond(200, _widget_json("w1"))

    widget = await widgets.get("w1")

    assert handler.last.method == "GET"
    assert handler.last.url.path == "/v2/widgets/w1"
    assert handler.last.headers["Authorization"] == "Bearer test-token"
    assert widget.metadata.id == "w1"
    assert widget.color == "red"
    assert widget.metadata.created is not None


@pytest.mark.asyncio
async def test_get_empty_id_is_rejected_before_sending(widgets, handler):
    """An empty id never reaches the server."""
    with pytest.raises(ValueError, match="id"):
        await widgets.get("")
    assert handler.requests == []


@pytest.mark.asyncio
async def test_get_missing_resource_raises_instead_of_empty_model(widgets, handler):
    """A 404 error body is not decoded into a zero-valued model."""
    handler.respond(404, {"error": "not found"})
    with pytest.raises(NotFoundError):
        await widgets.get("missing-id")


@pytest.mark.asyncio
async def test_get_unexpected_body_raises_decode_error(widgets, handler):
    """A success body of the wrong shape is a decode failure."""
    handler.respond(200, {"something": "else"})
    with pytest.raises(DecodeError):
        await widgets.get("w1")


# ---------------------------------------------------------------------------
# create / update
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_posts_stamped_copy(widgets, handler):
    """create POSTs the payload with the collection's type tag."""
    handler.respond(201, _widget_json("w1"))
    widget = Widget(metadata=ObjectMeta(id="w1"), color="red")

    await widgets.create(widget)

    assert handler.last.method == "POST"
    assert handler.last.url.path == "/v2/widgets"
    body = handler.last_json()
    assert body["kind"] == "Project"
    assert body["apiVersion"] == "brigade.sh/v2"
    assert body["metadata"] == {"id": "w1"}


@pytest.mark.asyncio
async def test_create_does_not_mutate_caller_payload(widgets, handler):
    """The caller's object keeps its original (empty) type tag."""
    handler.respond(201, _widget_json("w1"))
    widget = Widget(metadata=ObjectMeta(id="w1"))
    before = widget.model_copy(deep=True)

    await widgets.create(widget)

    assert widget == before
    assert widget.kind is None
    assert widget.api_version is None


@pytest.mark.asyncio
async def test_create_returns_server_representation(widgets, handler):
    """Server-assigned fields come from the response, not the input."""
    handler.respond(201, _widget_json("w1", color="blue"))
    widget = Widget(metadata=ObjectMeta(id="w1"), color="red")

    created = await widgets.create(widget)

    assert created.color == "blue"
    assert created.metadata.created is not None
    assert created is not widget


@pytest.mark.asyncio
async def test_stamp_overrides_caller_supplied_kind(widgets, handler):
    """A wrong kind set by the caller is replaced before sending."""
    handler.respond(200, _widget_json("w1"))
    widget = Widget(metadata=ObjectMeta(id="w1"), kind=Kind.TOKEN)

    await widgets.update("w1", widget)

    assert handler.last_json()["kind"] == "Project"
    assert widget.kind == Kind.TOKEN


@pytest.mark.asyncio
async def test_update_puts_to_item_url(widgets, handler):
    """update issues PUT /v2/{collection}/{id} with a JSON body."""
    handler.respond(200, _widget_json("w1", color="green"))
    widget = Widget(metadata=ObjectMeta(id="w1"), color="green")

    updated = await widgets.update("w1", widget)

    assert handler.last.method == "PUT"
    assert handler.last.url.path == "/v2/widgets/w1"
    assert handler.last_json()["color"] == "green"
    assert updated.color == "green"


@pytest.mark.asyncio
async def test_update_then_get_round_trips(widgets, handler):
    """A value stored by update is returned unchanged by get."""
    widget = Widget(metadata=ObjectMeta(id="w1"), color="green")

    handler.respond(200, _widget_json("w1", color="green"))
    await widgets.update("w1", widget)
    handler.respond(200, handler.last_json())

    fetched = await widgets.get("w1")

    assert fetched.metadata == widget.metadata
    assert fetched.color == widget.color


def test_prepare_without_kind_still_copies(rest_client: TransportClient):
    """Collections without a type tag send an untouched deep copy."""
    client = ResourceClient(rest_client, "widgets", Widget)
    widget = Widget(metadata=ObjectMeta(id="w1"))

    prepared = client.prepare(widget)

    assert prepared == widget
    assert prepared is not widget
    assert prepared.metadata is not widget.metadata


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_accepts_empty_no_content(widgets, handler):
    """A 204 with no body succeeds without any decoding."""
    handler.respond(204)

    result = await widgets.delete("x")

    assert result is None
    assert handler.last.method == "DELETE"
    assert handler.last.url.path == "/v2/widgets/x"
    assert handler.last.content == b""


@pytest.mark.asyncio
async def test_delete_missing_resource_raises(widgets, handler):
    """Deleting an unknown id surfaces the API error."""
    handler.respond(404, {"error": "not found"})
    with pytest.raises(NotFoundError):
        await widgets.delete("x")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_without_options_sends_no_paging_params(widgets, handler):
    """list() sends neither continue nor limit."""
    handler.respond(200, {"metadata": {}, "items": []})

    await widgets.list()

    assert handler.last.url.path == "/v2/widgets"
    assert "continue" not in handler.last.url.params
    assert "limit" not in handler.last.url.params


@pytest.mark.asyncio
async def test_list_with_limit_sends_only_limit(widgets, handler):
    """list(limit=10) sends limit=10 and nothing else."""
    handler.respond(200, {"metadata": {}, "items": []})

    await widgets.list(ListOptions(limit=10))

    assert dict(handler.last.url.params) == {"limit": "10"}


@pytest.mark.asyncio
async def test_list_preserves_item_order_and_metadata(widgets, handler):
    """Items keep the server's order and paging metadata is decoded."""
    handler.respond(
        200,
        {
            "metadata": {"continue": "w3", "remainingItemCount": 7},
            "items": [_widget_json("w2"), _widget_json("w1")],
        },
    )

    page = await widgets.list(ListOptions(limit=2))

    assert isinstance(page, ListEnvelope)
    assert [w.metadata.id for w in page.items or []] == ["w2", "w1"]
    assert page.metadata.continue_ == "w3"
    assert page.metadata.remaining_item_count == 7
    assert page.has_more


@pytest.mark.asyncio
async def test_list_follows_continuation_token(widgets, handler):
    """The continuation token of one page requests the next one."""
    handler.respond(200, {"metadata": {"continue": "w3"}, "items": [_widget_json("w1")]})
    handler.respond(200, {"metadata": {}, "items": [_widget_json("w3")]})

    first = await widgets.list(ListOptions(limit=1))
    second = await widgets.list(first.next_options(limit=1))

    assert handler.last.url.params.get("continue") == "w3"
    assert handler.last.url.params.get("limit") == "1"
    assert not second.has_more
    assert second.next_options() is None


@pytest.mark.asyncio
async def test_list_fails_entirely_on_bad_item(widgets, handler):
    """One undecodable item fails the whole page."""
    handler.respond(200, {"metadata": {}, "items": [_widget_json("w1"), {"bad": 1}]})
    with pytest.raises(DecodeError):
        await widgets.list()


@pytest.mark.asyncio
async def test_list_without_items_key_decodes_to_none(widgets, handler):
    """An empty page may omit items entirely."""
    handler.respond(200, {"metadata": {}})

    page = await widgets.list()

    assert page.items is None
