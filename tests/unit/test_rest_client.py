"""Tests for FirestoreRESTClient against a mocked HTTP transport."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from firebase_rest.domain.entities.document import Document
from firebase_rest.domain.exceptions import InvalidArgumentException
from firebase_rest.domain.value_objects.core import Database
from firebase_rest.infrastructure.exceptions import (
    DocumentExistsError,
    FirestoreInternalServerErrorException,
    FirestoreUndefinedException,
)
from firebase_rest.infrastructure.firebase._rest_client import FirestoreRESTClient
from firebase_rest.infrastructure.firebase.transforms import Write, increment
from tests.models import USERS, Address, Post, User, document_json

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler) -> FirestoreRESTClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirestoreRESTClient("demo", http_client=http)


def _body(request: httpx.Request) -> Any:
    return json.loads(request.content)


USER_FIELDS = {"displayName": {"stringValue": "Ada"}, "age": {"integerValue": "36"}}


@pytest.mark.asyncio
async def test_get_document_parses_model() -> None:
    """get_document GETs the document name and parses the response."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=document_json(f"{USERS}/u1", USER_FIELDS))

    client = _client(handler)
    document = await client.get_document(client.collection("users").document("u1"), User)

    assert document is not None
    assert document.model is not None
    assert document.model.display_name == "Ada"
    assert seen[0].method == "GET"
    assert seen[0].url.path.startswith("/v1/projects/demo/databases/")
    assert seen[0].url.path.endswith("/documents/users/u1")
    assert "authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_get_missing_document_returns_none() -> None:
    """A 404 on GET is a missing document, not an error."""
    client = _client(lambda request: httpx.Response(404, json={"error": {"code": 404}}))
    assert await client.get_document(client.collection("users").document("u1"), User) is None


@pytest.mark.asyncio
async def test_create_document_posts_fields_with_document_id() -> None:
    """create_document POSTs to the collection with documentId and refreshes the document."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=document_json(f"{USERS}/u1", _body(request)["fields"]))

    client = _client(handler)
    document = await client.create_document(client.collection("users"), User(display_name="Ada"), "u1")

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path.endswith("/documents/users")
    assert request.url.params["documentId"] == "u1"
    assert "name" not in _body(request)
    assert _body(request)["fields"]["displayName"] == {"stringValue": "Ada"}
    assert document is not None
    assert document.exists
    assert document.reference is not None
    assert document.reference.id == "u1"


@pytest.mark.asyncio
async def test_create_existing_document_raises() -> None:
    """409 maps to DocumentExistsError."""
    client = _client(lambda request: httpx.Response(409, text="ALREADY_EXISTS"))
    with pytest.raises(DocumentExistsError) as exc_info:
        await client.create_document(client.collection("users"), User(), "u1")
    assert exc_info.value.error_code == "FIRESTORE_ALREADY_EXISTS"
    assert exc_info.value.details["response"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_patch_document_sends_model() -> None:
    """patch_document PATCHes the document name with its fields."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=document_json(f"{USERS}/u1", {"city": {"stringValue": "K"}}))

    client = _client(handler)
    reference = client.collection("users").document("u1")
    local = Document(reference, Address(city="K"))
    patched = await client.patch_document(local)

    assert seen[0].method == "PATCH"
    assert _body(seen[0])["name"] == reference.name
    assert patched is local
    assert local.exists
    assert dict(local.fields) == {"city": "K"}


@pytest.mark.asyncio
async def test_delete_missing_document_is_idempotent() -> None:
    """A 404 on DELETE is ignored."""
    client = _client(lambda request: httpx.Response(404))
    await client.delete_document(client.collection("users").document("u1"))


@pytest.mark.asyncio
async def test_server_errors_are_typed() -> None:
    """500 and unmapped statuses raise their typed exceptions."""
    reference = Database("demo").collection("users").document("u1")

    client = _client(lambda request: httpx.Response(500))
    with pytest.raises(FirestoreInternalServerErrorException):
        await client.get_document(reference)

    client = _client(lambda request: httpx.Response(418, text="teapot"))
    with pytest.raises(FirestoreUndefinedException) as exc_info:
        await client.get_document(reference)
    assert exc_info.value.status_code == 418


@pytest.mark.asyncio
async def test_batch_get_classifies_found_and_missing() -> None:
    """batchGet responses are split into found documents and missing references."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"found": document_json(f"{USERS}/u1", USER_FIELDS)},
                {"missing": f"{USERS}/u2"},
                {"found": {"name": f"{USERS}/u3", "fields": {}}},
            ],
        )

    client = _client(handler)
    users = client.collection("users")
    result = await client.batch_get_documents(
        [users.document("u1"), users.document("u2"), users.document("u3")], User
    )

    assert seen[0].url.path.endswith("/documents:batchGet")
    assert _body(seen[0])["documents"] == [f"{USERS}/u1", f"{USERS}/u2", f"{USERS}/u3"]
    assert [d.reference.id for d in result.found if d.reference is not None] == ["u1"]
    assert [r.id for r in result.missing] == ["u2", "u3"]


@pytest.mark.asyncio
async def test_batch_get_without_references_skips_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = _client(handler)
    result = await client.batch_get_documents([])
    assert result.found == []
    assert result.missing == []


@pytest.mark.asyncio
async def test_commit_posts_writes() -> None:
    """commit POSTs the write batch to documents:commit."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"writeResults": [{}], "commitTime": "2024-01-01T00:00:00Z"})

    client = _client(handler)
    reference = client.collection("posts").document("p1")
    write = Write().transform(reference, increment("stats.view_count", 1, property_path=True), model_type=Post)

    response = await client.commit(write)

    assert seen[0].url.path.endswith("/documents:commit")
    assert _body(seen[0])["writes"][0]["transform"]["fieldTransforms"][0]["fieldPath"] == "stats.viewCount"
    assert response["commitTime"] == "2024-01-01T00:00:00Z"


@pytest.mark.asyncio
async def test_reference_from_other_database_rejected() -> None:
    client = _client(lambda request: httpx.Response(200, json={}))
    other = Database("other").collection("users").document("u1")
    with pytest.raises(InvalidArgumentException, match="another database"):
        await client.get_document(other)


@pytest.mark.asyncio
async def test_injected_http_client_left_open() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    client = FirestoreRESTClient("demo", http_client=http)
    await client.aclose()
    assert not http.is_closed
    await http.aclose()
