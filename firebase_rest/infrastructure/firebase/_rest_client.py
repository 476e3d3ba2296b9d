"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1. Request
and response bodies go through the parser and writer in this package; the
client itself only builds URLs, attaches tokens and maps HTTP errors.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx

from firebase_rest.domain.entities.document import Document
from firebase_rest.domain.exceptions import InvalidArgumentException
from firebase_rest.domain.value_objects.core import (
    DEFAULT_DATABASE_ID,
    CollectionReference,
    Database,
    DocumentReference,
)
from firebase_rest.infrastructure.exceptions import exception_for_status
from firebase_rest.infrastructure.firebase.options import DEFAULT_OPTIONS, SerializerOptions
from firebase_rest.infrastructure.firebase.parser import parse_document
from firebase_rest.infrastructure.firebase.transforms import Write
from firebase_rest.infrastructure.firebase.writer import write_document

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: dict[str, str] | None = None,
) -> Any:
    """Perform an HTTP request to the Firestore REST API.

    GET and DELETE of a missing document (404) return None; any other
    non-success status raises the matching FirestoreRequestException.
    """
    if method not in ("GET", "POST", "PATCH", "DELETE"):
        raise ValueError(f"Unsupported method: {method!r}")
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    resp = await client.request(method, url, headers=headers, json=body, params=params)
    if resp.status_code == 404 and method in ("GET", "DELETE"):
        return None
    if not resp.is_success:
        logger.debug("Firestore %s %s failed with %s", method, url, resp.status_code)
        raise exception_for_status(url, resp.status_code, resp.text)
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


@dataclass
class BatchGetResult(Generic[T]):
    """Outcome of a batchGet: resolved documents and references that do not exist."""

    found: list[Document[T]] = field(default_factory=list)
    missing: list[DocumentReference] = field(default_factory=list)


class FirestoreRESTClient:
    """Lightweight Firestore client using the REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials=None,
        *,
        database_id: str = DEFAULT_DATABASE_ID,
        base_url: str = _BASE,
        options: SerializerOptions | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._credentials = credentials
        self.database = Database(project_id=project_id, database_id=database_id)
        self.options = options or DEFAULT_OPTIONS
        self._base = base_url.rstrip("/")
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking.

        Without credentials (e.g. against the emulator) no token is sent.
        """
        if self._credentials is None:
            return None
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return self.database.collection(collection_id)

    def _url(self, name: str) -> str:
        return f"{self._base}/{name}"

    def _check_database(self, reference: DocumentReference | CollectionReference) -> None:
        if reference.database != self.database:
            raise InvalidArgumentException(
                f"Reference {reference.name!r} belongs to another database", "reference"
            )

    async def get_document(
        self,
        reference: DocumentReference,
        model_type: type[T] | None = None,
        *,
        document: Document[T] | None = None,
    ) -> Document[T] | None:
        """Fetch one document; None when it does not exist."""
        self._check_database(reference)
        out = await _request_async(
            self._http, self._url(reference.name), access_token=await self.get_token()
        )
        if not out:
            return None
        return parse_document(
            out,
            model_type=model_type,
            document=document,
            reference=reference,
            options=self.options,
        )

    async def batch_get_documents(
        self,
        references: Iterable[DocumentReference],
        model_type: type[T] | None = None,
    ) -> BatchGetResult[T]:
        """Fetch several documents in one call, classifying each as found or missing."""
        by_name: dict[str, DocumentReference] = {}
        for reference in references:
            self._check_database(reference)
            by_name[reference.name] = reference
        result: BatchGetResult[T] = BatchGetResult()
        if not by_name:
            return result
        url = self._url(f"{self.database.documents_path}:batchGet")
        out = await _request_async(
            self._http,
            url,
            method="POST",
            body={"documents": list(by_name)},
            access_token=await self.get_token(),
        )
        items = out if isinstance(out, list) else ([out] if out else [])
        for item in items:
            if "found" in item:
                found = item["found"]
                reference = by_name.get(found.get("name", ""))
                document = parse_document(
                    found, model_type=model_type, reference=reference, options=self.options
                )
                if document is not None:
                    result.found.append(document)
                elif reference is not None:
                    result.missing.append(reference)
            elif "missing" in item:
                name = item["missing"]
                result.missing.append(by_name.get(name) or DocumentReference.parse(name))
        return result

    async def create_document(
        self,
        collection: CollectionReference,
        model: Any,
        document_id: str | None = None,
        *,
        model_type: type[T] | None = None,
    ) -> Document[T] | None:
        """Create a document (raises DocumentExistsError if the ID is taken).

        Without document_id the server assigns one.
        """
        self._check_database(collection)
        document: Document[Any] = Document(None, model, model_type=model_type)
        body = write_document(document, self.options)
        params = {"documentId": document_id} if document_id is not None else None
        out = await _request_async(
            self._http,
            self._url(collection.name),
            method="POST",
            body=body,
            access_token=await self.get_token(),
            params=params,
        )
        return parse_document(out, document=document, options=self.options)

    async def patch_document(self, document: Document[T]) -> Document[T] | None:
        """Replace a document's fields with its model and refresh it from the response."""
        if document.reference is None:
            raise InvalidArgumentException("Document has no reference", "document")
        self._check_database(document.reference)
        body = write_document(document, self.options)
        out = await _request_async(
            self._http,
            self._url(document.reference.name),
            method="PATCH",
            body=body,
            access_token=await self.get_token(),
        )
        return parse_document(out, document=document, options=self.options)

    async def delete_document(self, reference: DocumentReference) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        self._check_database(reference)
        await _request_async(
            self._http,
            self._url(reference.name),
            method="DELETE",
            access_token=await self.get_token(),
        )

    async def commit(self, write: Write, transaction: str | None = None) -> dict[str, Any]:
        """Apply a batch of writes atomically; returns the raw commit response."""
        body = write.to_commit_body(self.options, transaction)
        url = self._url(f"{self.database.documents_path}:commit")
        return await _request_async(
            self._http,
            url,
            method="POST",
            body=body,
            access_token=await self.get_token(),
        )
