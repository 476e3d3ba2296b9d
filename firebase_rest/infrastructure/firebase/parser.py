"""Parse Firestore REST ``Document`` JSON into Document entities.

A document JSON object looks like::

    {"name": "projects/p/databases/(default)/documents/users/u1",
     "fields": {"displayName": {"stringValue": "Ada"}},
     "createTime": "2024-01-01T00:00:00.000000Z",
     "updateTime": "2024-01-01T00:00:00.000000Z"}
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from firebase_rest.domain.entities.document import Document
from firebase_rest.domain.exceptions import (
    DocumentTypeMismatchException,
    InvalidArgumentException,
    ValueDecodeError,
)
from firebase_rest.domain.value_objects.core import DocumentReference
from firebase_rest.infrastructure.firebase._rest_encoding import (
    decode_mapping,
    decode_object,
    decode_value,
)
from firebase_rest.infrastructure.firebase._types import mapping_types, origin_of, unwrap
from firebase_rest.infrastructure.firebase.members import construct_model
from firebase_rest.infrastructure.firebase.options import DEFAULT_OPTIONS, SerializerOptions
from firebase_rest.shared.utils.datetime import parse_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _load(data: Any) -> Mapping[str, Any]:
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError as exc:
            raise InvalidArgumentException(f"Document is not valid JSON: {exc}", "data") from exc
    if not isinstance(data, Mapping):
        raise InvalidArgumentException("Document JSON must be an object", "data")
    return data


def parse_fields(
    fields: Mapping[str, Any],
    model_type: type[T] | None = None,
    *,
    model: T | None = None,
    options: SerializerOptions | None = None,
) -> tuple[T | None, dict[str, Any]]:
    """Decode a ``fields`` map into a model and a flat field table.

    Args:
        fields: Wire field name -> typed value.
        model_type: Target model type; None decodes schema-less.
        model: Existing instance to update in place.
        options: Serializer options.

    Returns:
        (model or None, {dotted path: value})

    Raises:
        DocumentTypeMismatchException: If model is not a model_type.
        ModelConstructionException: If a fresh model cannot be created.
    """
    options = options or DEFAULT_OPTIONS
    if not isinstance(fields, Mapping):
        raise InvalidArgumentException("fields must be an object", "fields")
    table: dict[str, Any] = {}

    if model_type is None and model is not None:
        model_type = type(model)

    if model_type is None:
        for name, raw in fields.items():
            try:
                decode_value(raw, Any, options, path=name, table=table)
            except ValueDecodeError as exc:
                logger.debug("Skipping field %s: %s", name, exc.message)
        return None, table

    target, _ = unwrap(model_type)
    origin = origin_of(target)
    if model is not None and isinstance(origin, type) and not isinstance(model, origin):
        raise DocumentTypeMismatchException(origin, type(model))

    if mapping_types(target) is not None:
        result = decode_mapping(
            fields,
            target,
            options,
            existing=model,
            table=table,
        )
        return result, table

    instance = model if model is not None else construct_model(origin)
    decode_object(fields, origin, options, instance=instance, table=table)
    return instance, table


def parse_document(
    data: Any,
    *,
    model_type: type[T] | None = None,
    document: Document[T] | None = None,
    reference: DocumentReference | None = None,
    options: SerializerOptions | None = None,
) -> Document[T] | None:
    """Parse one Document JSON object.

    When ``document`` is given it is updated in place: its model instance is
    reused and its field table becomes an exact mirror of the response.

    Args:
        data: Decoded JSON object, or JSON text.
        model_type: Model type to materialize; defaults to document.model_type.
        document: Existing document to update.
        reference: Reference to use when the response name cannot be parsed.
        options: Serializer options.

    Returns:
        The document, or None when name, createTime or updateTime is absent
        (the caller treats that entry as missing).

    Raises:
        DocumentTypeMismatchException: If model_type differs from document.model_type.
        ModelConstructionException: If a fresh model cannot be created.
        InvalidArgumentException: If data is not a JSON object or the name is malformed.
    """
    options = options or DEFAULT_OPTIONS
    data = _load(data)

    name: Any = None
    create_time: Any = None
    update_time: Any = None
    fields: Any = None
    has_fields = False
    for key, value in data.items():
        if key == "name":
            name = value
        elif key == "createTime":
            create_time = value
        elif key == "updateTime":
            update_time = value
        elif key == "fields":
            fields = value
            has_fields = True

    if document is not None:
        if model_type is None:
            model_type = document.model_type
        elif document.model_type is not None and model_type != document.model_type:
            raise DocumentTypeMismatchException(document.model_type, model_type)

    if name is None or create_time is None or update_time is None:
        logger.debug(
            "Incomplete document %s (createTime=%s, updateTime=%s); treating as missing",
            name or reference,
            create_time,
            update_time,
        )
        return None

    try:
        created = parse_timestamp(create_time)
        updated = parse_timestamp(update_time)
    except ValueError as exc:
        logger.debug("Invalid timestamps on %s: %s; treating as missing", name, exc)
        return None

    try:
        parsed_reference = DocumentReference.parse(name)
    except ValueError as exc:
        if reference is None:
            raise InvalidArgumentException(f"Invalid document name: {name!r}", "name") from exc
        parsed_reference = reference

    model = None
    table: dict[str, Any] = {}
    if has_fields:
        existing = document.model if document is not None else None
        model, table = parse_fields(fields or {}, model_type, model=existing, options=options)

    if document is None:
        document = Document(parsed_reference, model_type=model_type)
    else:
        document.reference = parsed_reference
    document.create_time = created
    document.update_time = updated
    document._attach(model, model_type)
    document._replace_fields(table)
    return document
