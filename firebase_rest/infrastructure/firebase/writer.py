"""Write models and documents into the Firestore REST ``fields`` shape."""

import json
from collections.abc import Mapping
from typing import Any

from firebase_rest.domain.entities.document import Document
from firebase_rest.domain.exceptions import InvalidArgumentException
from firebase_rest.infrastructure.firebase._rest_encoding import encode_mapping, encode_object
from firebase_rest.infrastructure.firebase._types import mapping_types, unwrap
from firebase_rest.infrastructure.firebase.options import DEFAULT_OPTIONS, SerializerOptions


def write_fields(
    model: Any = None,
    *,
    model_type: Any = None,
    document: Document[Any] | None = None,
    options: SerializerOptions | None = None,
    table: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Serialize a model (or a document's model) into a ``fields`` map.

    Mappings are written flat, one field per key; other models are written
    member by member in resolver order. Wire names already written are not
    written again.

    Args:
        model: Model instance or dict; defaults to document.model.
        model_type: Declared type (supplies dict value types).
        document: Document whose model is written when model is None.
        options: Serializer options.
        table: Flat field table to record written values into.

    Returns:
        The ``fields`` map (possibly empty).

    Raises:
        InvalidArgumentException: If there is no model to write.
    """
    options = options or DEFAULT_OPTIONS
    if model is None and document is not None:
        model = document.model
        model_type = model_type or document.model_type
    if model is None:
        if document is None:
            raise InvalidArgumentException("Provide a model or a document to write.", "model")
        raise InvalidArgumentException(
            "Model is a null reference. Provide a model to build the document fields.", "model"
        )

    declared = unwrap(model_type)[0] if model_type is not None else type(model)
    if isinstance(model, Mapping):
        if mapping_types(declared) is None:
            declared = dict[str, Any]
        return encode_mapping(model, declared, options, table=table)
    return encode_object(model, type(model), options, table=table)


def attach_model(document: Document[Any], model: Any, options: SerializerOptions | None = None) -> None:
    """Attach ``model`` to ``document`` and rebuild its field table from it.

    Raises:
        DocumentTypeMismatchException: If model does not match document.model_type.
    """
    table: dict[str, Any] = {}
    if model is not None:
        write_fields(model, model_type=document.model_type or type(model), options=options, table=table)
    document.set_model(model, table)


def write_document(document: Document[Any], options: SerializerOptions | None = None) -> dict[str, Any]:
    """Build the REST ``Document`` body for a create/patch request.

    The document's field table is rebuilt from what was written.

    Returns:
        {"name": ..., "fields": {...}}; "name" is omitted for unaddressed documents.
    """
    table: dict[str, Any] = {}
    fields = write_fields(document=document, options=options, table=table)
    document._replace_fields(table)
    body: dict[str, Any] = {}
    if document.name is not None:
        body["name"] = document.name
    body["fields"] = fields
    return body


def dumps(
    model: Any = None,
    *,
    model_type: Any = None,
    document: Document[Any] | None = None,
    options: SerializerOptions | None = None,
) -> str:
    """Serialize to compact JSON text of the form {"fields": {...}}."""
    fields = write_fields(model, model_type=model_type, document=document, options=options)
    return json.dumps({"fields": fields}, separators=(",", ":"), ensure_ascii=False)
