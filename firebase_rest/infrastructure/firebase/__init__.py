"""Firestore REST integration: typed-value codec, resolver, parser, writer and client."""

from firebase_rest.infrastructure.firebase._rest_client import (
    BatchGetResult,
    FirestoreRESTClient,
)
from firebase_rest.infrastructure.firebase._rest_encoding import (
    MISSING,
    TypedValue,
    ValueTag,
    decode_document,
    decode_value,
    encode_document,
    encode_value,
)
from firebase_rest.infrastructure.firebase.attributes import (
    FirebaseIgnore,
    FirebaseValue,
    JsonName,
    firebase_field,
    firebase_value_only,
)
from firebase_rest.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from firebase_rest.infrastructure.firebase.members import (
    ModelMember,
    TypedDocumentFieldPair,
    construct_model,
    get_document_field_name,
    get_document_field_path,
    resolve_members,
)
from firebase_rest.infrastructure.firebase.options import (
    DEFAULT_OPTIONS,
    FirestoreConverter,
    SerializerOptions,
)
from firebase_rest.infrastructure.firebase.parser import parse_document, parse_fields
from firebase_rest.infrastructure.firebase.transforms import (
    AppendMissingElementsTransform,
    DocumentTransform,
    FieldTransform,
    IncrementTransform,
    MaximumTransform,
    MinimumTransform,
    RemoveAllFromArrayTransform,
    ServerValue,
    SetToServerValueTransform,
    Write,
    append_missing_elements,
    increment,
    maximum,
    minimum,
    remove_all_from_array,
    request_time,
)
from firebase_rest.infrastructure.firebase.writer import attach_model, dumps, write_document, write_fields

__all__ = [
    # Client
    "BatchGetResult",
    "FirestoreRESTClient",
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
    # Codec
    "MISSING",
    "TypedValue",
    "ValueTag",
    "decode_document",
    "decode_value",
    "encode_document",
    "encode_value",
    # Markers and options
    "DEFAULT_OPTIONS",
    "FirebaseIgnore",
    "FirebaseValue",
    "FirestoreConverter",
    "JsonName",
    "SerializerOptions",
    "firebase_field",
    "firebase_value_only",
    # Resolver
    "ModelMember",
    "TypedDocumentFieldPair",
    "construct_model",
    "get_document_field_name",
    "get_document_field_path",
    "resolve_members",
    # Parser / writer
    "attach_model",
    "dumps",
    "parse_document",
    "parse_fields",
    "write_document",
    "write_fields",
    # Transforms
    "AppendMissingElementsTransform",
    "DocumentTransform",
    "FieldTransform",
    "IncrementTransform",
    "MaximumTransform",
    "MinimumTransform",
    "RemoveAllFromArrayTransform",
    "ServerValue",
    "SetToServerValueTransform",
    "Write",
    "append_missing_elements",
    "increment",
    "maximum",
    "minimum",
    "remove_all_from_array",
    "request_time",
]
