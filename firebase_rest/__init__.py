"""firebase_rest: Firestore REST documents mapped to typed Python models.

Typical use::

    from firebase_rest import parse_document, write_fields

    document = parse_document(response_json, model_type=User)
    body = {"fields": write_fields(document.model)}
"""

from firebase_rest.domain import (
    CollectionReference,
    Database,
    Document,
    DocumentReference,
    DocumentTypeMismatchException,
    FieldPathException,
    FirebaseException,
    GeoPoint,
    InvalidArgumentException,
    ModelConstructionException,
    UnsupportedTransformException,
)
from firebase_rest.infrastructure.exceptions import (
    DocumentExistsError,
    FirestoreRequestException,
)
from firebase_rest.infrastructure.firebase import (
    FirebaseIgnore,
    FirebaseValue,
    FirestoreConverter,
    FirestoreRESTClient,
    JsonName,
    SerializerOptions,
    Write,
    attach_model,
    decode_value,
    dumps,
    encode_value,
    firebase_field,
    firebase_value_only,
    get_document_field_path,
    parse_document,
    parse_fields,
    write_document,
    write_fields,
)

from firebase_rest.shared.telemetry import setup_logging

__version__ = "0.1.0"

__all__ = [
    "CollectionReference",
    "Database",
    "Document",
    "DocumentExistsError",
    "DocumentReference",
    "DocumentTypeMismatchException",
    "FieldPathException",
    "FirebaseException",
    "FirebaseIgnore",
    "FirebaseValue",
    "FirestoreConverter",
    "FirestoreRESTClient",
    "FirestoreRequestException",
    "GeoPoint",
    "InvalidArgumentException",
    "JsonName",
    "ModelConstructionException",
    "SerializerOptions",
    "UnsupportedTransformException",
    "Write",
    "attach_model",
    "decode_value",
    "dumps",
    "encode_value",
    "firebase_field",
    "firebase_value_only",
    "get_document_field_path",
    "parse_document",
    "parse_fields",
    "setup_logging",
    "write_document",
    "write_fields",
]
