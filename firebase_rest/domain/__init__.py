"""Domain layer: entities, value objects, and exceptions.

No dependencies on the HTTP transport. Used by the infrastructure layer.
"""

from firebase_rest.domain.entities import Document
from firebase_rest.domain.exceptions import (
    DocumentTypeMismatchException,
    FieldPathException,
    FirebaseException,
    InvalidArgumentException,
    ModelConstructionException,
    UnsupportedTransformException,
    ValueDecodeError,
)
from firebase_rest.domain.value_objects import (
    CollectionReference,
    Database,
    DocumentReference,
    GeoPoint,
    parse_reference,
)

__all__ = [
    # Entities
    "Document",
    # Exceptions
    "DocumentTypeMismatchException",
    "FieldPathException",
    "FirebaseException",
    "InvalidArgumentException",
    "ModelConstructionException",
    "UnsupportedTransformException",
    "ValueDecodeError",
    # Value objects
    "CollectionReference",
    "Database",
    "DocumentReference",
    "GeoPoint",
    "parse_reference",
]
