"""Domain value objects: references and geo points."""

from firebase_rest.domain.value_objects.core import (
    DEFAULT_DATABASE_ID,
    CollectionReference,
    Database,
    DocumentReference,
    GeoPoint,
    parse_reference,
)

__all__ = [
    "DEFAULT_DATABASE_ID",
    "Database",
    "CollectionReference",
    "DocumentReference",
    "GeoPoint",
    "parse_reference",
]
