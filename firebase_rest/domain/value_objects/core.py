"""Domain value objects for Firestore resource addressing.

References are immutable and self-validating: they have no identity, only
value, and render to the fully-qualified resource path used by the REST API
(``projects/{project}/databases/{database}/documents/...``).
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DATABASE_ID = "(default)"


def _validate_id(value: str, field_name: str) -> None:
    """Validate a single path segment. Raises ValueError on failure."""
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field_name} must be a non-empty string")
    if "/" in value:
        raise ValueError(f"{field_name} must not contain '/': {value!r}")
    if value in (".", ".."):
        raise ValueError(f"{field_name} must not be '.' or '..'")


@dataclass(frozen=True)
class Database:
    """Value object for a Firestore database within a project.

    An empty database id falls back to "(default)".
    """

    project_id: str
    database_id: str = DEFAULT_DATABASE_ID

    def __post_init__(self) -> None:
        if not self.database_id:
            object.__setattr__(self, "database_id", DEFAULT_DATABASE_ID)
        _validate_id(self.project_id, "Project id")

    @property
    def name(self) -> str:
        """Resource name of the database."""
        return f"projects/{self.project_id}/databases/{self.database_id}"

    @property
    def documents_path(self) -> str:
        """Root path that every document name starts with."""
        return f"{self.name}/documents"

    def collection(self, collection_id: str) -> CollectionReference:
        """Return a reference to a root collection."""
        return CollectionReference(database=self, id=collection_id)


@dataclass(frozen=True)
class CollectionReference:
    """Value object for a collection (root or nested under a document)."""

    database: Database
    id: str
    parent: DocumentReference | None = None

    def __post_init__(self) -> None:
        _validate_id(self.id, "Collection id")
        if self.parent is not None and self.parent.database != self.database:
            raise ValueError("Collection must belong to the same database as its parent document")

    @property
    def path(self) -> str:
        """Path relative to the database documents root (e.g. "users/u1/posts")."""
        if self.parent is None:
            return self.id
        return f"{self.parent.path}/{self.id}"

    @property
    def name(self) -> str:
        """Fully-qualified resource path."""
        return f"{self.database.documents_path}/{self.path}"

    def document(self, document_id: str) -> DocumentReference:
        """Return a reference to a document in this collection."""
        return DocumentReference(parent=self, id=document_id)


@dataclass(frozen=True)
class DocumentReference:
    """Value object for a single document.

    Encoded on the wire as a ``referenceValue`` holding ``name``.
    """

    parent: CollectionReference
    id: str

    def __post_init__(self) -> None:
        _validate_id(self.id, "Document id")

    @property
    def database(self) -> Database:
        return self.parent.database

    @property
    def path(self) -> str:
        """Path relative to the database documents root (e.g. "users/u1")."""
        return f"{self.parent.path}/{self.id}"

    @property
    def name(self) -> str:
        """Fully-qualified resource path."""
        return f"{self.database.documents_path}/{self.path}"

    def collection(self, collection_id: str) -> CollectionReference:
        """Return a reference to a sub-collection of this document."""
        return CollectionReference(database=self.database, id=collection_id, parent=self)

    @classmethod
    def parse(cls, name: str) -> DocumentReference:
        """Parse a fully-qualified document name.

        Raises:
            ValueError: If the path is malformed or addresses a collection.
        """
        reference = parse_reference(name)
        if not isinstance(reference, DocumentReference):
            raise ValueError(f"Path does not address a document: {name!r}")
        return reference

    def __str__(self) -> str:
        return self.name


def parse_reference(name: str) -> DocumentReference | CollectionReference:
    """Parse a fully-qualified resource path into a collection or document reference.

    Path layout: ``projects/{p}/databases/{d}/documents/{c}/{doc}/{c}/...``;
    segments after ``documents`` alternate collection id and document id.

    Raises:
        ValueError: If the path does not follow that layout.
    """
    if not isinstance(name, str):
        raise ValueError(f"Reference path must be a string, got {type(name).__name__}")
    parts = name.strip("/").split("/")
    if (
        len(parts) < 6
        or parts[0] != "projects"
        or parts[2] != "databases"
        or parts[4] != "documents"
    ):
        raise ValueError(f"Invalid Firestore resource path: {name!r}")

    database = Database(project_id=parts[1], database_id=parts[3])
    collection = database.collection(parts[5])
    reference: DocumentReference | CollectionReference = collection
    for index, segment in enumerate(parts[6:]):
        if index % 2 == 0:
            reference = collection.document(segment)
        else:
            collection = reference.collection(segment)
            reference = collection
    return reference


@dataclass
class GeoPoint:
    """Latitude/longitude pair encoded as ``geoPointValue``.

    Mutable so that a decode can populate an existing instance; both
    components default to 0.0.
    """

    latitude: float = 0.0
    longitude: float = 0.0

    def validate(self) -> None:
        """Check coordinate ranges. Raises ValueError when out of range."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude must be within [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude must be within [-180, 180], got {self.longitude}")
