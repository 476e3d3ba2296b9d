"""Tests for domain value objects (Database, CollectionReference, DocumentReference, GeoPoint)."""

import pytest

from firebase_rest.domain.value_objects.core import (
    CollectionReference,
    Database,
    DocumentReference,
    GeoPoint,
    parse_reference,
)

ROOT = "projects/demo/databases/(default)/documents"


class TestDatabase:
    """Database: project id plus database id, "(default)" when blank."""

    def test_names(self) -> None:
        database = Database("demo")
        assert database.name == "projects/demo/databases/(default)"
        assert database.documents_path == ROOT

    def test_blank_database_id_defaults(self) -> None:
        assert Database("demo", "").database_id == "(default)"

    def test_invalid_project_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            Database("")
        with pytest.raises(ValueError, match="must not contain '/'"):
            Database("a/b")


class TestReferences:
    """Collection and document references render fully-qualified names."""

    def test_nested_paths(self) -> None:
        posts = Database("demo").collection("users").document("u1").collection("posts")
        post = posts.document("p1")
        assert posts.path == "users/u1/posts"
        assert post.path == "users/u1/posts/p1"
        assert post.name == f"{ROOT}/users/u1/posts/p1"
        assert str(post) == post.name

    def test_invalid_ids_rejected(self) -> None:
        users = Database("demo").collection("users")
        with pytest.raises(ValueError, match="Document id"):
            users.document("")
        with pytest.raises(ValueError, match="'.' or '..'"):
            users.document("..")

    def test_parent_from_other_database_rejected(self) -> None:
        parent = Database("other").collection("users").document("u1")
        with pytest.raises(ValueError, match="same database"):
            CollectionReference(Database("demo"), "posts", parent)


class TestParseReference:
    def test_document(self) -> None:
        reference = DocumentReference.parse(f"{ROOT}/users/u1/posts/p1")
        assert reference == Database("demo").collection("users").document("u1").collection("posts").document("p1")

    def test_collection(self) -> None:
        reference = parse_reference(f"{ROOT}/users/u1/posts")
        assert isinstance(reference, CollectionReference)
        assert reference.path == "users/u1/posts"

    def test_collection_is_not_a_document(self) -> None:
        with pytest.raises(ValueError, match="does not address a document"):
            DocumentReference.parse(f"{ROOT}/users")

    def test_malformed(self) -> None:
        with pytest.raises(ValueError, match="Invalid Firestore resource path"):
            parse_reference("users/u1")
        with pytest.raises(ValueError, match="must be a string"):
            parse_reference(None)


class TestGeoPoint:
    def test_defaults(self) -> None:
        assert GeoPoint() == GeoPoint(0.0, 0.0)

    def test_validate(self) -> None:
        GeoPoint(90.0, -180.0).validate()
        with pytest.raises(ValueError, match="Latitude"):
            GeoPoint(91.0, 0.0).validate()
        with pytest.raises(ValueError, match="Longitude"):
            GeoPoint(0.0, 181.0).validate()
