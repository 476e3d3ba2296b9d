"""Tests for field transforms and commit bodies."""

from decimal import Decimal

import pytest

from firebase_rest.domain.entities.document import Document
from firebase_rest.domain.exceptions import (
    FieldPathException,
    InvalidArgumentException,
    UnsupportedTransformException,
)
from firebase_rest.domain.value_objects.core import Database
from firebase_rest.infrastructure.firebase.transforms import (
    FieldTransform,
    NumberType,
    Write,
    append_missing_elements,
    increment,
    maximum,
    minimum,
    number_type,
    remove_all_from_array,
    request_time,
)
from tests.models import Address, Post


def _reference(document_id: str = "p1"):
    return Database("demo").collection("posts").document(document_id)


class TestNumberType:
    def test_integers_and_doubles(self) -> None:
        assert number_type(int) is NumberType.INTEGER
        assert number_type(float) is NumberType.DOUBLE
        assert number_type(int | None) is NumberType.INTEGER

    def test_bool_rejected(self) -> None:
        with pytest.raises(UnsupportedTransformException, match='"bool" type is not supported'):
            number_type(bool)

    def test_decimal_rejected(self) -> None:
        with pytest.raises(UnsupportedTransformException, match="Decimal number is not yet supported"):
            number_type(Decimal)


class TestFieldTransforms:
    """Each transform renders its fieldPath and operation."""

    def test_increment_literal_path(self) -> None:
        assert increment("stats.views", 1).to_json() == {
            "fieldPath": "stats.views",
            "increment": {"integerValue": "1"},
        }

    def test_maximum_and_minimum(self) -> None:
        assert maximum("score", 2.5).to_json() == {
            "fieldPath": "score",
            "maximum": {"doubleValue": 2.5},
        }
        assert minimum("score", 0).to_json() == {
            "fieldPath": "score",
            "minimum": {"integerValue": "0"},
        }

    def test_property_path_resolved_to_wire_names(self) -> None:
        transform = increment(["stats", "view_count"], 2, property_path=True)
        assert transform.to_json(Post) == {
            "fieldPath": "stats.viewCount",
            "increment": {"integerValue": "2"},
        }

    def test_property_path_through_dictionary(self) -> None:
        transform = increment("counters.likes", 1, property_path=True)
        assert transform.to_json(Post)["fieldPath"] == "counters.likes"

    def test_property_path_needs_model_type(self) -> None:
        with pytest.raises(InvalidArgumentException, match="requires a model type"):
            increment("stats.view_count", 1, property_path=True).to_json()

    def test_property_path_unknown_member(self) -> None:
        with pytest.raises(FieldPathException):
            increment("stats.nope", 1, property_path=True).to_json(Post)

    def test_double_operand_on_integer_field(self) -> None:
        with pytest.raises(UnsupportedTransformException, match="Increment type mismatch"):
            increment("stats.view_count", 1.5, property_path=True).to_json(Post)

    def test_integer_operand_on_double_field(self) -> None:
        assert increment("stats.rating", 1, property_path=True).to_json(Post) == {
            "fieldPath": "stats.rating",
            "increment": {"integerValue": "1"},
        }

    def test_unsupported_operands(self) -> None:
        with pytest.raises(UnsupportedTransformException):
            increment("a", True).to_json()
        with pytest.raises(UnsupportedTransformException):
            increment("a", Decimal("1")).to_json()
        with pytest.raises(UnsupportedTransformException, match="64-bit"):
            increment("a", 2**63).to_json()

    def test_array_transforms(self) -> None:
        assert append_missing_elements("tags", ["a", 1]).to_json() == {
            "fieldPath": "tags",
            "appendMissingElements": {"values": [{"stringValue": "a"}, {"integerValue": "1"}]},
        }
        assert remove_all_from_array("tags", [None]).to_json() == {
            "fieldPath": "tags",
            "removeAllFromArray": {"values": [{"nullValue": None}]},
        }

    def test_request_time(self) -> None:
        assert request_time("updated").to_json() == {
            "fieldPath": "updated",
            "setToServerValue": "REQUEST_TIME",
        }

    def test_document_name_path(self) -> None:
        assert request_time("__name__", property_path=True).to_json()["fieldPath"] == "__name__"

    def test_base_transform_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            FieldTransform(path=("a",))

    def test_invalid_path(self) -> None:
        with pytest.raises(InvalidArgumentException, match="Invalid field path"):
            increment("a..b", 1)


class TestWrite:
    """Write builds the documents:commit body."""

    def test_commit_body(self) -> None:
        patched = Document(_reference("p1"), Post(title="Hello"))
        emptied = Document(_reference("p2"), model_type=Post)
        write = (
            Write()
            .patch(patched, emptied)
            .delete(_reference("p3"))
            .transform(_reference("p1"), increment("stats.view_count", 1, property_path=True), model_type=Post)
        )

        body = write.to_commit_body(transaction="tx-1")

        writes = body["writes"]
        assert writes[0]["update"]["name"] == _reference("p1").name
        assert writes[0]["update"]["fields"]["title"] == {"stringValue": "Hello"}
        assert writes[1] == {"delete": _reference("p2").name}
        assert writes[2] == {"delete": _reference("p3").name}
        assert writes[3] == {
            "transform": {
                "document": _reference("p1").name,
                "fieldTransforms": [
                    {"fieldPath": "stats.viewCount", "increment": {"integerValue": "1"}}
                ],
            }
        }
        assert body["transaction"] == "tx-1"
        assert patched.fields["title"] == "Hello"

    def test_no_transaction_key_by_default(self) -> None:
        assert Write().to_commit_body() == {"writes": []}

    def test_patch_without_reference(self) -> None:
        with pytest.raises(InvalidArgumentException, match="no reference"):
            Write().patch(Document(model=Address())).to_commit_body()
