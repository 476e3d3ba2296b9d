"""Tests for field reflection (wire names, inclusion rule, dotted paths)."""

import pytest

from firebase_rest.domain.exceptions import (
    FieldPathException,
    InvalidArgumentException,
    ModelConstructionException,
)
from firebase_rest.infrastructure.firebase.members import (
    construct_model,
    document_field_path,
    get_document_field_name,
    get_document_field_path,
    members_by_wire_name,
    resolve_members,
)
from firebase_rest.infrastructure.firebase.options import SerializerOptions
from tests.models import (
    Account,
    Clash,
    Config,
    FrozenPoint,
    FrozenProduct,
    Loose,
    NeedsArgs,
    Product,
    Profile,
    Synced,
    Tagged,
    User,
)


def _names(cls: type, options: SerializerOptions | None = None) -> list[tuple[str, str]]:
    return [(m.attribute, m.wire_name) for m in resolve_members(cls, options)]


class TestResolveMembers:
    """Inclusion rule and wire-name derivation."""

    def test_dataclass_uses_camel_case_by_default(self) -> None:
        assert _names(User) == [
            ("display_name", "displayName"),
            ("age", "age"),
            ("score", "score"),
            ("active", "active"),
            ("status", "status"),
            ("created", "created"),
            ("address", "address"),
            ("tags", "tags"),
            ("attributes", "attributes"),
            ("nickname", "nick"),
        ]

    def test_naming_policies(self) -> None:
        pascal = dict(_names(User, SerializerOptions(naming_policy="pascal")))
        assert pascal["display_name"] == "DisplayName"
        assert pascal["nickname"] == "nick"
        assert dict(_names(User, SerializerOptions(naming_policy="none")))["display_name"] == "display_name"
        assert dict(_names(User, SerializerOptions(naming_policy=str.upper)))["age"] == "AGE"

    def test_unknown_naming_policy_rejected(self) -> None:
        with pytest.raises(ValueError, match="naming_policy must be one of"):
            SerializerOptions(naming_policy="kebab")

    def test_property_merges_backing_field_marker(self) -> None:
        # properties first; read-only summary and the paired _balance are skipped
        assert _names(Account) == [("balance", "bal"), ("owner", "owner")]

    def test_value_only_class(self) -> None:
        assert _names(Profile) == [("name", "name"), ("secret", "s")]

    def test_synchronization_members_excluded(self) -> None:
        assert _names(Synced) == [("title", "title")]

    def test_firebase_value_beats_json_name(self) -> None:
        assert _names(Tagged) == [("label", "LabelText"), ("both", "fire")]

    def test_duplicate_wire_name_first_wins(self) -> None:
        assert _names(Clash) == [("first", "x")]

    def test_read_only_members_excluded(self) -> None:
        assert _names(FrozenPoint) == []
        assert _names(FrozenProduct) == []
        assert _names(Config) == [("name", "name")]

    def test_pydantic_model(self) -> None:
        assert _names(Product) == [
            ("sku", "sku"),
            ("unit_price", "unitPrice"),
            ("display", "displayText"),
            ("code", "c"),
        ]

    def test_members_are_cached(self) -> None:
        assert resolve_members(User) is resolve_members(User)

    def test_lookup_helpers(self) -> None:
        assert get_document_field_name(User, "display_name") == "displayName"
        assert get_document_field_name(User, "missing") is None
        assert members_by_wire_name(User)["nick"].attribute == "nickname"


class TestGetDocumentFieldPath:
    """Dotted member paths resolve to wire field paths."""

    def test_nested_object(self) -> None:
        pairs = get_document_field_path(User, "address.zip_code")
        assert document_field_path(pairs) == "address.zipCode"
        assert pairs[-1].type is str

    def test_dictionary_segment_is_a_key(self) -> None:
        pairs = get_document_field_path(User, ["attributes", "vip"])
        assert document_field_path(pairs) == "attributes.vip"
        assert pairs[-1].type is int

    def test_unknown_member(self) -> None:
        with pytest.raises(FieldPathException, match='does not have a writable member "nope"') as exc_info:
            get_document_field_path(User, "nope")
        assert exc_info.value.error_code == "FIELD_PATH_ERROR"
        assert exc_info.value.details == {"type": "User", "segment": "nope"}

    def test_read_only_member(self) -> None:
        with pytest.raises(FieldPathException):
            get_document_field_path(Account, "summary")

    def test_untyped_parent(self) -> None:
        with pytest.raises(FieldPathException, match="could not be determined"):
            get_document_field_path(Loose, "extra.x")

    def test_empty_path(self) -> None:
        with pytest.raises(InvalidArgumentException, match="Invalid field path"):
            get_document_field_path(User, "")
        with pytest.raises(InvalidArgumentException):
            get_document_field_path(User, [])


class TestConstructModel:
    def test_pydantic_model_built_without_validation(self) -> None:
        product = construct_model(Product)
        assert isinstance(product, Product)
        assert product.sku == ""

    def test_missing_no_argument_constructor(self) -> None:
        with pytest.raises(ModelConstructionException, match="no usable no-argument constructor"):
            construct_model(NeedsArgs)
