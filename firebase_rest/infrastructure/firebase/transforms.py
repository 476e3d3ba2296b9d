"""Field transforms and ``:commit`` request bodies.

A commit holds three kinds of writes: ``update`` (patch a document from its
model), ``delete`` and ``transform`` (server-side field transforms such as
increment or appendMissingElements).

Transform paths are either literal document field paths ("stats.views"),
the special "__name__" path, or property paths (["stats", "views"] with
``property_path=True``) resolved against the model type into wire names.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from firebase_rest.domain.entities.document import Document
from firebase_rest.domain.exceptions import InvalidArgumentException, UnsupportedTransformException
from firebase_rest.domain.value_objects.core import DocumentReference
from firebase_rest.infrastructure.firebase._rest_encoding import NULL_VALUE, encode_value
from firebase_rest.infrastructure.firebase._types import origin_of, type_name, unwrap
from firebase_rest.infrastructure.firebase.members import (
    document_field_path,
    get_document_field_path,
)
from firebase_rest.infrastructure.firebase.options import DEFAULT_OPTIONS, SerializerOptions
from firebase_rest.infrastructure.firebase.writer import write_fields

DOCUMENT_NAME_PATH = "__name__"


class ServerValue(str, Enum):
    """Values the server can set a field to."""

    SERVER_VALUE_UNSPECIFIED = "SERVER_VALUE_UNSPECIFIED"
    REQUEST_TIME = "REQUEST_TIME"


class NumberType(str, Enum):
    INTEGER = "integerValue"
    DOUBLE = "doubleValue"


def number_type(tp: Any) -> NumberType:
    """Classify a numeric type for increment/maximum/minimum.

    Raises:
        UnsupportedTransformException: For bool, Decimal and non-numeric types.
    """
    tp, _ = unwrap(tp)
    origin = origin_of(tp)
    if isinstance(origin, type) and not issubclass(origin, bool):
        if issubclass(origin, Decimal):
            raise UnsupportedTransformException("Decimal number is not yet supported.", origin)
        if issubclass(origin, int):
            return NumberType.INTEGER
        if issubclass(origin, float):
            return NumberType.DOUBLE
    raise UnsupportedTransformException(f'"{type_name(tp)}" type is not supported.', tp)


def _normalize_path(path: str | Sequence[str]) -> tuple[str, ...]:
    segments = tuple(path.split(".")) if isinstance(path, str) else tuple(path)
    if not segments or any(not segment for segment in segments):
        raise InvalidArgumentException(f"Invalid field path: {path!r}", "path")
    return segments


@dataclass(frozen=True, kw_only=True)
class FieldTransform(ABC):
    """Base class for one field transform."""

    path: tuple[str, ...]
    property_path: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _normalize_path(self.path))

    def resolve_path(
        self, model_type: Any = None, options: SerializerOptions | None = None
    ) -> tuple[str, Any]:
        """Return (document field path, declared field type or None).

        Raises:
            InvalidArgumentException: If a property path has no model type.
            FieldPathException: If a property path segment does not resolve.
        """
        if self.path == (DOCUMENT_NAME_PATH,):
            return DOCUMENT_NAME_PATH, None
        if not self.property_path:
            return ".".join(self.path), None
        if model_type is None:
            raise InvalidArgumentException(
                "Field transform with a property path requires a model type", "model_type"
            )
        pairs = get_document_field_path(model_type, self.path, options)
        return document_field_path(pairs), pairs[-1].type

    def to_json(self, model_type: Any = None, options: SerializerOptions | None = None) -> dict[str, Any]:
        field_path, field_type = self.resolve_path(model_type, options)
        return {"fieldPath": field_path, **self._operation(field_type, options or DEFAULT_OPTIONS)}

    @abstractmethod
    def _operation(self, field_type: Any, options: SerializerOptions) -> dict[str, Any]:
        """The transform operation keyed by its wire name, e.g. {"increment": {...}}."""


@dataclass(frozen=True, kw_only=True)
class _NumericTransform(FieldTransform):
    value: int | float
    kind = "increment"

    def _operation(self, field_type: Any, options: SerializerOptions) -> dict[str, Any]:
        operand_type = type(self.value)
        operand = number_type(operand_type)
        if field_type is not None and operand is NumberType.DOUBLE:
            if number_type(field_type) is not NumberType.DOUBLE:
                raise UnsupportedTransformException(
                    f'{self.kind.capitalize()} type mismatch. "{type_name(unwrap(field_type)[0])}" '
                    f'cannot {self.kind} with "{operand_type.__name__}"',
                    operand_type,
                )
        target = int if operand is NumberType.INTEGER else float
        envelope = encode_value(self.value, target, options)
        if envelope is None:
            raise UnsupportedTransformException(f"{self.value!r} is out of 64-bit range", operand_type)
        return {self.kind: envelope}


@dataclass(frozen=True, kw_only=True)
class IncrementTransform(_NumericTransform):
    kind = "increment"


@dataclass(frozen=True, kw_only=True)
class MaximumTransform(_NumericTransform):
    kind = "maximum"


@dataclass(frozen=True, kw_only=True)
class MinimumTransform(_NumericTransform):
    kind = "minimum"


@dataclass(frozen=True, kw_only=True)
class _ArrayTransform(FieldTransform):
    values: tuple[Any, ...] = ()
    kind = "appendMissingElements"

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "values", tuple(self.values))

    def _operation(self, field_type: Any, options: SerializerOptions) -> dict[str, Any]:
        values = []
        for item in self.values:
            envelope = encode_value(item, Any, options)
            values.append(envelope if envelope is not None else dict(NULL_VALUE))
        return {self.kind: {"values": values}}


@dataclass(frozen=True, kw_only=True)
class AppendMissingElementsTransform(_ArrayTransform):
    kind = "appendMissingElements"


@dataclass(frozen=True, kw_only=True)
class RemoveAllFromArrayTransform(_ArrayTransform):
    kind = "removeAllFromArray"


@dataclass(frozen=True, kw_only=True)
class SetToServerValueTransform(FieldTransform):
    server_value: ServerValue = ServerValue.REQUEST_TIME

    def _operation(self, field_type: Any, options: SerializerOptions) -> dict[str, Any]:
        return {"setToServerValue": ServerValue(self.server_value).value}


def increment(path: str | Sequence[str], value: int | float, *, property_path: bool = False) -> IncrementTransform:
    return IncrementTransform(path=path, value=value, property_path=property_path)


def maximum(path: str | Sequence[str], value: int | float, *, property_path: bool = False) -> MaximumTransform:
    return MaximumTransform(path=path, value=value, property_path=property_path)


def minimum(path: str | Sequence[str], value: int | float, *, property_path: bool = False) -> MinimumTransform:
    return MinimumTransform(path=path, value=value, property_path=property_path)


def append_missing_elements(
    path: str | Sequence[str], values: Iterable[Any], *, property_path: bool = False
) -> AppendMissingElementsTransform:
    return AppendMissingElementsTransform(path=path, values=tuple(values), property_path=property_path)


def remove_all_from_array(
    path: str | Sequence[str], values: Iterable[Any], *, property_path: bool = False
) -> RemoveAllFromArrayTransform:
    return RemoveAllFromArrayTransform(path=path, values=tuple(values), property_path=property_path)


def request_time(path: str | Sequence[str], *, property_path: bool = False) -> SetToServerValueTransform:
    return SetToServerValueTransform(path=path, property_path=property_path)


@dataclass
class DocumentTransform:
    """Field transforms applied to one document."""

    reference: DocumentReference
    field_transforms: list[FieldTransform] = field(default_factory=list)
    model_type: Any = None

    def to_json(self, options: SerializerOptions | None = None) -> dict[str, Any]:
        return {
            "document": self.reference.name,
            "fieldTransforms": [t.to_json(self.model_type, options) for t in self.field_transforms],
        }


@dataclass
class Write:
    """A batch of writes for one ``:commit`` call.

    Patched documents without a model are sent as deletes.
    """

    patches: list[Document[Any]] = field(default_factory=list)
    deletes: list[DocumentReference] = field(default_factory=list)
    transforms: list[DocumentTransform] = field(default_factory=list)

    def patch(self, *documents: Document[Any]) -> "Write":
        self.patches.extend(documents)
        return self

    def delete(self, *references: DocumentReference) -> "Write":
        self.deletes.extend(references)
        return self

    def transform(
        self,
        reference: DocumentReference,
        *field_transforms: FieldTransform,
        model_type: Any = None,
    ) -> "Write":
        self.transforms.append(DocumentTransform(reference, list(field_transforms), model_type))
        return self

    def to_commit_body(
        self,
        options: SerializerOptions | None = None,
        transaction: str | None = None,
    ) -> dict[str, Any]:
        """Build the JSON body of a ``documents:commit`` request.

        Raises:
            InvalidArgumentException: If a patched document has no reference.
        """
        writes: list[dict[str, Any]] = []
        for document in self.patches:
            if document.name is None:
                raise InvalidArgumentException("Patched document has no reference", "document")
            if document.model is None:
                writes.append({"delete": document.name})
                continue
            table: dict[str, Any] = {}
            fields = write_fields(document=document, options=options, table=table)
            document._replace_fields(table)
            writes.append({"update": {"name": document.name, "fields": fields}})
        for reference in self.deletes:
            writes.append({"delete": reference.name})
        for document_transform in self.transforms:
            writes.append({"transform": document_transform.to_json(options)})

        body: dict[str, Any] = {"writes": writes}
        if transaction is not None:
            body["transaction"] = transaction
        return body
