"""Document domain entity.

A named, timestamped Firestore node holding a flat table of decoded field
values and, optionally, a materialized model instance.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any, Generic, TypeVar, get_origin

from firebase_rest.domain.exceptions import DocumentTypeMismatchException
from firebase_rest.domain.value_objects.core import DocumentReference

T = TypeVar("T")


def _is_instance(model: Any, model_type: Any) -> bool:
    # dict[str, int] and friends are checked against their origin
    runtime_type = get_origin(model_type) or model_type
    return not isinstance(runtime_type, type) or isinstance(model, runtime_type)


class Document(Generic[T]):
    """Domain entity for a Firestore document.

    ``fields`` maps dotted field paths (``address.city``, ``items.0``) to
    decoded values and is exposed read-only. When ``model`` is set, the
    table mirrors the model's serializable members as last parsed or
    written; the parser and writer rebuild one from the other.

    A document parsed from a server response carries ``create_time`` and
    ``update_time``; one built locally for a write request does not yet.
    """

    def __init__(
        self,
        reference: DocumentReference | None = None,
        model: T | None = None,
        *,
        model_type: type[T] | None = None,
    ) -> None:
        if model_type is None and model is not None:
            model_type = type(model)
        if model is not None and model_type is not None and not _is_instance(model, model_type):
            raise DocumentTypeMismatchException(model_type, type(model))
        self.reference = reference
        self.create_time: datetime | None = None
        self.update_time: datetime | None = None
        self._model_type = model_type
        self._model = model
        self._fields: dict[str, Any] = {}
        self._fields_view = MappingProxyType(self._fields)

    @property
    def name(self) -> str | None:
        """Fully-qualified resource name, or None for an unaddressed document."""
        return self.reference.name if self.reference is not None else None

    @property
    def model(self) -> T | None:
        return self._model

    @property
    def model_type(self) -> type[T] | None:
        return self._model_type

    @property
    def fields(self) -> MappingProxyType[str, Any]:
        """Read-only ordered view of the flattened field table."""
        return self._fields_view

    @property
    def exists(self) -> bool:
        """Whether the document was resolved from a server response."""
        return self.create_time is not None and self.update_time is not None

    def set_model(self, model: T | None, fields: Mapping[str, Any] | None = None) -> None:
        """Attach a model together with the field table written from it.

        ``writer.attach_model`` builds ``fields`` from the model; detaching
        (model None) empties the table.

        Args:
            model: New model instance, or None to detach.
            fields: Flat field table mirroring ``model``.

        Raises:
            DocumentTypeMismatchException: If model is not an instance of model_type.
        """
        if model is None:
            self._model = None
            self._replace_fields({})
            return
        if self._model_type is not None and not _is_instance(model, self._model_type):
            raise DocumentTypeMismatchException(self._model_type, type(model))
        if self._model_type is None:
            self._model_type = type(model)
        self._model = model
        self._replace_fields(dict(fields or {}))

    def _attach(self, model: T | None, model_type: type[T] | None) -> None:
        if model_type is not None:
            self._model_type = model_type
        self._model = model

    def _replace_fields(self, table: dict[str, Any]) -> None:
        """Make the field table an exact mirror of ``table``, keeping its order."""
        for path in [path for path in self._fields if path not in table]:
            del self._fields[path]
        for path, value in table.items():
            self._fields.pop(path, None)
            self._fields[path] = value

    def __repr__(self) -> str:
        type_name = getattr(self._model_type, "__name__", self._model_type)
        return f"Document(name={self.name!r}, model_type={type_name}, exists={self.exists})"
