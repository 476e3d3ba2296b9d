"""Markers that override how model members map to Firestore wire fields.

Markers are placed in ``typing.Annotated`` metadata, in dataclass field
metadata (see ``firebase_field``) or on a property getter's return
annotation. A marker on a backing attribute (``_name`` / ``m_name``)
applies to the paired property ``name``.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, TypeVar

MARKERS_METADATA_KEY = "firebase"
_VALUE_ONLY_ATTR = "__firebase_value_only__"

C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class FirebaseValue:
    """Explicit wire name for a member.

    A blank or missing name falls back to the naming policy. Members with
    this marker are included even on ``@firebase_value_only`` classes, and
    the name takes precedence over any JSON name.
    """

    name: str | None = None


@dataclass(frozen=True)
class JsonName:
    """JSON property name, used when no FirebaseValue marker is present."""

    name: str


@dataclass(frozen=True)
class FirebaseIgnore:
    """Exclude a member from Firestore serialization."""


def firebase_value_only(cls: C) -> C:
    """Class decorator: only members carrying a FirebaseValue marker are serialized."""
    setattr(cls, _VALUE_ONLY_ATTR, True)
    return cls


def is_firebase_value_only(cls: type) -> bool:
    return bool(getattr(cls, _VALUE_ONLY_ATTR, False))


def firebase_field(
    name: str | None = None,
    *,
    json_name: str | None = None,
    ignore: bool = False,
    **kwargs: Any,
) -> Any:
    """dataclasses.field() with Firestore markers attached as metadata.

    Args:
        name: Explicit wire name (FirebaseValue). Pass "" to mark the field
            without renaming it.
        json_name: JSON property name (JsonName).
        ignore: Exclude the field (FirebaseIgnore).
        **kwargs: Forwarded to dataclasses.field (default, default_factory, ...).

    Returns:
        A dataclass Field.
    """
    markers: list[Any] = []
    if name is not None:
        markers.append(FirebaseValue(name))
    if json_name is not None:
        markers.append(JsonName(json_name))
    if ignore:
        markers.append(FirebaseIgnore())
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[MARKERS_METADATA_KEY] = tuple(markers)
    return dataclasses.field(metadata=metadata, **kwargs)
