"""Field reflection: map model members to Firestore wire field names.

Supports dataclasses, pydantic models and plain annotated classes, plus
properties with setters. The inclusion rule, applied once per member
(property merged with its ``_name`` / ``m_name`` backing attribute):

1. Members on the exclusion list, or marked FirebaseIgnore, are skipped.
2. Read-only members (frozen models, Final/ClassVar, properties without a
   setter) are skipped.
3. A FirebaseValue marker names the wire field (blank name -> naming
   policy) and includes the member even on ``@firebase_value_only`` classes.
4. Otherwise, unless the class is ``@firebase_value_only``, the JSON name
   (JsonName marker or pydantic alias) or the naming policy is used.

Wire names are de-duplicated first-wins, properties before fields.
"""

import dataclasses
import inspect
import logging
import typing
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import BaseModel

from firebase_rest.domain.exceptions import (
    FieldPathException,
    InvalidArgumentException,
    ModelConstructionException,
)
from firebase_rest.infrastructure.firebase._types import (
    is_any,
    is_final_or_classvar,
    mapping_types,
    unwrap,
)
from firebase_rest.infrastructure.firebase.attributes import (
    MARKERS_METADATA_KEY,
    FirebaseIgnore,
    FirebaseValue,
    JsonName,
    is_firebase_value_only,
)
from firebase_rest.infrastructure.firebase.options import DEFAULT_OPTIONS, SerializerOptions

logger = logging.getLogger(__name__)

# Members of the observable/synchronization layer; never serialized.
EXCLUDED_MEMBER_NAMES = frozenset(
    {
        "sync_operation",
        "synchronize_property_changed_event",
        "synchronize_property_changing_event",
    }
)

_BACKING_PREFIXES = ("m_", "_")


@dataclass(frozen=True)
class ModelMember:
    """One serializable member of a model type.

    Attributes:
        attribute: Python attribute name used with getattr/setattr.
        wire_name: Firestore field name.
        annotation: Declared type (may still carry Annotated/Optional).
    """

    attribute: str
    wire_name: str
    annotation: Any


@dataclass(frozen=True)
class TypedDocumentFieldPair:
    """A resolved path segment: the declared type and its wire field name."""

    type: Any
    document_field_name: str


@dataclass
class _Candidate:
    attribute: str
    annotation: Any
    writable: bool
    markers: list[Any]
    json_name: str | None = None


def _property_name(backing_name: str) -> str | None:
    for prefix in _BACKING_PREFIXES:
        if backing_name.startswith(prefix) and len(backing_name) > len(prefix):
            return backing_name[len(prefix):].lstrip("_") or None
    return None


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError) as exc:
        logger.debug("Unresolved annotations on %r: %s", obj, exc)
        hints: dict[str, Any] = {}
        for klass in reversed(getattr(obj, "__mro__", (obj,))):
            if klass is not object:
                hints.update(inspect.get_annotations(klass))
        return hints


def _evaluate(annotation: Any, owner: type) -> Any:
    """Resolve a string annotation in the namespace of the class that declared it."""
    if not isinstance(annotation, str):
        return annotation
    probe = type("_Probe", (), {"__annotations__": {"value": annotation}, "__module__": owner.__module__})
    try:
        return typing.get_type_hints(probe, localns=dict(vars(owner)), include_extras=True)["value"]
    except (NameError, TypeError, SyntaxError):
        return Any


def _markers_from(annotation: Any) -> list[Any]:
    _, metadata = unwrap(annotation)
    return [m for m in metadata if isinstance(m, (FirebaseValue, JsonName, FirebaseIgnore))]


def _properties(cls: type) -> dict[str, property]:
    found: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, property):
                found[name] = value
            elif name in found:
                del found[name]
    return found


def _property_annotation(prop: property) -> Any:
    if prop.fget is not None:
        hints = _type_hints(prop.fget)
        if "return" in hints:
            return hints["return"]
    if prop.fset is not None:
        hints = _type_hints(prop.fset)
        params = [name for name in hints if name != "return"]
        if params:
            return hints[params[0]]
    return Any


def _data_candidates(cls: type) -> dict[str, _Candidate]:
    """Annotated data attributes in declaration order."""
    candidates: dict[str, _Candidate] = {}

    if isinstance(cls, type) and issubclass(cls, BaseModel):
        # pydantic has already resolved annotations and moved Annotated
        # metadata onto FieldInfo
        frozen_model = bool(cls.model_config.get("frozen"))
        for name, info in cls.model_fields.items():
            annotation = info.annotation
            markers = _markers_from(annotation) + [
                m for m in info.metadata if isinstance(m, (FirebaseValue, JsonName, FirebaseIgnore))
            ]
            if info.exclude:
                markers.append(FirebaseIgnore())
            candidates[name] = _Candidate(
                attribute=name,
                annotation=annotation,
                writable=not (frozen_model or info.frozen),
                markers=markers,
                json_name=info.serialization_alias or info.alias,
            )
        for klass in reversed(cls.__mro__):
            raw = inspect.get_annotations(klass)
            for name in getattr(cls, "__private_attributes__", {}):
                if name in raw:
                    annotation = _evaluate(raw[name], klass)
                    candidates[name] = _Candidate(name, annotation, True, _markers_from(annotation))
        return candidates

    hints = _type_hints(cls)

    if dataclasses.is_dataclass(cls):
        frozen = cls.__dataclass_params__.frozen
        for f in dataclasses.fields(cls):
            annotation = hints.get(f.name, f.type)
            markers = _markers_from(annotation) + list(f.metadata.get(MARKERS_METADATA_KEY, ()))
            candidates[f.name] = _Candidate(
                attribute=f.name,
                annotation=annotation,
                writable=not frozen,
                markers=markers,
            )
        return candidates

    for name, annotation in hints.items():
        if is_final_or_classvar(annotation):
            candidates[name] = _Candidate(name, annotation, False, _markers_from(annotation))
            continue
        candidates[name] = _Candidate(name, annotation, True, _markers_from(annotation))
    return candidates


def _candidates(cls: type) -> list[_Candidate]:
    """Properties first (merged with backing markers), then remaining data members."""
    data = _data_candidates(cls)
    props = _properties(cls)
    ordered: list[_Candidate] = []

    backing_by_property: dict[str, _Candidate] = {}
    for name, candidate in data.items():
        prop_name = _property_name(name)
        if prop_name is not None and prop_name in props and prop_name not in backing_by_property:
            backing_by_property[prop_name] = candidate

    for name, prop in props.items():
        if prop.fset is None:
            ordered.append(_Candidate(name, Any, False, []))
            continue
        annotation = _property_annotation(prop)
        backing = backing_by_property.get(name)
        if annotation is Any and backing is not None:
            annotation = backing.annotation
        markers = _markers_from(annotation)
        json_name = None
        if backing is not None:
            markers += backing.markers
            json_name = backing.json_name
        ordered.append(
            _Candidate(
                attribute=name,
                annotation=annotation,
                writable=prop.fset is not None,
                markers=markers,
                json_name=json_name,
            )
        )

    paired = {id(c) for c in backing_by_property.values()}
    for name, candidate in data.items():
        if id(candidate) in paired or name in props:
            continue
        if name.startswith("_"):
            continue
        ordered.append(candidate)
    return ordered


def _wire_name(candidate: _Candidate, value_only: bool, options: SerializerOptions) -> str | None:
    """Apply the inclusion rule; None means the member is excluded."""
    if candidate.attribute in EXCLUDED_MEMBER_NAMES:
        return None
    if any(isinstance(m, FirebaseIgnore) for m in candidate.markers):
        return None
    if not candidate.writable:
        return None

    firebase_value = next((m for m in candidate.markers if isinstance(m, FirebaseValue)), None)
    if firebase_value is not None:
        name = firebase_value.name
    elif not value_only:
        json_marker = next((m for m in candidate.markers if isinstance(m, JsonName)), None)
        name = json_marker.name if json_marker is not None else candidate.json_name
    else:
        return None

    if name is None or not name.strip():
        name = options.convert_name(candidate.attribute)
    return name


@lru_cache(maxsize=None)
def _resolve_members(cls: type, options: SerializerOptions) -> tuple[ModelMember, ...]:
    value_only = is_firebase_value_only(cls)
    members: list[ModelMember] = []
    seen_wire: set[str] = set()
    seen_attr: set[str] = set()
    for candidate in _candidates(cls):
        wire_name = _wire_name(candidate, value_only, options)
        if wire_name is None or wire_name in seen_wire or candidate.attribute in seen_attr:
            continue
        seen_wire.add(wire_name)
        seen_attr.add(candidate.attribute)
        members.append(ModelMember(candidate.attribute, wire_name, candidate.annotation))
    return tuple(members)


def resolve_members(cls: type, options: SerializerOptions | None = None) -> tuple[ModelMember, ...]:
    """Return the serializable members of ``cls`` in emission order.

    Memoized per (cls, options); both are immutable for the process lifetime.
    """
    return _resolve_members(cls, options or DEFAULT_OPTIONS)


def members_by_wire_name(cls: type, options: SerializerOptions | None = None) -> dict[str, ModelMember]:
    return {member.wire_name: member for member in resolve_members(cls, options)}


def get_member(cls: type, attribute: str, options: SerializerOptions | None = None) -> ModelMember | None:
    """Find an included member by its Python attribute name."""
    for member in resolve_members(cls, options):
        if member.attribute == attribute:
            return member
    return None


def get_document_field_name(cls: type, attribute: str, options: SerializerOptions | None = None) -> str | None:
    member = get_member(cls, attribute, options)
    return member.wire_name if member is not None else None


def get_document_field_path(
    cls: Any,
    path: str | Sequence[str],
    options: SerializerOptions | None = None,
) -> list[TypedDocumentFieldPair]:
    """Resolve a dotted member path into wire field names.

    A segment under a mapping type is a dictionary key and the next type in
    context is the mapping's value type; any other segment must name an
    included member.

    Args:
        cls: Root model type.
        path: "address.city" or ["address", "city"].
        options: Serializer options.

    Returns:
        One TypedDocumentFieldPair per segment.

    Raises:
        InvalidArgumentException: If the path is empty.
        FieldPathException: If a segment does not resolve.
    """
    segments = path.split(".") if isinstance(path, str) else list(path)
    if not segments or any(not segment for segment in segments):
        raise InvalidArgumentException(f"Invalid field path: {path!r}", "path")

    pairs: list[TypedDocumentFieldPair] = []
    current, _ = unwrap(cls)
    for segment in segments:
        types_ = mapping_types(current)
        if types_ is not None:
            value_type = types_[1]
            pairs.append(TypedDocumentFieldPair(value_type, segment))
            current, _ = unwrap(value_type)
            continue
        if is_any(current) or not isinstance(current, type):
            raise FieldPathException(
                current,
                segment,
                f'Cannot resolve "{segment}": type of its parent could not be determined',
            )
        member = get_member(current, segment, options)
        if member is None:
            raise FieldPathException(current, segment)
        pairs.append(TypedDocumentFieldPair(member.annotation, member.wire_name))
        current, _ = unwrap(member.annotation)
    return pairs


def document_field_path(pairs: Iterable[TypedDocumentFieldPair]) -> str:
    return ".".join(pair.document_field_name for pair in pairs)


def construct_model(cls: type) -> Any:
    """Create an empty model instance.

    pydantic models are built with model_construct() (no validation);
    everything else must accept a no-argument call.

    Raises:
        ModelConstructionException: If the type cannot be instantiated.
    """
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return cls.model_construct()
    try:
        return cls()
    except TypeError as exc:
        raise ModelConstructionException(cls, str(exc)) from exc
