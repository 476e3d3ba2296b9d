"""Encode/decode Python values to/from Firestore REST typed values.

A typed value is a one-key envelope such as ``{"stringValue": "x"}`` or
``{"mapValue": {"fields": {...}}}``. Decoding is driven by the declared
target type; ``Any``/``object`` targets infer the Python type from the tag.

Both directions can record a flat table of dotted field paths
(``address.city``, ``items.0``) to leaf values while they walk.

Encode steps return the finished envelope, or None when there is nothing
to write (e.g. an object with no serializable members); parents only add a
key for children that produced content.
"""

import base64
import binascii
import enum
import logging
import math
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, get_args, get_origin

from firebase_rest.domain.exceptions import ModelConstructionException, ValueDecodeError
from firebase_rest.domain.value_objects.core import DocumentReference, GeoPoint
from firebase_rest.infrastructure.firebase._types import (
    collection_item_type,
    is_any,
    is_nullable,
    mapping_types,
    new_collection,
    new_mapping,
    origin_of,
    tuple_item_types,
    type_name,
    unwrap,
)
from firebase_rest.infrastructure.firebase.members import (
    construct_model,
    members_by_wire_name,
    resolve_members,
)
from firebase_rest.infrastructure.firebase.options import DEFAULT_OPTIONS, SerializerOptions
from firebase_rest.shared.utils.datetime import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_NON_FINITE = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}

NULL_VALUE: dict[str, Any] = {"nullValue": None}

# Targets that can never be populated from a mapValue.
_NON_OBJECT_TYPES = (str, bytes, bytearray, int, float, Decimal, datetime, enum.Enum, DocumentReference)


class _Missing:
    """Sentinel: nothing to assign."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class ValueTag(str, enum.Enum):
    """The wire tags of a Firestore typed value."""

    NULL = "nullValue"
    BOOLEAN = "booleanValue"
    INTEGER = "integerValue"
    DOUBLE = "doubleValue"
    TIMESTAMP = "timestampValue"
    STRING = "stringValue"
    BYTES = "bytesValue"
    REFERENCE = "referenceValue"
    GEO_POINT = "geoPointValue"
    ARRAY = "arrayValue"
    MAP = "mapValue"


_SCALAR_TAGS = frozenset(
    {
        ValueTag.NULL,
        ValueTag.BOOLEAN,
        ValueTag.INTEGER,
        ValueTag.DOUBLE,
        ValueTag.TIMESTAMP,
        ValueTag.STRING,
        ValueTag.BYTES,
        ValueTag.REFERENCE,
    }
)

_LITERAL_TAGS = frozenset(
    {ValueTag.BOOLEAN, ValueTag.INTEGER, ValueTag.DOUBLE, ValueTag.STRING, ValueTag.BYTES}
)

# Python type inferred from the tag when the target carries no type information.
_TAG_TYPES: dict[ValueTag, Any] = {
    ValueTag.BOOLEAN: bool,
    ValueTag.INTEGER: int,
    ValueTag.DOUBLE: float,
    ValueTag.TIMESTAMP: datetime,
    ValueTag.STRING: str,
    ValueTag.BYTES: bytes,
    ValueTag.REFERENCE: DocumentReference,
    ValueTag.GEO_POINT: GeoPoint,
    ValueTag.ARRAY: list[Any],
    ValueTag.MAP: dict[str, Any],
}


@dataclass(frozen=True)
class TypedValue:
    """A parsed envelope: its tag and the inner JSON value."""

    tag: ValueTag
    inner: Any

    @classmethod
    def parse(cls, raw: Any) -> "TypedValue | None":
        """Return the first recognised tag of ``raw``; None for unknown or absent tags."""
        if not isinstance(raw, Mapping):
            return None
        for key, inner in raw.items():
            try:
                return cls(ValueTag(key), inner)
            except ValueError:
                continue
        return None


def join_path(parent: str | None, name: Any) -> str:
    return str(name) if not parent else f"{parent}.{name}"


def _record(table: dict[str, Any] | None, path: str | None, value: Any) -> None:
    if table is not None and path:
        table[path] = value


def _discard(table: dict[str, Any] | None, path: str) -> None:
    if table is None:
        return
    prefix = path + "."
    for key in [key for key in table if key == path or key.startswith(prefix)]:
        del table[key]


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------


def decode_value(
    raw: Any,
    tp: Any = Any,
    options: SerializerOptions | None = None,
    *,
    existing: Any = MISSING,
    path: str | None = None,
    table: dict[str, Any] | None = None,
) -> Any:
    """Decode one typed value into ``tp``.

    Args:
        raw: The envelope, e.g. {"integerValue": "5"}.
        tp: Target type; Any/object decodes schema-less.
        options: Serializer options.
        existing: Current value of the target member; dicts and objects are
            updated in place.
        path: Dotted field path of this value, for the flat table.
        table: Flat field table to record leaves into.

    Returns:
        The decoded value, or MISSING when the tag is unknown or absent.

    Raises:
        ValueDecodeError: If the value cannot be converted to ``tp``.
        ModelConstructionException: If a nested model cannot be created.
    """
    options = options or DEFAULT_OPTIONS
    typed = TypedValue.parse(raw)
    if typed is None:
        return MISSING

    target, _ = unwrap(tp)

    converter = options.find_converter(target) if not is_any(target) else None
    if converter is not None:
        payload = typed.inner if typed.tag in _SCALAR_TAGS else raw
        try:
            value = converter.from_firestore(payload)
        except Exception as exc:  # converters are user code; decode is best-effort
            logger.debug("Converter %r failed at %s: %s", converter, path, exc)
            value = None
        _record(table, path, value)
        return value

    if typed.tag is ValueTag.NULL:
        _record(table, path, None)
        return None

    if get_origin(target) is Literal:
        value = _decode_literal(typed.tag, typed.inner, target)
        _record(table, path, value)
        return value

    if is_any(target):
        target = _TAG_TYPES[typed.tag]

    if typed.tag is ValueTag.ARRAY:
        return _decode_array(typed.inner, target, options, path, table)
    if typed.tag is ValueTag.MAP:
        return _decode_map(typed.inner, target, options, existing, path, table)
    if typed.tag is ValueTag.GEO_POINT:
        value = _decode_geo_point(typed.inner, target)
    elif typed.tag is ValueTag.REFERENCE:
        value = _decode_reference(typed.inner, target)
    else:
        value = _decode_scalar(typed.tag, typed.inner, target)
    _record(table, path, value)
    return value


def _decode_scalar(tag: ValueTag, inner: Any, target: Any) -> Any:
    origin = origin_of(target)
    if not isinstance(origin, type):
        raise ValueDecodeError(tag.value, target, "unsupported target type")

    if issubclass(origin, enum.Enum):
        return _decode_enum(tag, inner, origin)

    if origin is bool:
        if tag is ValueTag.BOOLEAN and isinstance(inner, bool):
            return inner
        raise ValueDecodeError(tag.value, target, "expected a boolean")

    if issubclass(origin, int) and origin is not bool:
        if tag is ValueTag.INTEGER:
            number = _parse_integer(inner, target)
        elif tag is ValueTag.DOUBLE:
            real = _parse_double(inner, target)
            if not real.is_integer():
                raise ValueDecodeError(tag.value, target, f"{real!r} is not integral")
            number = int(real)
        else:
            raise ValueDecodeError(tag.value, target, "expected a number")
        return origin(number)

    if issubclass(origin, float):
        if tag is ValueTag.DOUBLE:
            return origin(_parse_double(inner, target))
        if tag is ValueTag.INTEGER:
            return origin(_parse_integer(inner, target))
        raise ValueDecodeError(tag.value, target, "expected a number")

    if issubclass(origin, Decimal):
        if tag not in (ValueTag.STRING, ValueTag.INTEGER, ValueTag.DOUBLE):
            raise ValueDecodeError(tag.value, target, "expected a decimal string or number")
        if isinstance(inner, bool):
            raise ValueDecodeError(tag.value, target, "expected a decimal string or number")
        try:
            return origin(str(inner))
        except InvalidOperation as exc:
            raise ValueDecodeError(tag.value, target, f"invalid decimal {inner!r}") from exc

    if issubclass(origin, datetime):
        if tag is not ValueTag.TIMESTAMP:
            raise ValueDecodeError(tag.value, target, "expected a timestamp")
        try:
            return parse_timestamp(inner)
        except ValueError as exc:
            raise ValueDecodeError(tag.value, target, str(exc)) from exc

    if issubclass(origin, str):
        if tag is ValueTag.STRING and isinstance(inner, str):
            return inner
        raise ValueDecodeError(tag.value, target, "expected a string")

    if issubclass(origin, (bytes, bytearray)):
        if tag is not ValueTag.BYTES or not isinstance(inner, str):
            raise ValueDecodeError(tag.value, target, "expected base64 bytes")
        try:
            data = base64.standard_b64decode(inner)
        except (binascii.Error, ValueError) as exc:
            raise ValueDecodeError(tag.value, target, "invalid base64") from exc
        return origin(data)

    raise ValueDecodeError(tag.value, target, "unsupported target type")


def _parse_integer(inner: Any, target: Any) -> int:
    if isinstance(inner, bool):
        raise ValueDecodeError(ValueTag.INTEGER.value, target, "expected an integer")
    try:
        number = int(inner)
    except (TypeError, ValueError) as exc:
        raise ValueDecodeError(ValueTag.INTEGER.value, target, f"invalid integer {inner!r}") from exc
    if isinstance(inner, float) and inner != number:
        raise ValueDecodeError(ValueTag.INTEGER.value, target, f"invalid integer {inner!r}")
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueDecodeError(ValueTag.INTEGER.value, target, "out of 64-bit range")
    return number


def _parse_double(inner: Any, target: Any) -> float:
    if isinstance(inner, str) and inner in _NON_FINITE:
        return _NON_FINITE[inner]
    if isinstance(inner, bool) or not isinstance(inner, (int, float)):
        raise ValueDecodeError(ValueTag.DOUBLE.value, target, f"invalid double {inner!r}")
    return float(inner)


def _decode_enum(tag: ValueTag, inner: Any, enum_type: type[enum.Enum]) -> enum.Enum:
    if tag is ValueTag.INTEGER:
        candidate: Any = _parse_integer(inner, enum_type)
    elif tag is ValueTag.DOUBLE:
        candidate = _parse_double(inner, enum_type)
    else:
        candidate = inner
    try:
        return enum_type(candidate)
    except ValueError:
        pass
    if isinstance(candidate, str) and candidate in enum_type.__members__:
        return enum_type[candidate]
    raise ValueDecodeError(tag.value, enum_type, f"{candidate!r} is not a member")


def _decode_literal(tag: ValueTag, inner: Any, target: Any) -> Any:
    """Decode against the tag's native type, then match one of the literal choices."""
    if tag not in _LITERAL_TAGS:
        raise ValueDecodeError(tag.value, target, "literal values must be scalars")
    value = _decode_scalar(tag, inner, _TAG_TYPES[tag])
    for choice in get_args(target):
        candidate = choice.value if isinstance(choice, enum.Enum) else choice
        if type(candidate) is type(value) and candidate == value:
            return choice
    raise ValueDecodeError(tag.value, target, f"{value!r} is not one of the allowed values")


def _decode_reference(inner: Any, target: Any) -> DocumentReference:
    if origin_of(target) is not DocumentReference:
        raise ValueDecodeError(ValueTag.REFERENCE.value, target, "target is not a document reference")
    try:
        return DocumentReference.parse(inner)
    except ValueError as exc:
        raise ValueDecodeError(ValueTag.REFERENCE.value, target, str(exc)) from exc


def _decode_geo_point(inner: Any, target: Any) -> GeoPoint:
    origin = origin_of(target)
    if not isinstance(origin, type) or not issubclass(origin, GeoPoint):
        raise ValueDecodeError(ValueTag.GEO_POINT.value, target, "target is not a geo point")
    point = origin()
    if isinstance(inner, Mapping) and "latitude" in inner and "longitude" in inner:
        point.latitude = _parse_double(inner["latitude"], float)
        point.longitude = _parse_double(inner["longitude"], float)
    return point


def _decode_item(
    raw: Any,
    tp: Any,
    options: SerializerOptions,
    existing: Any,
    path: str | None,
    table: dict[str, Any] | None,
) -> Any:
    """Decode a collection item or dictionary value; failures become None."""
    try:
        value = decode_value(raw, tp, options, existing=existing, path=path, table=table)
    except ValueDecodeError as exc:
        logger.debug("Setting %s to None: %s", path, exc.message)
        value = None
    if value is MISSING:
        value = None
    if value is None:
        _record(table, path, None)
    return value


def _decode_array(
    inner: Any,
    target: Any,
    options: SerializerOptions,
    path: str | None,
    table: dict[str, Any] | None,
) -> Any:
    values = inner.get("values") if isinstance(inner, Mapping) else None
    values = values or []
    if not isinstance(values, list):
        raise ValueDecodeError(ValueTag.ARRAY.value, target, "values must be a list")

    tuple_types = tuple_item_types(target)
    if tuple_types is not None:
        item_types, homogeneous = tuple_types
        items = []
        for index, item in enumerate(values):
            if homogeneous:
                item_type = item_types[0]
            else:
                item_type = item_types[index] if index < len(item_types) else Any
            items.append(_decode_item(item, item_type, options, MISSING, join_path(path, index), table))
        origin = origin_of(target)
        # named tuples take their items positionally
        result: Any = origin(*items) if hasattr(origin, "_fields") else tuple(items)
    else:
        item_type = collection_item_type(target)
        if item_type is None:
            raise ValueDecodeError(ValueTag.ARRAY.value, target, "target is not a collection")
        items = [
            _decode_item(item, item_type, options, MISSING, join_path(path, index), table)
            for index, item in enumerate(values)
        ]
        try:
            result = new_collection(target, items)
        except TypeError as exc:
            raise ModelConstructionException(origin_of(target), str(exc)) from exc

    if not values:
        _record(table, path, result)
    return result


def _decode_map(
    inner: Any,
    target: Any,
    options: SerializerOptions,
    existing: Any,
    path: str | None,
    table: dict[str, Any] | None,
) -> Any:
    fields = inner.get("fields") if isinstance(inner, Mapping) else None
    fields = fields or {}
    if not isinstance(fields, Mapping):
        raise ValueDecodeError(ValueTag.MAP.value, target, "fields must be an object")

    if mapping_types(target) is not None:
        return decode_mapping(fields, target, options, existing=existing, path=path, table=table)

    origin = origin_of(target)
    if not isinstance(origin, type) or issubclass(origin, _NON_OBJECT_TYPES):
        raise ValueDecodeError(ValueTag.MAP.value, target, "target is not an object or mapping")
    instance = existing if isinstance(existing, origin) else construct_model(origin)
    decode_object(fields, origin, options, instance=instance, path=path, table=table)
    if not fields:
        _record(table, path, instance)
    return instance


def _convert_key(key: str, key_type: Any) -> Any:
    key_type, _ = unwrap(key_type)
    if is_any(key_type) or key_type is str:
        return key
    origin = origin_of(key_type)
    if isinstance(origin, type) and issubclass(origin, enum.Enum):
        return _decode_enum(ValueTag.STRING, key, origin)
    if origin is bool:
        if key in ("true", "True"):
            return True
        if key in ("false", "False"):
            return False
        raise ValueDecodeError(ValueTag.MAP.value, key_type, f"invalid key {key!r}")
    try:
        return origin(key)
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise ValueDecodeError(ValueTag.MAP.value, key_type, f"invalid key {key!r}") from exc


def decode_mapping(
    fields: Mapping[str, Any],
    target: Any,
    options: SerializerOptions | None = None,
    *,
    existing: Any = MISSING,
    path: str | None = None,
    table: dict[str, Any] | None = None,
) -> Any:
    """Decode a ``fields`` map into a dictionary type.

    The result mirrors the wire map exactly: keys of an existing dictionary
    that are absent from the wire are removed.
    """
    options = options or DEFAULT_OPTIONS
    key_type, value_type = mapping_types(target) or (Any, Any)
    origin = origin_of(target)
    if isinstance(existing, MutableMapping) and isinstance(existing, origin):
        result = existing
    else:
        try:
            result = new_mapping(target)
        except TypeError as exc:
            raise ModelConstructionException(origin, str(exc)) from exc

    seen: set[Any] = set()
    for wire_key, raw in fields.items():
        try:
            key = _convert_key(wire_key, key_type)
        except ValueDecodeError as exc:
            logger.debug("Skipping key at %s: %s", join_path(path, wire_key), exc.message)
            continue
        seen.add(key)
        result[key] = _decode_item(
            raw, value_type, options, result.get(key, MISSING), join_path(path, wire_key), table
        )
    for stale in [key for key in result if key not in seen]:
        del result[stale]

    if not fields:
        _record(table, path, result)
    return result


def decode_object(
    fields: Mapping[str, Any],
    cls: type,
    options: SerializerOptions | None = None,
    *,
    instance: Any = MISSING,
    path: str | None = None,
    table: dict[str, Any] | None = None,
) -> Any:
    """Decode a ``fields`` map onto a model instance, member by member.

    A member whose value cannot be converted keeps its current value; the
    other members are still assigned. A null for a member that does not
    accept None is treated the same way.
    """
    options = options or DEFAULT_OPTIONS
    if instance is MISSING:
        instance = construct_model(cls)
    by_wire = members_by_wire_name(cls, options)
    for wire_name, raw in fields.items():
        member = by_wire.get(wire_name)
        if member is None:
            continue
        child_path = join_path(path, wire_name)
        current = getattr(instance, member.attribute, MISSING)
        try:
            value = decode_value(
                raw, member.annotation, options, existing=current, path=child_path, table=table
            )
        except ValueDecodeError as exc:
            logger.debug("Skipping field %s: %s", child_path, exc.message)
            continue
        if value is MISSING:
            continue
        if value is None and not is_nullable(member.annotation):
            logger.debug("Null for non-optional field %s; keeping current value", child_path)
            _discard(table, child_path)
            continue
        try:
            setattr(instance, member.attribute, value)
        except (AttributeError, TypeError, ValueError) as exc:
            logger.debug("Cannot assign %s.%s: %s", type_name(cls), member.attribute, exc)
            _discard(table, child_path)
    return instance


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


def _static_type(value: Any, tp: Any) -> Any:
    """Declared type when it describes ``value``; otherwise the runtime type."""
    target, _ = unwrap(tp)
    if is_any(target):
        return type(value)
    origin = origin_of(target)
    if not isinstance(origin, type):
        return type(value)
    if isinstance(value, origin):
        return target
    if origin is float and isinstance(value, int) and not isinstance(value, bool):
        return target
    if issubclass(origin, (bytes, bytearray)) and isinstance(value, (bytes, bytearray, memoryview)):
        return target
    return type(value)


def encode_value(
    value: Any,
    tp: Any = Any,
    options: SerializerOptions | None = None,
    *,
    path: str | None = None,
    table: dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    """Encode one value as a typed value envelope.

    Args:
        value: Value to encode.
        tp: Declared type; element types of collections and mappings come
            from here. Falls back to the runtime type.
        options: Serializer options.
        path: Dotted field path of this value, for the flat table.
        table: Flat field table to record leaves into.

    Returns:
        The envelope, or None when there is nothing to write.
    """
    options = options or DEFAULT_OPTIONS
    if value is None or value is MISSING:
        _record(table, path, None)
        return dict(NULL_VALUE)

    target = _static_type(value, tp)
    converter = options.find_converter(target)
    if converter is None and target is not type(value):
        converter = options.find_converter(type(value))
    if converter is not None:
        try:
            envelope = converter.to_firestore(value)
        except Exception as exc:  # converters are user code; fall back to nullValue
            logger.debug("Converter %r failed at %s: %s", converter, path, exc)
            envelope = None
        if not envelope:
            envelope = dict(NULL_VALUE)
        _record(table, path, value)
        return envelope

    origin = origin_of(target)
    tuple_types = tuple_item_types(target)

    if isinstance(value, enum.Enum):
        envelope = encode_value(value.value, Any, options)
        _record(table, path, value)
        return envelope

    if origin is bool:
        envelope = {ValueTag.BOOLEAN.value: bool(value)}
    elif issubclass(origin, int):
        number = int(value)
        if not _INT64_MIN <= number <= _INT64_MAX:
            logger.debug("Integer at %s out of 64-bit range; not written", path)
            return None
        envelope = {ValueTag.INTEGER.value: str(number)}
    elif issubclass(origin, float):
        envelope = {ValueTag.DOUBLE.value: _encode_double(float(value))}
    elif issubclass(origin, Decimal):
        # no decimal primitive on the wire
        envelope = {ValueTag.STRING.value: str(value)}
    elif issubclass(origin, datetime):
        envelope = {ValueTag.TIMESTAMP.value: format_timestamp(value)}
    elif issubclass(origin, str):
        envelope = {ValueTag.STRING.value: str(value)}
    elif issubclass(origin, (bytes, bytearray, memoryview)):
        envelope = {ValueTag.BYTES.value: base64.standard_b64encode(bytes(value)).decode("ascii")}
    elif issubclass(origin, DocumentReference):
        envelope = {ValueTag.REFERENCE.value: value.name}
    elif issubclass(origin, GeoPoint):
        envelope = {
            ValueTag.GEO_POINT.value: {
                "latitude": float(value.latitude),
                "longitude": float(value.longitude),
            }
        }
    elif tuple_types is not None:
        item_types, homogeneous = tuple_types
        types_ = [
            item_types[0] if homogeneous else (item_types[i] if i < len(item_types) else Any)
            for i in range(len(value))
        ]
        return _encode_array(value, types_, options, path, table)
    elif mapping_types(target) is not None:
        return _encode_mapping(value, target, options, path, table)
    elif collection_item_type(target) is not None:
        item_type = collection_item_type(target)
        return _encode_array(value, [item_type] * len(value), options, path, table)
    else:
        fields = encode_object(value, type(value), options, path=path, table=table)
        if not fields:
            logger.debug("%s at %s has no serializable members; not written", type_name(type(value)), path)
            return None
        return {ValueTag.MAP.value: {"fields": fields}}

    _record(table, path, value)
    return envelope


def _encode_double(number: float) -> float | str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    return number


def _encode_array(
    items: Any,
    item_types: list[Any],
    options: SerializerOptions,
    path: str | None,
    table: dict[str, Any] | None,
) -> dict[str, Any]:
    values = []
    for index, (item, item_type) in enumerate(zip(items, item_types, strict=False)):
        envelope = encode_value(item, item_type, options, path=join_path(path, index), table=table)
        # keep positions stable
        values.append(envelope if envelope is not None else dict(NULL_VALUE))
    if not values:
        _record(table, path, items)
    return {ValueTag.ARRAY.value: {"values": values}}


def _wire_key(key: Any) -> str:
    if isinstance(key, enum.Enum):
        key = key.value
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def encode_mapping(
    value: Mapping[Any, Any],
    tp: Any = Any,
    options: SerializerOptions | None = None,
    *,
    path: str | None = None,
    table: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Encode a dictionary as a ``fields`` map keyed by each entry's key."""
    options = options or DEFAULT_OPTIONS
    _, value_type = mapping_types(unwrap(tp)[0]) or (Any, Any)
    fields: dict[str, Any] = {}
    for key, item in value.items():
        wire_key = _wire_key(key)
        if wire_key in fields:
            continue
        envelope = encode_value(item, value_type, options, path=join_path(path, wire_key), table=table)
        if envelope is not None:
            fields[wire_key] = envelope
    return fields


def _encode_mapping(
    value: Mapping[Any, Any],
    target: Any,
    options: SerializerOptions,
    path: str | None,
    table: dict[str, Any] | None,
) -> dict[str, Any]:
    fields = encode_mapping(value, target, options, path=path, table=table)
    if not value:
        _record(table, path, value)
    return {ValueTag.MAP.value: {"fields": fields}}


def encode_object(
    obj: Any,
    cls: type | None = None,
    options: SerializerOptions | None = None,
    *,
    path: str | None = None,
    table: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Encode a model instance's members as a ``fields`` map.

    Members are emitted in resolver order; a member whose value produces
    nothing is omitted.
    """
    options = options or DEFAULT_OPTIONS
    fields: dict[str, Any] = {}
    for member in resolve_members(cls or type(obj), options):
        value = getattr(obj, member.attribute, MISSING)
        if value is MISSING:
            continue
        envelope = encode_value(
            value,
            member.annotation,
            options,
            path=join_path(path, member.wire_name),
            table=table,
        )
        if envelope is not None:
            fields[member.wire_name] = envelope
    return fields


def encode_document(data: Mapping[str, Any], options: SerializerOptions | None = None) -> dict[str, Any]:
    """Convert a plain dict to the REST Document ``fields`` shape."""
    return {"fields": encode_mapping(data, dict[str, Any], options)}


def decode_document(document: Mapping[str, Any] | None, options: SerializerOptions | None = None) -> dict[str, Any]:
    """Convert a REST Document's ``fields`` to a plain dict (schema-less)."""
    if not document:
        return {}
    return decode_mapping(document.get("fields") or {}, dict[str, Any], options)
