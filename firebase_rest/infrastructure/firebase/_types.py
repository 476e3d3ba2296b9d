"""Type introspection helpers shared by the resolver and the codec."""

import collections
import collections.abc as cabc
import types
import typing
from typing import Annotated, Any, ClassVar, Final, TypeVar, Union, get_args, get_origin

_NONE_TYPE = type(None)

# Abstract collection types and the concrete type built for them on decode.
_ABSTRACT_COLLECTIONS: dict[Any, type] = {
    cabc.Iterable: list,
    cabc.Collection: list,
    cabc.Sequence: list,
    cabc.MutableSequence: list,
    cabc.Set: set,
    cabc.MutableSet: set,
    typing.AbstractSet: set,
}
_ABSTRACT_MAPPINGS: tuple[Any, ...] = (cabc.Mapping, cabc.MutableMapping)
_SCALAR_SEQUENCES = (str, bytes, bytearray, memoryview)


def unwrap(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    """Strip Annotated, Optional, Final and ClassVar wrappers.

    Returns:
        (inner type, collected Annotated metadata)
    """
    metadata: list[Any] = []
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp, *extra = get_args(tp)
            metadata.extend(extra)
        elif origin in (Final, ClassVar):
            args = get_args(tp)
            tp = args[0] if args else Any
        elif tp in (Final, ClassVar):
            tp = Any
        elif is_union(tp):
            members = [arg for arg in get_args(tp) if arg is not _NONE_TYPE]
            if len(members) != 1:
                return tp, tuple(metadata)
            tp = members[0]
        else:
            return tp, tuple(metadata)


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def is_any(tp: Any) -> bool:
    """True for types that carry no static information (schema-less decode)."""
    return tp is Any or tp is object or isinstance(tp, (TypeVar, str, typing.ForwardRef)) or is_union(tp)


def is_final_or_classvar(tp: Any) -> bool:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp in (Final, ClassVar) or get_origin(tp) in (Final, ClassVar)


def is_nullable(tp: Any) -> bool:
    """True when None is a valid value for ``tp`` (Optional, Any, object, unresolved)."""
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    if is_union(tp):
        return _NONE_TYPE in get_args(tp)
    return tp is None or tp is _NONE_TYPE or is_any(tp)


def origin_of(tp: Any) -> Any:
    return get_origin(tp) or tp


def mapping_types(tp: Any) -> tuple[Any, Any] | None:
    """(key type, value type) when ``tp`` has the keyed-dictionary capability."""
    origin = origin_of(tp)
    if not isinstance(origin, type) or not issubclass(origin, cabc.Mapping):
        return None
    args = get_args(tp)
    if len(args) == 2:
        return args[0], args[1]
    return Any, Any


def collection_item_type(tp: Any) -> Any | None:
    """Item type when ``tp`` has the collection-add capability (not tuple, str or mapping)."""
    origin = origin_of(tp)
    if origin in _ABSTRACT_COLLECTIONS:
        args = get_args(tp)
        return args[0] if args else Any
    if not isinstance(origin, type):
        return None
    if issubclass(origin, (tuple, cabc.Mapping, *_SCALAR_SEQUENCES)):
        return None
    if not issubclass(origin, (list, set, frozenset, collections.deque, cabc.MutableSequence, cabc.MutableSet)):
        return None
    args = get_args(tp)
    return args[0] if args else Any


def tuple_item_types(tp: Any) -> tuple[tuple[Any, ...], bool] | None:
    """(item types, homogeneous) for tuple types; None for anything else.

    ``tuple[int, ...]`` -> ((int,), True); ``tuple[int, str]`` -> ((int, str), False).
    """
    origin = origin_of(tp)
    if not isinstance(origin, type) or not issubclass(origin, tuple):
        return None
    args = get_args(tp)
    if not args:
        return (Any,), True
    if len(args) == 2 and args[1] is Ellipsis:
        return (args[0],), True
    if args == ((),):
        return (), False
    return tuple(args), False


def new_collection(tp: Any, items: list[Any]) -> Any:
    """Build a collection of ``tp``'s concrete type, appending items in order."""
    origin = origin_of(tp)
    concrete = _ABSTRACT_COLLECTIONS.get(origin, origin)
    if concrete is frozenset or not (hasattr(concrete, "append") or hasattr(concrete, "add")):
        return concrete(items)
    instance = concrete()
    instance.clear()
    add = instance.append if hasattr(instance, "append") else instance.add
    for item in items:
        add(item)
    return instance


def new_mapping(tp: Any) -> Any:
    origin = origin_of(tp)
    if origin in _ABSTRACT_MAPPINGS or not hasattr(origin, "__setitem__"):
        return {}
    return origin()


def type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)
