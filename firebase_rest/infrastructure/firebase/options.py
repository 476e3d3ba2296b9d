"""Serializer configuration: naming policy and custom converters.

SerializerOptions is immutable and hashable, so it can be shared process-wide
and used as part of the reflection cache key.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic.alias_generators import to_camel, to_pascal, to_snake

from firebase_rest.core.config import Settings, get_settings

NamingPolicy = Callable[[str], str]

NAMING_POLICIES: dict[str, NamingPolicy | None] = {
    "camel": to_camel,
    "pascal": to_pascal,
    "snake": to_snake,
    "none": None,
}


class FirestoreConverter(ABC):
    """Custom wire representation for one or more types.

    Converters are consulted before the built-in codec on both encode and
    decode. ``from_firestore`` receives the inner value for scalar tags
    (e.g. the string under ``stringValue``) and the whole envelope for
    ``geoPointValue``, ``arrayValue`` and ``mapValue``. Exceptions raised by
    a converter are not propagated: decode yields None and encode yields
    ``nullValue``.
    """

    @abstractmethod
    def can_convert(self, tp: Any) -> bool:
        """Return True when this converter handles the given type."""

    @abstractmethod
    def to_firestore(self, value: Any) -> dict[str, Any] | None:
        """Return a complete typed value envelope, or None for nullValue."""

    @abstractmethod
    def from_firestore(self, raw: Any) -> Any:
        """Return the native value for the raw wire value."""


@dataclass(frozen=True)
class SerializerOptions:
    """Immutable serializer configuration.

    Attributes:
        naming_policy: Policy name ("camel", "pascal", "snake", "none") or a
            callable applied to member names without an explicit wire name.
        converters: Custom converters, checked in order.
    """

    naming_policy: str | NamingPolicy | None = "camel"
    converters: tuple[FirestoreConverter, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.naming_policy, str) and self.naming_policy not in NAMING_POLICIES:
            raise ValueError(
                f"naming_policy must be one of {', '.join(NAMING_POLICIES)}, got: {self.naming_policy!r}"
            )
        if not isinstance(self.converters, tuple):
            object.__setattr__(self, "converters", tuple(self.converters))

    def convert_name(self, name: str) -> str:
        """Apply the naming policy to a member name."""
        policy = self.naming_policy
        if isinstance(policy, str):
            policy = NAMING_POLICIES[policy]
        return policy(name) if policy is not None else name

    def find_converter(self, tp: Any) -> FirestoreConverter | None:
        for converter in self.converters:
            if converter.can_convert(tp):
                return converter
        return None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        converters: tuple[FirestoreConverter, ...] = (),
    ) -> "SerializerOptions":
        """Build options from settings (naming_policy)."""
        settings = settings or get_settings()
        return cls(naming_policy=settings.naming_policy, converters=converters)


DEFAULT_OPTIONS = SerializerOptions()
