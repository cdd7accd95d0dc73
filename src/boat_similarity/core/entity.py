"""
Entity and field-value representation.

Each attribute on an entity is either Present(value) or ABSENT. Absence is
an explicit state, so Present(0), Present("") and Present(frozenset())
remain real values rather than being mistaken for missing data.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Union

from .errors import ValidationError


class Absent:
    """Marker for an attribute the upstream collaborator did not supply."""

    _instance: ClassVar["Absent | None"] = None
    is_present: ClassVar[bool] = False

    def __new__(cls) -> "Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (Absent, ())


ABSENT = Absent()


@dataclass(frozen=True)
class Present:
    """An attribute value supplied by an upstream collaborator."""

    value: Any
    is_present: ClassVar[bool] = True


FieldValue = Union[Present, Absent]


@dataclass(frozen=True, eq=True)
class Entity:
    """
    A boat record as seen by the comparators.

    Attributes:
        id: Unique, stable identifier (also the ranking tie-breaker)
        attributes: Field name -> Present value. Fields not listed are absent.
    """

    id: str
    attributes: Mapping[str, Present] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValidationError("Entity id must be a non-empty string", repr(self.id))

        cleaned: dict[str, Present] = {}
        for name, value in dict(self.attributes).items():
            if isinstance(value, Absent):
                continue
            if not isinstance(value, Present):
                raise ValidationError(
                    "Entity attributes must be Present or ABSENT",
                    f"{name}={value!r}",
                )
            cleaned[name] = value
        object.__setattr__(self, "attributes", MappingProxyType(cleaned))

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_mapping(cls, entity_id: Any, values: Mapping[str, Any]) -> "Entity":
        """Build an entity from plain values; None becomes ABSENT."""
        attributes: dict[str, FieldValue] = {}
        for name, value in values.items():
            if value is None or isinstance(value, Absent):
                attributes[name] = ABSENT
            elif isinstance(value, Present):
                attributes[name] = value
            else:
                attributes[name] = Present(value)
        return cls(id=str(entity_id), attributes=attributes)

    def get(self, name: str) -> FieldValue:
        return self.attributes.get(name, ABSENT)

    def has(self, name: str) -> bool:
        return name in self.attributes

    def value(self, name: str, default: Any = None) -> Any:
        """Raw value of a present attribute, or default."""
        current = self.attributes.get(name)
        return current.value if current is not None else default

    def with_attribute(self, name: str, value: Any) -> "Entity":
        """Return a copy with one attribute set (None removes it)."""
        attributes: dict[str, FieldValue] = dict(self.attributes)
        if value is None or isinstance(value, Absent):
            attributes.pop(name, None)
        else:
            attributes[name] = value if isinstance(value, Present) else Present(value)
        return replace(self, attributes=attributes)
