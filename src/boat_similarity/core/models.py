"""
Pydantic models for boat records supplied by upstream collaborators.

These models are used for:
- Validating attribute bundles extracted from listings or image analysis
- Accepting both snake_case and the camelCase keys the web client emits
- Converting records into Entity objects with explicit absence
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, computed_field, field_validator
from pydantic.alias_generators import to_camel

from .entity import ABSENT, Entity, FieldValue, Present
from .types import BOAT_FIELDS, FieldKind


class BoatRecord(BaseModel):
    """
    Raw boat attribute bundle.

    Every attribute except id is optional; a missing or blank value becomes
    ABSENT on the resulting Entity.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    length: Optional[float] = Field(default=None, ge=0)
    beam: Optional[float] = Field(default=None, ge=0)
    draft: Optional[float] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    engine_type: Optional[str] = None
    hull_material: Optional[str] = None
    hull_type: Optional[str] = None
    fuel_type: Optional[str] = None
    features: Optional[list[str]] = None
    category_tags: Optional[list[str]] = None
    description: Optional[str] = None
    primary_image_url: Optional[str] = None
    image_embedding: Optional[list[FiniteFloat]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator(
        "name",
        "type",
        "manufacturer",
        "model",
        "currency",
        "engine_type",
        "hull_material",
        "hull_type",
        "fuel_type",
        "description",
        "primary_image_url",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("features", "category_tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> Any:
        if value is None:
            return None
        return [str(v).strip() for v in value if v is not None and str(v).strip()]

    @computed_field
    @property
    def has_embedding(self) -> bool:
        """Whether upstream image analysis supplied a vector."""
        return bool(self.image_embedding)

    def to_entity(self) -> Entity:
        """Convert to an Entity, normalizing each registered field by kind."""
        attributes: dict[str, FieldValue] = {}
        for name, spec in BOAT_FIELDS.items():
            raw = getattr(self, name, None)
            attributes[name] = _to_field_value(spec.kind, raw)
        return Entity(id=self.id, attributes=attributes)


def _to_field_value(kind: FieldKind, raw: Any) -> FieldValue:
    if raw is None:
        return ABSENT
    if kind is FieldKind.numeric:
        return Present(float(raw))
    if kind is FieldKind.set_of_strings:
        return Present(frozenset(raw))
    if kind is FieldKind.vector:
        if not raw:
            return ABSENT
        return Present(tuple(float(v) for v in raw))
    return Present(raw)


def records_to_entities(records: list[dict[str, Any]]) -> list[Entity]:
    """Validate plain dicts as BoatRecords and convert them to entities."""
    return [BoatRecord.model_validate(record).to_entity() for record in records]
