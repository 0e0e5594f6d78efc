"""Normalized vehicle models."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def _freeze(value: Any) -> Any:
    """Turn nested dicts and lists into read-only mappings and tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class VehicleSummary(BaseModel):
    """A vehicle record reduced to the fields every screen needs.

    Built by :func:`pyvehicle.ingestion.normalize.to_vehicle_summary`
    from an arbitrary server record.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    """Primary external identifier (usually the VIN)."""
    brand: str = ""
    model: str = ""
    year: str = ""
    color: str = ""
    price: str = ""
    """Formatted display price (e.g. ``"$12,500.00"``)."""
    images: tuple[str, ...] = ()
    """Image URLs in server order."""
    raw: Mapping[str, Any] = Field(default_factory=lambda: MappingProxyType({}))
    """Original server record, read-only (nested lists become tuples)."""

    @field_validator("raw", mode="after")
    @classmethod
    def _freeze_raw(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    @field_serializer("raw")
    def _dump_raw(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return _thaw(value)

    def __hash__(self) -> int:
        # raw is excluded: MappingProxyType is unhashable.
        return hash((self.id, self.brand, self.model, self.year, self.color, self.price, self.images))

    @property
    def title(self) -> str:
        """``"brand model"``, falling back to the id when both are blank."""
        parts = [part for part in (self.brand, self.model) if part.strip()]
        return " ".join(parts) or self.id


class VehicleSpec(BaseModel):
    """A labelled specification line."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str
    value: str


class VehicleDetail(BaseModel):
    """A vehicle summary plus its specification sheet."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    summary: VehicleSummary
    specs: tuple[VehicleSpec, ...] = ()
    description: str | None = None
