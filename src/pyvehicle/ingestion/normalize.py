"""Normalization helpers.

Centralizes defensive parsing of the loosely-typed vehicle records the
server returns. Records use inconsistent key names between endpoints, so
every field is looked up through an ordered list of aliases.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pyvehicle.models.vehicle import VehicleDetail, VehicleSpec, VehicleSummary

ID_KEYS = ("vin", "VIN", "Vin", "vehicle_vin", "id")
BRAND_KEYS = ("brand", "make", "manufacturer")
MODEL_KEYS = ("model", "vehicle_model", "car_model")
YEAR_KEYS = ("year", "manufacture_year", "model_year")
COLOR_KEYS = ("color", "colour", "body_color")
PRICE_KEYS = ("price_usd", "price", "price_rub", "cost", "amount")
IMAGE_KEYS = ("images", "photos", "gallery", "image_urls", "pictures")
DESCRIPTION_KEYS = ("description", "notes", "comment", "history", "summary")

MISSING_PRICE = "$ —"

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")

# (label, alias keys, summary attribute used as the preferred value)
_SPEC_DEFINITIONS: tuple[tuple[str, tuple[str, ...], str | None], ...] = (
    ("Brand", ("brand", "make", "manufacturer"), "brand"),
    ("Model", ("model", "vehicle_model"), "model"),
    ("VIN", ("vin", "vehicle_vin"), "id"),
    ("Year", ("year", "model_year", "manufacture_year"), "year"),
    ("Color", ("color", "body_color"), "color"),
    ("Price", ("price", "price_usd", "cost", "amount"), "price"),
    ("Mileage", ("mileage", "odometer", "odometer_value"), None),
    ("Engine", ("engine", "engine_type", "engine_description"), None),
    ("Transmission", ("transmission", "gearbox"), None),
    ("Drivetrain", ("drivetrain", "drive_type"), None),
    ("Fuel", ("fuel", "fuel_type"), None),
    ("Body", ("body", "body_type"), None),
    ("Owners", ("owners", "owner_count"), None),
    ("Region", ("region", "location", "city"), None),
)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text if text else None


def first_non_empty(record: Mapping[str, Any], keys: Iterable[str]) -> str:
    """Return the first non-blank value among *keys*, or ``""``."""
    for key in keys:
        text = safe_str(record.get(key))
        if text is not None:
            return text
    return ""


def extract_image_urls(record: Mapping[str, Any]) -> tuple[str, ...]:
    """Return the image URLs from the first image key that has any.

    Lists are taken item by item; strings are treated as comma-separated.
    """
    for key in IMAGE_KEYS:
        value = record.get(key)
        urls: list[str] = []
        if isinstance(value, str):
            urls = [part.strip() for part in value.split(",") if part.strip()]
        elif isinstance(value, Sequence):
            urls = [text for text in (safe_str(item) for item in value) if text is not None]
        if urls:
            return tuple(urls)
    return ()


def format_price(raw: str) -> str:
    """Format a raw price as US currency.

    Spaces are dropped and a comma is read as the decimal separator.
    Text that still does not parse is returned unchanged.
    """
    if not raw.strip():
        return MISSING_PRICE
    normalized = raw.replace(" ", "").replace(",", ".")
    digits = _NON_PRICE_CHARS.sub("", normalized)
    try:
        number = float(digits)
    except ValueError:
        return raw
    return f"${number:,.2f}"


def to_vehicle_summary(record: Mapping[str, Any]) -> VehicleSummary | None:
    """Build a summary from a raw record; ``None`` when it has no id."""
    vehicle_id = first_non_empty(record, ID_KEYS)
    if not vehicle_id:
        return None
    return VehicleSummary(
        id=vehicle_id,
        brand=first_non_empty(record, BRAND_KEYS),
        model=first_non_empty(record, MODEL_KEYS),
        year=first_non_empty(record, YEAR_KEYS),
        color=first_non_empty(record, COLOR_KEYS),
        price=format_price(first_non_empty(record, PRICE_KEYS)),
        images=extract_image_urls(record),
        raw=dict(record),
    )


def build_specs(summary: VehicleSummary, record: Mapping[str, Any]) -> tuple[VehicleSpec, ...]:
    specs: list[VehicleSpec] = []
    for label, keys, attribute in _SPEC_DEFINITIONS:
        value = getattr(summary, attribute) if attribute is not None else ""
        if not value.strip():
            value = first_non_empty(record, keys)
        if value.strip():
            specs.append(VehicleSpec(label=label, value=value))
    return tuple(specs)


def to_vehicle_detail(record: Mapping[str, Any]) -> VehicleDetail | None:
    """Build a detail view from a raw record; ``None`` when it has no id."""
    summary = to_vehicle_summary(record)
    if summary is None:
        return None
    description = first_non_empty(record, DESCRIPTION_KEYS) or None
    return VehicleDetail(
        summary=summary,
        specs=build_specs(summary, record),
        description=description,
    )


def summaries_from(records: Iterable[Any]) -> list[VehicleSummary]:
    """Normalize a list of raw records, dropping entries without an id."""
    summaries: list[VehicleSummary] = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        summary = to_vehicle_summary(record)
        if summary is not None:
            summaries.append(summary)
    return summaries
