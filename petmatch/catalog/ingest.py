from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List

import numpy as np
import pandas as pd
from pydantic import ValidationError

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Animal, Coordinate

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: List[str] = [
    "id",
    "name",
    "species",
    "breed",
    "age_months",
    "gender",
    "size",
    "color",
    "personality",
    "good_with_kids",
    "good_with_pets",
    "has_special_needs",
    "vaccinated",
    "neutered",
    "available",
    "verified",
    "latitude",
    "longitude",
    "photo_count",
    "description_length",
    "listed_at",
    "organization_id",
]

_TRUE_STRINGS = {"true", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "no", "n", "0"}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, np.ndarray)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _first_present(raw: dict[str, Any], keys: List[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if not _is_missing(value):
            return value
    return None


def _parse_text(value: Any, lower: bool = False) -> str | None:
    if _is_missing(value):
        return None
    text = str(value).strip()
    if not text:
        return None
    return text.lower() if lower else text


def _parse_int(value: Any) -> int | None:
    if _is_missing(value):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _parse_bool(value: Any) -> bool | None:
    if _is_missing(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def _parse_tags(value: Any) -> list[str]:
    if _is_missing(value):
        return []
    # CSV rows carry tags as "playful, calm"; JSON rows as a list
    parts = value.split(",") if isinstance(value, str) else list(value)
    return [str(p).strip().lower() for p in parts if str(p).strip()]


def _parse_location(raw: dict[str, Any]) -> Coordinate | None:
    value = raw.get("location")
    if isinstance(value, dict):
        lat, lon = value.get("latitude"), value.get("longitude")
    elif isinstance(value, str) and "," in value:
        lat, _, lon = value.partition(",")
    else:
        lat = _first_present(raw, ["latitude", "lat"])
        lon = _first_present(raw, ["longitude", "lng", "lon"])

    if _is_missing(lat) or _is_missing(lon):
        return None
    try:
        return Coordinate(latitude=float(lat), longitude=float(lon))
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed location for record %r", raw.get("id"))
        return None


def _parse_timestamp(value: Any) -> datetime | None:
    if _is_missing(value):
        return None
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _photo_count(raw: dict[str, Any]) -> int:
    count = _parse_int(raw.get("photo_count"))
    if count is not None:
        return max(count, 0)
    photos = raw.get("photos")
    if isinstance(photos, str):
        return len([p for p in photos.split(",") if p.strip()])
    if isinstance(photos, (list, tuple)):
        return len(photos)
    return 0


def _description_length(raw: dict[str, Any]) -> int:
    length = _parse_int(raw.get("description_length"))
    if length is not None:
        return max(length, 0)
    description = raw.get("description")
    return len(description) if isinstance(description, str) else 0


def normalize_record(raw: dict[str, Any]) -> Animal:
    """
    Map one loosely-structured catalog row onto the canonical ``Animal``.

    Raises ``pydantic.ValidationError`` when the row lacks an id or species.
    """
    return Animal(
        id=_parse_text(_first_present(raw, ["id", "pet_id", "animal_id"])) or "",
        name=_parse_text(raw.get("name")) or "",
        species=_parse_text(raw.get("species"), lower=True) or "",
        breed=_parse_text(raw.get("breed")),
        age_months=_parse_int(_first_present(raw, ["age_months", "age"])),
        gender=_parse_text(raw.get("gender"), lower=True),
        size=_parse_text(raw.get("size"), lower=True),
        color=_parse_text(raw.get("color")),
        personality=_parse_tags(_first_present(raw, ["personality", "personalities", "tags"])),
        good_with_kids=_parse_bool(raw.get("good_with_kids")),
        good_with_pets=_parse_bool(raw.get("good_with_pets")),
        has_special_needs=bool(_parse_bool(_first_present(raw, ["has_special_needs", "special_needs"]))),
        vaccinated=bool(_parse_bool(raw.get("vaccinated"))),
        neutered=bool(_parse_bool(raw.get("neutered"))),
        available=bool(_parse_bool(raw.get("available"))),
        verified=bool(_parse_bool(raw.get("verified"))),
        location=_parse_location(raw),
        photo_count=_photo_count(raw),
        description_length=_description_length(raw),
        listed_at=_parse_timestamp(_first_present(raw, ["listed_at", "created_at"])),
        organization_id=_parse_text(raw.get("organization_id")),
    )


def read_raw_records(path: Path) -> list[dict[str, Any]]:
    if path.suffix.lower() == ".json":
        df = pd.read_json(path, orient="records", dtype={"id": str})
    else:
        df = pd.read_csv(path, dtype={"id": str})
    return df.to_dict(orient="records")


def load_catalog(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[Animal]:
    """
    Read the catalog file and validate every row into an ``Animal``.

    Rows that cannot be validated are logged and skipped so one bad listing
    does not take the whole catalog down.
    """
    records = read_raw_records(config.catalog_path)

    animals: list[Animal] = []
    for raw in records:
        try:
            animals.append(normalize_record(raw))
        except ValidationError:
            logger.warning("Skipping malformed catalog record %r", raw.get("id"), exc_info=True)

    logger.info(
        "Loaded %d animals from %s (%d skipped)",
        len(animals),
        config.catalog_path,
        len(records) - len(animals),
    )
    return animals


if __name__ == "__main__":
    catalog = load_catalog()
    print(f"Catalog loaded: {len(catalog)} animals from {DEFAULT_CATALOG_CONFIG.catalog_path}")
