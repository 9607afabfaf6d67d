"""Normalizes raw provider rows into ExtractionRecords."""

from typing import Any

from app.logging.logger import Log
from app.ocr.models import ExtractionRecord

_KNOWN_FIELDS = ("name", "address", "date", "ward")


def build_records(raw_rows: list[Any], *, source: str) -> list[ExtractionRecord]:
    """Validate every raw row, dropping those that carry no usable data."""
    records: list[ExtractionRecord] = []
    for index, raw in enumerate(raw_rows):
        record = build_record(raw)
        if record is None:
            Log.warning(f"Dropping unusable row {index} from {source}")
            continue
        records.append(record)
    return records


def build_record(raw: Any) -> ExtractionRecord | None:
    """Build a record from one raw row.

    Keys are matched case-insensitively. Strings are stripped and empty
    values become None. Numbers are rendered as text. Unknown scalar keys
    are kept in ``extra``; nested values are ignored.

    Returns:
        The record, or None if the row is not an object or has no values.
    """
    if not isinstance(raw, dict):
        return None
    known: dict[str, str | None] = {}
    extra: dict[str, str | int | float | bool] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            continue
        field = key.strip().lower()
        if field in _KNOWN_FIELDS:
            known[field] = _clean(value)
        elif isinstance(value, (str, int, float, bool)):
            cleaned = value.strip() if isinstance(value, str) else value
            if cleaned != "":
                extra[key] = cleaned
    if not any(known.values()) and not extra:
        return None
    return ExtractionRecord(
        name=known.get("name"),
        address=known.get("address"),
        date=known.get("date"),
        ward=known.get("ward"),
        extra=extra,
    )


def _clean(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return None
