"""
Application loader — Reads application snapshots from JSON or CSV exports.

Accepted inputs:
    apps.json   a single application object, or an array of them
    apps.csv    header row of camelCase field names, one application per row
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any

from .scoring.models import ApplicationRecord
from .scoring.tables import ScoringError

logger = logging.getLogger("appsec_scoring.loader")

_TRUE_VALUES = {"true", "yes", "y", "1"}
_FALSE_VALUES = {"false", "no", "n", "0"}


class ApplicationLoadError(ScoringError):
    """The application input file could not be read."""


def load_applications(path: str | Path) -> list[ApplicationRecord]:
    """Load application records from a JSON or CSV file."""
    path = Path(path)
    if not path.exists():
        raise ApplicationLoadError(f"Input file not found: {path}")

    if path.suffix.lower() == ".csv":
        rows = _read_csv(path)
    else:
        rows = _read_json(path)

    records = [ApplicationRecord.from_dict(row) for row in rows]
    logger.info(f"Loaded {len(records)} applications from {path}")
    return records


def _read_json(path: Path) -> list[dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ApplicationLoadError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise ApplicationLoadError(f"{path}: expected an application object or a list of them")
    return data


def _read_csv(path: Path) -> list[dict[str, Any]]:
    rows = []
    with open(path, "r", newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        for line_no, raw in enumerate(reader, start=2):
            rows.append(_coerce_csv_row(raw, line_no))
    return rows


def _coerce_csv_row(raw: dict[str, str], line_no: int) -> dict[str, Any]:
    """Blank cells become None; integration levels become ints; apiSecurityNA becomes a bool."""
    row: dict[str, Any] = {}
    for key, value in raw.items():
        if key is None:
            continue
        key = key.strip()
        value = value.strip() if isinstance(value, str) else value
        if value == "" or value is None:
            row[key] = None
        elif key.endswith("IntegrationLevel"):
            try:
                number = float(value)
            except ValueError:
                number = None
            # is_integer() is False for inf and nan
            if number is None or not number.is_integer():
                logger.warning(f"line {line_no}: non-integer {key} {value!r} ignored")
                row[key] = None
            else:
                row[key] = int(number)
        elif key == "apiSecurityNA":
            lowered = value.lower()
            if lowered in _TRUE_VALUES:
                row[key] = True
            elif lowered in _FALSE_VALUES:
                row[key] = False
            else:
                logger.warning(f"line {line_no}: unrecognized apiSecurityNA {value!r} ignored")
                row[key] = None
        else:
            row[key] = value
    return row
