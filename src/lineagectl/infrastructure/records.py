"""Load device record sets from JSON files.

Accepted shapes: a top-level array of records, or an object holding the
array under ``"records"`` or ``"devices"``. Entries may use the canonical
record shape or the FDA 510(k) device shape.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lineagectl.domain.records import DeviceRecord, parse_records

logger = logging.getLogger(__name__)

_CONTAINER_KEYS = ("records", "devices")


class RecordLoadError(Exception):
    """A record file could not be read or validated."""

    def __init__(self, code: str, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail


def _unwrap(payload: Any, path: Path) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _CONTAINER_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    raise RecordLoadError(
        "INVALID_RECORDS",
        f"{path} must hold a JSON array of records",
        path=str(path),
    )


def load_records(path: Path) -> list[DeviceRecord]:
    """Read and validate the records stored at *path*.

    Raises:
        RecordLoadError: ``FILE_NOT_FOUND``, ``UNREADABLE_FILE``,
            ``INVALID_JSON`` or ``INVALID_RECORDS``.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RecordLoadError(
            "FILE_NOT_FOUND", f"Record file not found: {path}", path=str(path)
        ) from exc
    except UnicodeDecodeError as exc:
        raise RecordLoadError(
            "INVALID_JSON",
            f"{path} is not UTF-8 text (byte {exc.start})",
            path=str(path),
        ) from exc
    except OSError as exc:
        raise RecordLoadError(
            "UNREADABLE_FILE",
            f"Cannot read record file {path}: {exc.strerror or exc}",
            path=str(path),
        ) from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RecordLoadError(
            "INVALID_JSON",
            f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno})",
            path=str(path),
        ) from exc

    entries = _unwrap(payload, path)
    try:
        records = parse_records(entries)
    except ValidationError as exc:
        raise RecordLoadError(
            "INVALID_RECORDS",
            f"{exc.error_count()} invalid record field(s) in {path}",
            path=str(path),
            errors=[
                {"loc": list(err["loc"]), "msg": err["msg"]}
                for err in exc.errors(include_url=False)
            ],
        ) from exc

    logger.debug("Loaded %d records from %s", len(records), path)
    return records
