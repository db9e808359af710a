"""Input records handed to the core by the data-fetch layer.

The canonical shape is ``{id, displayName, predicateIds, attributes}``.
FDA 510(k) device payloads (``kNumber``, ``deviceName``,
``predicateDevices``, ...) are normalized into it by
:func:`normalize_fda_device`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from lineagectl.domain.types import StrMap

# FDA payload keys that map onto the canonical record rather than attributes.
_FDA_ID = "kNumber"
_FDA_NAME = "deviceName"
_FDA_PREDICATES = "predicateDevices"


class DeviceRecord(BaseModel):
    """One device as delivered by the upstream registry.

    Attributes:
        id: Stable unique identifier (e.g. a K-number).
        display_name: Human-readable device name.
        predicate_ids: Ids of the devices this one cites as predicates.
        attributes: Opaque searchable fields (manufacturer, class, ...).
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    id: str = Field(min_length=1)
    display_name: str = ""
    predicate_ids: tuple[str, ...] = ()
    attributes: StrMap = Field(default_factory=dict, validate_default=True)

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("device id must not be blank")
        return stripped

    @field_validator("predicate_ids", mode="before")
    @classmethod
    def _clean_predicates(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value.strip(),)
        return tuple(str(v).strip() for v in value)

    @field_validator("attributes", mode="before")
    @classmethod
    def _stringify_attributes(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            return value
        return {str(k): _as_text(v) for k, v in value.items() if v is not None}

    @property
    def label(self) -> str:
        """Display name, falling back to the id."""
        return self.display_name or self.id


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def is_fda_device(raw: dict[str, Any]) -> bool:
    """Return True if *raw* looks like an FDA 510(k) device payload."""
    return _FDA_ID in raw and "id" not in raw


def normalize_fda_device(raw: dict[str, Any]) -> dict[str, Any]:
    """Map an FDA 510(k) device payload onto the canonical record shape.

    Every field other than the id, name and predicate list is kept as a
    string attribute so it remains searchable.
    """
    attributes = {
        key: _as_text(value)
        for key, value in raw.items()
        if key not in (_FDA_ID, _FDA_NAME, _FDA_PREDICATES) and value is not None
    }
    return {
        "id": raw[_FDA_ID],
        "displayName": raw.get(_FDA_NAME, ""),
        "predicateIds": raw.get(_FDA_PREDICATES) or [],
        "attributes": attributes,
    }


def parse_records(raw_records: list[dict[str, Any]]) -> list[DeviceRecord]:
    """Validate a list of raw dicts into :class:`DeviceRecord` objects.

    Order is preserved; it drives tie-breaking in the layout.
    Raises ``pydantic.ValidationError`` on malformed entries.
    """
    records: list[DeviceRecord] = []
    for raw in raw_records:
        if isinstance(raw, dict) and is_fda_device(raw):
            payload = normalize_fda_device(raw)
        else:
            payload = raw
        records.append(DeviceRecord.model_validate(payload))
    return records
