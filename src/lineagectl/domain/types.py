"""Annotated field types shared by the frozen models.

``frozen=True`` only blocks attribute assignment; a plain ``dict`` field
can still be changed in place. Mapping fields are stored as read-only
views over a private copy and dumped back to plain dicts.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import AfterValidator, PlainSerializer


def freeze_mapping[V](value: Mapping[str, V]) -> Mapping[str, V]:
    """Return a read-only view over a copy of *value*."""
    return MappingProxyType(dict(value))


def thaw_mapping(value: Mapping[str, Any]) -> dict[str, Any]:
    return dict(value)


StrMap = Annotated[
    Mapping[str, str],
    AfterValidator(freeze_mapping),
    PlainSerializer(thaw_mapping),
]
"""Read-only ``str -> str`` mapping, e.g. device attributes."""
