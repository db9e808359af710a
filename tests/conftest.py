"""Shared pytest fixtures and test helpers for lineagectl tests."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from lineagectl.domain.records import DeviceRecord
from lineagectl.graph.model import Graph, build_graph

# K861712 <- K921156 <- K021234, plus K021234 -> K861712 directly.
LINEAGE_RAW: list[dict[str, Any]] = [
    {
        "id": "K861712",
        "displayName": "CardioFlow Balloon Catheter System",
        "predicateIds": [],
        "attributes": {
            "manufacturer": "Boston Scientific Corporation",
            "productClass": "II",
            "productCode": "DTK",
            "panelType": "Cardiovascular",
        },
    },
    {
        "id": "K921156",
        "displayName": "CardioFlow Plus Catheter",
        "predicateIds": ["K861712"],
        "attributes": {
            "manufacturer": "Boston Scientific Corporation",
            "productClass": "II",
            "productCode": "DTK",
            "panelType": "Cardiovascular",
        },
    },
    {
        "id": "K021234",
        "displayName": "CardioFlow Ultra Catheter",
        "predicateIds": ["K921156", "K861712"],
        "attributes": {
            "manufacturer": "Abbott Vascular",
            "productClass": "II",
            "productCode": "DTK",
            "intendedUse": "Coronary angioplasty",
            "panelType": "Cardiovascular",
        },
    },
]

# Two lineages joined at K101010, plus one isolated device.
FAMILY_RAW: list[dict[str, Any]] = [
    *LINEAGE_RAW,
    {
        "id": "K851234",
        "displayName": "OrthoMax Hip Prosthesis",
        "attributes": {"manufacturer": "Zimmer Biomet", "productClass": "II"},
    },
    {
        "id": "K951001",
        "displayName": "OrthoMax II Hip",
        "predicateIds": ["K851234"],
        "attributes": {"manufacturer": "Zimmer Biomet", "productClass": "II"},
    },
    {
        "id": "K051122",
        "displayName": "OrthoMax III Hip",
        "predicateIds": ["K951001"],
        "attributes": {"manufacturer": "Zimmer Biomet", "productClass": "II"},
    },
    {
        "id": "K101010",
        "displayName": "Hybrid Delivery System",
        "predicateIds": ["K021234", "K051122"],
        "attributes": {"manufacturer": "Medtronic Inc.", "productClass": "III"},
    },
    {
        "id": "K880001",
        "displayName": "Standalone Thermometer",
        "attributes": {"manufacturer": "Welch Allyn", "productClass": "I"},
    },
]


def make_records(links: dict[str, list[str]]) -> list[DeviceRecord]:
    """Build records from ``{id: [predicate ids]}`` in dict order."""
    return [
        DeviceRecord(id=node_id, predicate_ids=tuple(preds)) for node_id, preds in links.items()
    ]


def write_records(path: Path, raw: Any) -> Path:
    path.write_text(json.dumps(raw), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None]:
    """Undo configure_logging() so handlers never outlive a CliRunner stream."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    lineage_level = logging.getLogger("lineagectl").level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    logging.getLogger("lineagectl").setLevel(lineage_level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def lineage_records() -> list[DeviceRecord]:
    return [DeviceRecord.model_validate(raw) for raw in LINEAGE_RAW]


@pytest.fixture
def lineage_graph(lineage_records: list[DeviceRecord]) -> Graph:
    return build_graph(lineage_records)


@pytest.fixture
def family_records() -> list[DeviceRecord]:
    return [DeviceRecord.model_validate(raw) for raw in FAMILY_RAW]


@pytest.fixture
def family_graph(family_records: list[DeviceRecord]) -> Graph:
    return build_graph(family_records)


@pytest.fixture
def lineage_file(tmp_path: Path) -> Path:
    return write_records(tmp_path / "lineage.json", LINEAGE_RAW)


@pytest.fixture
def family_file(tmp_path: Path) -> Path:
    return write_records(tmp_path / "family.json", FAMILY_RAW)


@pytest.fixture
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty temp dir with no config env vars set."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("LINEAGECTL_"):
            monkeypatch.delenv(name, raising=False)
