"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, lineagectl.toml only contains
overrides. The core receives these models as plain values and never
reads the environment itself.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

type Direction = Literal["TB", "BT", "LR", "RL"]
type Fallback = Literal["grid", "none"]


class LayoutConfig(BaseModel):
    """[layout] section."""

    model_config = {"frozen": True}

    node_width: float = Field(default=180.0, gt=0)
    node_height: float = Field(default=60.0, gt=0)
    rank_spacing: float = Field(default=120.0, ge=0)
    node_spacing: float = Field(default=80.0, ge=0)
    margin_x: float = Field(default=50.0, ge=0)
    margin_y: float = Field(default=50.0, ge=0)
    direction: Direction = "TB"
    center_ranks: bool = True
    ordering_passes: int = Field(default=4, ge=0)
    max_nodes: int = Field(default=500, ge=1)
    fallback: Fallback = "grid"
    grid_columns: int = Field(default=6, ge=1)
    grid_cell_width: float = Field(default=200.0, gt=0)
    grid_cell_height: float = Field(default=150.0, gt=0)


class SearchConfig(BaseModel):
    """[search] section."""

    model_config = {"frozen": True}

    min_query_length: int = Field(default=2, ge=0)
    include_id: bool = True
    include_label: bool = True
    fields: tuple[str, ...] = (
        "manufacturer",
        "productClass",
        "productCode",
        "intendedUse",
        "panelType",
    )

    @model_validator(mode="after")
    def _require_some_field(self) -> SearchConfig:
        if not (self.include_id or self.include_label or self.fields):
            raise ValueError("search needs at least one searchable field")
        return self


class ViewConfig(BaseModel):
    """[view] section."""

    model_config = {"frozen": True}

    relayout_on_filter: bool = True


class LineageConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
