"""SearchIndex — case-insensitive substring search over device fields.

The index maps each distinct lower-cased field value to the ids of the
nodes carrying it, so a keystroke scans distinct values once instead of
every attribute of every node. Built once per Graph; never mutated.
"""

from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import TYPE_CHECKING

from lineagectl.config.models import SearchConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

    from lineagectl.graph.model import DeviceNode, Graph


def _field_values(node: DeviceNode, config: SearchConfig) -> list[str]:
    values: list[str] = []
    if config.include_id:
        values.append(node.id)
    if config.include_label:
        values.append(node.label)
    for field in config.fields:
        value = node.attributes.get(field)
        if value:
            values.append(value)
    return values


class SearchIndex:
    """Queryable index over node attributes for one Graph version."""

    def __init__(
        self,
        values: Mapping[str, frozenset[str]],
        all_ids: frozenset[str],
        config: SearchConfig,
    ) -> None:
        self._values = MappingProxyType(dict(values))
        self._all = all_ids
        self.config = config

    @classmethod
    def build(cls, graph: Graph, config: SearchConfig | None = None) -> SearchIndex:
        """Index the searchable fields of every node in *graph*."""
        config = config or SearchConfig()
        buckets: dict[str, set[str]] = defaultdict(set)
        for node in graph.nodes:
            for value in _field_values(node, config):
                buckets[value.casefold()].add(node.id)
        values = {key: frozenset(ids) for key, ids in buckets.items()}
        return cls(values, frozenset(n.id for n in graph.nodes), config)

    @property
    def all_ids(self) -> frozenset[str]:
        return self._all

    def __len__(self) -> int:
        return len(self._all)

    def is_active(self, text: str) -> bool:
        """True if *text* is long enough to filter anything."""
        return len(text.strip()) >= max(self.config.min_query_length, 1)

    def query(self, text: str) -> frozenset[str]:
        """Ids of nodes whose searchable fields contain *text*.

        Queries shorter than ``min_query_length`` (after stripping) match
        every node.
        """
        if not self.is_active(text):
            return self._all
        needle = text.strip().casefold()
        matched: set[str] = set()
        for value, ids in self._values.items():
            if needle in value:
                matched.update(ids)
        return frozenset(matched)


def query(index: SearchIndex, text: str) -> frozenset[str]:
    """Functional form of :meth:`SearchIndex.query`."""
    return index.query(text)
