"""BaseService — shared loading and error mapping for lineage services.

Every service receives a :class:`LineageConfig` at construction time.
Record files are loaded and validated per call; nothing is cached
across operations.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lineagectl.config.models import LineageConfig
from lineagectl.domain.errors import LineageError
from lineagectl.graph.model import Graph, build_graph
from lineagectl.infrastructure.records import RecordLoadError, load_records
from lineagectl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GraphService(BaseService):
            def check(self, path: Path) -> ServiceResult:
                graph = self._load_graph("check", path)
                if isinstance(graph, ServiceResult):
                    return graph
                ...
    """

    def __init__(self, config: LineageConfig | None = None) -> None:
        self._config = config or LineageConfig()

    @property
    def config(self) -> LineageConfig:
        return self._config

    def _load_graph(self, op: str, path: Path) -> Graph | ServiceResult:
        """Load *path* and build its graph, or return a failed result."""
        try:
            return build_graph(load_records(path))
        except RecordLoadError as exc:
            return ServiceResult.failure(op, exc.code, exc.message, exc.detail)
        except LineageError as exc:
            return self._lineage_failure(op, exc)

    @staticmethod
    def _lineage_failure(op: str, exc: LineageError) -> ServiceResult:
        logger.debug("%s failed: %s", op, exc.message)
        return ServiceResult.failure(op, str(exc.kind), exc.message, exc.detail)
