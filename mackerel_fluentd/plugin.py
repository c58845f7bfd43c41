"""FluentdPlugin: the snapshot-backed source of values and graph definitions.

The fetch happens once, in ``prepare()``. A failed fetch is kept on the
plugin and re-raised by both ``fetch_metrics()`` and ``graph_definition()``,
so neither output path can emit anything built from a missing snapshot.
"""
from __future__ import annotations

import logging

from .collector import FetchResult, GraphDefinitions, StatusFetcher, build_schema, project
from .config import PluginConfig

logger = logging.getLogger(__name__)


class FluentdPlugin:
    def __init__(self, result: FetchResult) -> None:
        self.result = result

    @classmethod
    def prepare(cls, config: PluginConfig) -> FluentdPlugin:
        return cls(StatusFetcher(config).prepare())

    def fetch_metrics(self) -> dict[str, float]:
        snapshot = self.result.unwrap()
        metrics = project(snapshot)
        logger.debug("Projected %d metrics from %d records", len(metrics), len(snapshot))
        return metrics

    def graph_definition(self) -> GraphDefinitions:
        return build_schema(self.result.unwrap())


__all__ = ["FluentdPlugin"]
