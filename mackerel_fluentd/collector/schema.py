"""Graph definitions describing how projected metrics are displayed.

The host agent registers graphs from the JSON produced by
``GraphDefinitions.as_dict()``::

    {"graphs": {"fluentd.buffer": {"label": "Fluentd Buffer", "unit": "float",
                                   "metrics": [{"name": "retry.out1", ...}]}}}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .eligibility import eligible_records
from .projector import QUEUE_PREFIX, RETRY_PREFIX, SIZE_PREFIX
from .records import StatusSnapshot

BUFFER_GRAPH_NAME = "fluentd.buffer"
BUFFER_GRAPH_LABEL = "Fluentd Buffer"
DEFAULT_UNIT = "float"


@dataclass(frozen=True, slots=True)
class MetricDescriptor:
    name: str
    label: str
    is_cumulative_diff: bool = False
    stacked: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "stacked": self.stacked,
        }


@dataclass(slots=True)
class GraphSchema:
    label: str
    metrics: list[MetricDescriptor] = field(default_factory=list)
    unit: str = DEFAULT_UNIT

    def as_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "unit": self.unit,
            "metrics": [m.as_dict() for m in self.metrics],
        }


# graph name -> schema
GraphDefinitions = dict[str, GraphSchema]


def build_schema(snapshot: StatusSnapshot) -> GraphDefinitions:
    metrics: list[MetricDescriptor] = []
    for record in eligible_records(snapshot):
        metrics.append(MetricDescriptor(RETRY_PREFIX + record.id, "Retry Count " + record.id))
        metrics.append(MetricDescriptor(QUEUE_PREFIX + record.id, "Queue Length " + record.id))
        metrics.append(MetricDescriptor(SIZE_PREFIX + record.id, "Buffer Size " + record.id))
    return {BUFFER_GRAPH_NAME: GraphSchema(label=BUFFER_GRAPH_LABEL, metrics=metrics)}


def definitions_as_dict(graphs: GraphDefinitions) -> dict[str, Any]:
    return {"graphs": {name: g.as_dict() for name, g in graphs.items()}}


__all__ = [
    "BUFFER_GRAPH_NAME",
    "BUFFER_GRAPH_LABEL",
    "GraphDefinitions",
    "GraphSchema",
    "MetricDescriptor",
    "build_schema",
    "definitions_as_dict",
]
