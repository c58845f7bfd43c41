"""Status collection pipeline: fetch, filter, project, describe."""
from __future__ import annotations

from .eligibility import eligible_records, is_eligible
from .fetcher import FetchResult, StatusFetcher, build_endpoint
from .projector import project
from .records import PluginStatusRecord, StatusSnapshot
from .schema import GraphDefinitions, GraphSchema, MetricDescriptor, build_schema

__all__ = [
    "FetchResult",
    "GraphDefinitions",
    "GraphSchema",
    "MetricDescriptor",
    "PluginStatusRecord",
    "StatusFetcher",
    "StatusSnapshot",
    "build_endpoint",
    "build_schema",
    "eligible_records",
    "is_eligible",
    "project",
]
