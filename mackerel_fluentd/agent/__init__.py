"""Host agent (mackerel-agent) plugin protocol."""
from __future__ import annotations

from .helper import DEFINITIONS_HEADER, META_ENV, MetricSource, PluginHelper

__all__ = ["DEFINITIONS_HEADER", "META_ENV", "MetricSource", "PluginHelper"]
