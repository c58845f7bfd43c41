"""mackerel-agent plugin protocol helper.

Values mode prints one tab separated line per metric::

    fluentd.buffer.retry.out1\t2.000000\t1700000000

Definitions mode (agent sets MACKEREL_AGENT_PLUGIN_META) prints a header
line followed by the graph definitions as one JSON document.

Raw values of every run are kept in a small JSON state file together with
``_lastTime`` so descriptors flagged ``is_cumulative_diff`` can be reported
as a per-minute rate on the next run.
"""
from __future__ import annotations

import json
import logging
import math
import os
import sys
import time
from collections.abc import Callable
from typing import Any, Protocol, TextIO

from ..collector.schema import GraphDefinitions, MetricDescriptor, definitions_as_dict

logger = logging.getLogger(__name__)

META_ENV = "MACKEREL_AGENT_PLUGIN_META"
DEFINITIONS_HEADER = "# mackerel-agent-plugin"
LAST_TIME_KEY = "_lastTime"
# Previous values older than this are too stale to diff against.
MAX_DIFF_INTERVAL = 600


class MetricSource(Protocol):
    def fetch_metrics(self) -> dict[str, float]: ...
    def graph_definition(self) -> GraphDefinitions: ...


def calc_diff(value: float, now: int, last_value: float | None, last_time: int) -> float | None:
    """Per-minute rate since the previous run, or None when it cannot be trusted."""
    if last_value is None or last_time <= 0:
        return None
    elapsed = now - last_time
    if elapsed <= 0 or elapsed > MAX_DIFF_INTERVAL:
        return None
    diff = (value - last_value) * 60 / elapsed
    if diff < 0:
        # counter reset upstream
        return None
    return diff


def format_value_line(name: str, value: float, now: int) -> str:
    return f"{name}\t{value:f}\t{now}\n"


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite value {name} in state file")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class PluginHelper:
    def __init__(self, source: MetricSource, state_path: str, clock: Callable[[], float] = time.time) -> None:
        self.source = source
        self.state_path = state_path
        self._clock = clock

    # ------------ state file ------------
    def load_state(self) -> tuple[dict[str, float], int]:
        try:
            with open(self.state_path, encoding='utf-8') as fh:
                raw: Any = json.load(fh, parse_constant=_reject_constant)
        except FileNotFoundError:
            return {}, 0
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.state_path, e)
            return {}, 0
        if not isinstance(raw, dict):
            return {}, 0
        last_time = raw.pop(LAST_TIME_KEY, 0)
        # 1e400 parses to inf without going through parse_constant
        values = {k: float(v) for k, v in raw.items() if _is_number(v)}
        return values, int(last_time) if _is_number(last_time) else 0

    def save_state(self, values: dict[str, float], now: int) -> None:
        payload: dict[str, Any] = dict(values)
        payload[LAST_TIME_KEY] = now
        tmp_path = self.state_path + '.tmp'
        try:
            parent = os.path.dirname(self.state_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as fh:
                json.dump(payload, fh)
            os.replace(tmp_path, self.state_path)
        except OSError as e:
            logger.warning("Failed to write state file %s: %s", self.state_path, e)

    # ------------ output ------------
    def _descriptor_index(self, graphs: GraphDefinitions) -> dict[str, tuple[str, MetricDescriptor]]:
        index: dict[str, tuple[str, MetricDescriptor]] = {}
        for graph_name, graph in graphs.items():
            for desc in graph.metrics:
                index.setdefault(desc.name, (graph_name, desc))
        return index

    def output_values(self, stream: TextIO | None = None) -> None:
        """Print current values; raises the fetch error before writing anything."""
        out = stream if stream is not None else sys.stdout
        now = int(self._clock())
        stat = self.source.fetch_metrics()
        index = self._descriptor_index(self.source.graph_definition())
        last_stat, last_time = self.load_state()

        lines: list[str] = []
        for key, value in stat.items():
            located = index.get(key)
            if located is None:
                logger.debug("Metric %s is not part of any graph; skipped", key)
                continue
            graph_name, desc = located
            if desc.is_cumulative_diff:
                diffed = calc_diff(value, now, last_stat.get(key), last_time)
                if diffed is None:
                    logger.debug("No usable previous value for %s; skipped", key)
                    continue
                value = diffed
            lines.append(format_value_line(f"{graph_name}.{key}", value, now))
        out.writelines(lines)
        out.flush()
        self.save_state(stat, now)

    def output_definitions(self, stream: TextIO | None = None) -> None:
        out = stream if stream is not None else sys.stdout
        document = json.dumps(definitions_as_dict(self.source.graph_definition()))
        out.write(DEFINITIONS_HEADER + "\n")
        out.write(document + "\n")
        out.flush()


__all__ = [
    "DEFINITIONS_HEADER",
    "LAST_TIME_KEY",
    "MAX_DIFF_INTERVAL",
    "META_ENV",
    "MetricSource",
    "PluginHelper",
    "calc_diff",
    "format_value_line",
]
