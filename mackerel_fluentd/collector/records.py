"""Plugin status records as reported by fluentd's monitor_agent.

One record per entry of the ``plugins`` array in ``/api/plugins.json``.
Missing fields take their zero value; ``null`` is treated as missing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True, slots=True)
class PluginStatusRecord:
    id: str = ""
    category: str = ""
    kind: str = ""
    config: dict[str, str] = field(default_factory=dict)
    is_output_plugin: bool = False
    retry_count: int = 0
    buffer_queue_length: int = 0
    buffer_total_queued_size: int = 0

    @classmethod
    def from_raw(cls, data: dict[str, Any]) -> PluginStatusRecord:
        config = data.get("config") or {}
        return cls(
            id=str(data.get("plugin_id") or ""),
            category=str(data.get("plugin_category") or ""),
            kind=str(data.get("type") or ""),
            config={str(k): "" if v is None else str(v) for k, v in config.items()},
            is_output_plugin=data.get("output_plugin") is True,
            retry_count=_as_int(data.get("retry_count")),
            buffer_queue_length=_as_int(data.get("buffer_queue_length")),
            buffer_total_queued_size=_as_int(data.get("buffer_total_queued_size")),
        )


# Response order is preserved; it drives metric and graph ordering downstream.
StatusSnapshot = tuple[PluginStatusRecord, ...]


def snapshot_from_payload(payload: dict[str, Any]) -> StatusSnapshot:
    return tuple(PluginStatusRecord.from_raw(item) for item in payload.get("plugins", []))


__all__ = ["PluginStatusRecord", "StatusSnapshot", "snapshot_from_payload"]
