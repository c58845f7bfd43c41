"""Which status records are surfaced as metrics.

Only buffered output plugins are reported. Records whose id begins with
``object:`` are anonymous objects fluentd assigns when no ``@id`` is
configured; their ids change between restarts, so they are skipped.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator

from .records import PluginStatusRecord

ANONYMOUS_ID_PREFIX = "object:"


def is_eligible(record: PluginStatusRecord) -> bool:
    if not record.is_output_plugin:
        return False
    if record.id.startswith(ANONYMOUS_ID_PREFIX):
        return False
    return True


def eligible_records(snapshot: Iterable[PluginStatusRecord]) -> Iterator[PluginStatusRecord]:
    """Yield eligible records in snapshot order."""
    return (r for r in snapshot if is_eligible(r))


__all__ = ["ANONYMOUS_ID_PREFIX", "is_eligible", "eligible_records"]
