from __future__ import annotations

from .eligibility import eligible_records
from .records import StatusSnapshot

RETRY_PREFIX = "retry."
QUEUE_PREFIX = "queue."
SIZE_PREFIX = "size."


def project(snapshot: StatusSnapshot) -> dict[str, float]:
    """Flatten eligible records into ``{prefix + id: value}``.

    Duplicate ids: the later record overwrites the earlier one's keys.
    """
    results: dict[str, float] = {}
    for record in eligible_records(snapshot):
        results[RETRY_PREFIX + record.id] = float(record.retry_count)
        results[QUEUE_PREFIX + record.id] = float(record.buffer_queue_length)
        results[SIZE_PREFIX + record.id] = float(record.buffer_total_queued_size)
    return results


__all__ = ["RETRY_PREFIX", "QUEUE_PREFIX", "SIZE_PREFIX", "project"]
