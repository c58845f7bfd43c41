"""Status fetcher for fluentd's monitor_agent ``/api/plugins.json``.

Exactly one GET per call, no retries, no timeout beyond the transport
default. Failures are classified:

  TransportError - connection refused/unreachable, non-2xx status, short read
  DecodeError    - body is not JSON, or not ``{"plugins": [ {...}, ... ]}``

``StatusFetcher.prepare()`` captures either outcome in a ``FetchResult`` so
the harness can fetch at startup and decide later what to do with a failure.
"""
from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any

import jsonschema

from ..config import PluginConfig
from ..errors import DecodeError, FetchError, TransportError
from ..version import get_version
from .records import StatusSnapshot, snapshot_from_payload

logger = logging.getLogger(__name__)

API_PATH = "/api/plugins.json"

_COUNTER = {"type": ["integer", "null"], "minimum": 0}
_TEXT = {"type": ["string", "null"]}

PLUGINS_RESPONSE_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["plugins"],
    "properties": {
        "plugins": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "plugin_id": _TEXT,
                    "plugin_category": _TEXT,
                    "type": _TEXT,
                    "config": {"type": ["object", "null"]},
                    "output_plugin": {"type": ["boolean", "null"]},
                    "retry_count": _COUNTER,
                    "buffer_queue_length": _COUNTER,
                    "buffer_total_queued_size": _COUNTER,
                },
            },
        },
    },
}


def build_endpoint(host: str, port: int) -> str:
    return f"http://{host}:{port}{API_PATH}"


def _read_body(url: str) -> bytes:
    try:
        req = urllib.request.Request(url, headers={
            'Accept': 'application/json',
            'User-Agent': f'mackerel-plugin-fluentd/{get_version()}',
        })
        with urllib.request.urlopen(req) as resp:  # nosec - operator supplied local endpoint
            return resp.read()
    except urllib.error.HTTPError as e:
        raise TransportError(f"GET {url} returned HTTP {e.code}") from e
    except urllib.error.URLError as e:
        raise TransportError(f"GET {url} failed: {e.reason}") from e
    except (http.client.HTTPException, OSError) as e:
        raise TransportError(f"GET {url} failed: {e}") from e
    except ValueError as e:
        # malformed host, e.g. an unterminated IPv6 literal
        raise TransportError(f"GET {url} failed: {e}") from e


def decode_snapshot(body: bytes) -> StatusSnapshot:
    try:
        payload = json.loads(body.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"response is not valid JSON: {e}") from e
    try:
        jsonschema.validate(payload, PLUGINS_RESPONSE_SCHEMA)
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise DecodeError(f"unexpected response shape at {where}: {e.message}") from e
    return snapshot_from_payload(payload)


def fetch(base_url: str) -> StatusSnapshot:
    """GET ``base_url`` and parse the plugin status list (raises FetchError)."""
    logger.debug("Fetching plugin status from %s", base_url)
    snapshot = decode_snapshot(_read_body(base_url))
    logger.debug("Fetched %d plugin status records", len(snapshot))
    return snapshot


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Either a snapshot or the error that prevented one."""
    snapshot: StatusSnapshot | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> StatusSnapshot:
        """Return the snapshot, re-raising the captured fetch error if any."""
        if self.error is not None:
            raise self.error
        return self.snapshot or ()


class StatusFetcher:
    def __init__(self, config: PluginConfig) -> None:
        self.config = config

    @property
    def endpoint(self) -> str:
        return build_endpoint(self.config.host, self.config.port)

    def fetch(self) -> StatusSnapshot:
        return fetch(self.endpoint)

    def prepare(self) -> FetchResult:
        try:
            return FetchResult(snapshot=self.fetch())
        except FetchError as e:
            logger.debug("Fetch from %s failed: %s", self.endpoint, e)
            return FetchResult(error=e)


__all__ = [
    "API_PATH",
    "PLUGINS_RESPONSE_SCHEMA",
    "FetchResult",
    "StatusFetcher",
    "build_endpoint",
    "decode_snapshot",
    "fetch",
]
