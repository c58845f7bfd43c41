"""Pytest fixtures for the fluentd plugin.

Provides:
1. A threaded local HTTP server (``http_server_factory``) with clean shutdown.
2. ``monitor_agent`` : starts a fake fluentd monitor_agent serving a given
   body/status for ``/api/plugins.json`` and returns a PluginConfig pointing at it.
3. Environment isolation for the plugin's env variables (autouse).
"""
from __future__ import annotations

import contextlib
import json
import logging
import socket
import sys
import threading
from collections.abc import Callable, Iterator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mackerel_fluentd.config import PluginConfig  # noqa: E402

_PLUGIN_ENV = (
    'MACKEREL_AGENT_PLUGIN_META',
    'MACKEREL_FLUENTD_HOST',
    'MACKEREL_FLUENTD_PORT',
    'MACKEREL_FLUENTD_TEMPFILE',
    'MACKEREL_FLUENTD_VERBOSE_LOG',
)

SAMPLE_PAYLOAD: dict[str, Any] = {
    "plugins": [
        {
            "plugin_id": "in_forward",
            "plugin_category": "input",
            "type": "forward",
            "config": {"@type": "forward", "port": "24224"},
            "output_plugin": False,
            "retry_count": None,
        },
        {
            "plugin_id": "out1",
            "plugin_category": "output",
            "type": "s3",
            "config": {"@type": "s3"},
            "output_plugin": True,
            "retry_count": 2,
            "buffer_queue_length": 5,
            "buffer_total_queued_size": 1024,
        },
        {
            "plugin_id": "object:3fe1",
            "plugin_category": "output",
            "type": "stdout",
            "config": {},
            "output_plugin": True,
            "retry_count": 9,
        },
    ]
}


@pytest.fixture(autouse=True)
def _isolate_plugin_env(monkeypatch):
    for name in _PLUGIN_ENV:
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    # setup_logging() replaces root handlers; drop ones bound to this test's capture streams
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
    root.setLevel(level)


def find_free_port() -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@contextlib.contextmanager
def _http_server(handler_cls: type[BaseHTTPRequestHandler]) -> Iterator[ThreadingHTTPServer]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler_cls)
    thread = threading.Thread(target=server.serve_forever, name=f"test-http-{handler_cls.__name__}", daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2.0)


@pytest.fixture
def http_server_factory():
    def _factory(handler_cls: type[BaseHTTPRequestHandler]):
        return _http_server(handler_cls)
    return _factory


def make_handler(body: bytes, status: int = 200, content_type: str = 'application/json') -> type[BaseHTTPRequestHandler]:
    class _MonitorAgentHandler(BaseHTTPRequestHandler):

        def do_GET(self):  # noqa: N802
            if self.path != '/api/plugins.json':
                self.send_error(404)
                return
            self.send_response(status)
            self.send_header('Content-Type', content_type)
            self.send_header('Content-Length', str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):  # noqa: A002
            pass

    return _MonitorAgentHandler


@pytest.fixture
def monitor_agent(tmp_path) -> Iterator[Callable[..., PluginConfig]]:
    """Start a fake monitor_agent; returns a PluginConfig for it.

    Usage:
        def test_x(monitor_agent):
            cfg = monitor_agent(payload)            # dict -> JSON body
            cfg = monitor_agent(b'not json')        # raw bytes
            cfg = monitor_agent(b'', status=500)
    """
    with contextlib.ExitStack() as stack:
        def _start(payload: Any = None, *, status: int = 200) -> PluginConfig:
            if payload is None:
                payload = SAMPLE_PAYLOAD
            body = payload if isinstance(payload, bytes) else json.dumps(payload).encode('utf-8')
            server = stack.enter_context(_http_server(make_handler(body, status)))
            return PluginConfig(host='127.0.0.1', port=server.server_address[1],
                                tempfile=str(tmp_path / 'fluentd.state'))
        yield _start


@pytest.fixture
def free_port() -> int:
    return find_free_port()
