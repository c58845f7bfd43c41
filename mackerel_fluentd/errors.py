"""Exception hierarchy for the fluentd plugin.

A small tree so the harness can map failures to exit codes without string
inspection:

 - FetchError: anything that prevents a usable status snapshot
     - TransportError: connection refused/unreachable, non-2xx, read failure
     - DecodeError: body is not JSON or not shaped like ``{"plugins": [...]}``
 - ConfigError: invalid host/port/config file values
"""
from __future__ import annotations


class FluentdPluginError(Exception):
    """Base class for all plugin exceptions."""


class FetchError(FluentdPluginError):
    """Base for fetch-time failures (do not raise directly)."""


class TransportError(FetchError):
    """Network level failure talking to the monitor_agent endpoint."""


class DecodeError(FetchError):
    """Malformed or unexpected-shape JSON in the monitor_agent response."""


class ConfigError(FluentdPluginError):
    """Configuration-related issues (bad port, unreadable config file)."""


__all__ = [
    "FluentdPluginError",
    "FetchError",
    "TransportError",
    "DecodeError",
    "ConfigError",
]
