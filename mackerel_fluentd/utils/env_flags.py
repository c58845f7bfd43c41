"""Environment flag helpers.

Two interpretations are in use:

* truthy flags, using the canonical set {"1","true","yes","on"}
  (case-insensitive), for our own feature toggles
* presence flags, where any non-empty value counts; the host agent signals
  definitions mode this way (``MACKEREL_AGENT_PLUGIN_META=1``)

Usage examples:
    from mackerel_fluentd.utils.env_flags import is_truthy_env, is_set_env
    if is_set_env('MACKEREL_AGENT_PLUGIN_META'):
        ...
"""
from __future__ import annotations

import os
from collections.abc import Mapping

TRUTHY_SET: set[str] = {"1","true","yes","on"}

def is_truthy(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in TRUTHY_SET

def is_truthy_env(name: str, default: str | None = None) -> bool:
    return is_truthy(os.getenv(name, default or ''))

def is_set_env(name: str, environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return bool(env.get(name, ''))

__all__ = [
    'TRUTHY_SET',
    'is_truthy',
    'is_truthy_env',
    'is_set_env',
]
