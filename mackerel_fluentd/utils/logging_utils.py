"""Logging setup for the plugin process.

stdout belongs to the host agent protocol, so every handler configured here
writes to stderr.
"""
from __future__ import annotations

import logging
import sys
from typing import TextIO

from .env_flags import is_truthy_env

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
# Minimal format (message only); the agent captures stderr into its own log.
MINIMAL_CONSOLE_FORMAT = '%(message)s'

def setup_logging(level: str = 'WARNING', fmt: str = DEFAULT_FORMAT, stream: TextIO | None = None) -> logging.Logger:
    """Configure root logging.

    Console format precedence: an explicit ``fmt`` different from
    DEFAULT_FORMAT wins; otherwise MACKEREL_FLUENTD_VERBOSE_LOG=1 selects
    DEFAULT_FORMAT and the minimal message-only format is used by default.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    root = logging.getLogger()
    root.setLevel(log_level)
    # Remove existing handlers to avoid duplication on re-init
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()

    if fmt != DEFAULT_FORMAT:
        console_fmt = fmt
    elif is_truthy_env('MACKEREL_FLUENTD_VERBOSE_LOG'):
        console_fmt = DEFAULT_FORMAT
    else:
        console_fmt = MINIMAL_CONSOLE_FORMAT

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(log_level)
    console.setFormatter(logging.Formatter(console_fmt))
    root.addHandler(console)

    return root

__all__ = ["setup_logging", "DEFAULT_FORMAT", "MINIMAL_CONSOLE_FORMAT"]
