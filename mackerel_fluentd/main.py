#!/usr/bin/env python3
"""mackerel-plugin-fluentd entrypoint.

Fetches fluentd monitor_agent plugin status once, then prints either metric
values or (when MACKEREL_AGENT_PLUGIN_META is set) graph definitions.

Exit codes:
 0 - output written
 1 - fetch failed (transport or decode); nothing written to stdout
 2 - invalid configuration

Usage:
  mackerel-plugin-fluentd --host localhost --port 24220
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping
from typing import TextIO

from .agent import META_ENV, PluginHelper
from .config import DEFAULT_HOST, DEFAULT_PORT, PluginConfig, resolve_config
from .errors import ConfigError, FetchError
from .plugin import FluentdPlugin
from .utils.env_flags import is_set_env
from .utils.logging_utils import setup_logging
from .version import get_version

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FETCH_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog='mackerel-plugin-fluentd',
                                 description='Report fluentd buffered output plugin metrics to mackerel-agent')
    # Defaults stay None so environment / config file values are only overridden when a flag is given.
    ap.add_argument('--host', help=f'fluentd monitor_agent host (default {DEFAULT_HOST})')
    ap.add_argument('--port', help=f'fluentd monitor_agent port (default {DEFAULT_PORT})')
    ap.add_argument('--tempfile', help='Temp file name (default /tmp/mackerel-plugin-fluentd-HOST-PORT)')
    ap.add_argument('--config', help='Optional YAML file with host/port/tempfile')
    ap.add_argument('--log-level', default='WARNING', help='Logging level for stderr diagnostics')
    ap.add_argument('--version', action='version', version=f'%(prog)s {get_version()}')
    return ap


def run(config: PluginConfig, *, definitions: bool, stream: TextIO | None = None) -> int:
    plugin = FluentdPlugin.prepare(config)
    helper = PluginHelper(plugin, config.state_path())
    try:
        if definitions:
            helper.output_definitions(stream)
        else:
            helper.output_values(stream)
    except FetchError as e:
        logger.error("fetch from %s:%s failed: %s", config.host, config.port, e)
        return EXIT_FETCH_ERROR
    return EXIT_OK


def main(argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    env = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        config = resolve_config(
            {'host': args.host, 'port': args.port, 'tempfile': args.tempfile},
            config_path=args.config,
            environ=env,
        )
    except ConfigError as e:
        logger.error("invalid configuration: %s", e)
        return EXIT_CONFIG_ERROR
    logger.debug("Resolved configuration: %s", config.as_dict())
    return run(config, definitions=is_set_env(META_ENV, env))


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
