"""PluginConfig

Explicit, immutable configuration for one plugin run. Built once by the
harness and passed into the fetcher and the agent helper.

Sources, highest precedence first:
  1. CLI flags (--host / --port / --tempfile)
  2. Environment:
       MACKEREL_FLUENTD_HOST     -> host
       MACKEREL_FLUENTD_PORT     -> port
       MACKEREL_FLUENTD_TEMPFILE -> tempfile
  3. Optional YAML file (--config) with top-level keys host, port, tempfile
  4. Defaults (localhost:24220, tempfile derived from host/port)
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, ClassVar

import yaml

from .errors import ConfigError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 24220
TEMPFILE_TEMPLATE = "/tmp/mackerel-plugin-fluentd-{host}-{port}"


def _coerce_port(raw: Any) -> int:
    try:
        port = int(str(raw).strip())
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid port {raw!r}") from e
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range: {port}")
    return port


@dataclass(frozen=True, slots=True)
class PluginConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    tempfile: str = ""

    ENV_MAP: ClassVar[dict[str, str]] = {
        'host': 'MACKEREL_FLUENTD_HOST',
        'port': 'MACKEREL_FLUENTD_PORT',
        'tempfile': 'MACKEREL_FLUENTD_TEMPFILE',
    }

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigError("host must not be empty")
        if not isinstance(self.port, int) or isinstance(self.port, bool) or not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port!r}")

    def state_path(self) -> str:
        """Tempfile override, or the per-endpoint default path."""
        return self.tempfile or TEMPFILE_TEMPLATE.format(host=self.host, port=self.port)

    def merged(self, overrides: Mapping[str, Any]) -> PluginConfig:
        """Return a copy with non-empty overrides applied (port coerced)."""
        kw: dict[str, Any] = {}
        for key in ('host', 'port', 'tempfile'):
            val = overrides.get(key)
            if val is None or val == '':
                continue
            kw[key] = _coerce_port(val) if key == 'port' else str(val)
        return replace(self, **kw) if kw else self

    @classmethod
    def from_env(cls, base: PluginConfig | None = None, environ: Mapping[str, str] | None = None) -> PluginConfig:
        env = os.environ if environ is None else environ
        raw = {attr: env.get(name, '').strip() for attr, name in cls.ENV_MAP.items()}
        return (base or cls()).merged(raw)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> PluginConfig:
        return cls().merged(load_config_file(path))

    def as_dict(self) -> dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'tempfile': self.state_path(),
        }


def load_config_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read the optional YAML config; an empty file is an empty mapping."""
    p = Path(path)
    try:
        with p.open(encoding='utf-8') as fh:
            data: Any = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigError(f"cannot read config file {p}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"malformed config file {p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {p} must contain a mapping")
    unknown = set(data) - set(PluginConfig.ENV_MAP)
    if unknown:
        raise ConfigError(f"unknown config keys in {p}: {', '.join(sorted(unknown))}")
    return data


def resolve_config(cli: Mapping[str, Any], *, config_path: str | None = None,
                   environ: Mapping[str, str] | None = None) -> PluginConfig:
    cfg = PluginConfig.from_file(config_path) if config_path else PluginConfig()
    cfg = PluginConfig.from_env(cfg, environ)
    return cfg.merged(cli)


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "PluginConfig",
    "load_config_file",
    "resolve_config",
]
