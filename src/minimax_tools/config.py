from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from .tools.errors import ConfigurationError

DEFAULT_API_HOST = "https://api.minimax.io"

CONFIG_PATH = Path.home() / ".config" / "minimax-tools" / "config.yml"

# Environment variables override the config file.
ENV_API_KEY = "MINIMAX_API_KEY"
ENV_API_HOST = "MINIMAX_API_HOST"
ENV_TIMEOUT = "MINIMAX_TIMEOUT"


@dataclass(frozen=True)
class AppConfig:
    api_key: str = ""
    api_host: str = DEFAULT_API_HOST
    # Seconds; None leaves httpx's own default in place.
    timeout: float | None = None
    config_version: int = 1

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(f"{ENV_API_KEY} environment variable is not set")
        return self.api_key

    def masked(self) -> dict[str, Any]:
        data = asdict(self)
        key = data["api_key"]
        data["api_key"] = f"{key[:4]}…{key[-4:]}" if len(key) > 12 else ("***" if key else "")
        return data


def _validate(cfg: Mapping[str, Any]) -> dict[str, Any]:
    defaults = asdict(AppConfig())
    merged = {**defaults, **{k: v for k, v in cfg.items() if k in defaults}}
    if not isinstance(merged["api_key"], str):
        merged["api_key"] = defaults["api_key"]
    merged["api_key"] = merged["api_key"].strip()
    if not isinstance(merged["api_host"], str) or not merged["api_host"].strip():
        merged["api_host"] = defaults["api_host"]
    merged["api_host"] = merged["api_host"].strip().rstrip("/")
    raw_timeout = merged.get("timeout")
    try:
        timeout = float(raw_timeout) if raw_timeout is not None else None
    except (TypeError, ValueError):
        timeout = None
    merged["timeout"] = timeout if timeout is not None and timeout > 0 else None
    merged["config_version"] = defaults["config_version"]
    return merged


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if environ.get(ENV_API_KEY):
        overrides["api_key"] = environ[ENV_API_KEY]
    if environ.get(ENV_API_HOST):
        overrides["api_host"] = environ[ENV_API_HOST]
    if environ.get(ENV_TIMEOUT):
        overrides["timeout"] = environ[ENV_TIMEOUT]
    return overrides


def load_config(
    path: Path = CONFIG_PATH,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Build the effective config: defaults < YAML file < environment."""
    environ = os.environ if environ is None else environ
    raw: Any = {}
    if path.exists():
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    cfg = _validate(raw if isinstance(raw, dict) else {})
    cfg = _validate({**cfg, **_from_env(environ)})
    return AppConfig(**cfg)


def save_config(cfg: AppConfig, path: Path = CONFIG_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    validated = _validate(asdict(cfg))
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(yaml.safe_dump(validated, sort_keys=True), encoding="utf-8")
    tmp_path.replace(path)


def with_overrides(cfg: AppConfig, **changes: Any) -> AppConfig:
    return AppConfig(**_validate({**asdict(cfg), **changes}))
