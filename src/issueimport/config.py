from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .github_rest import DEFAULT_API_URL
from .submitter import DEFAULT_DELAY_SECONDS

CONFIG_DEFAULT = "issueimport.config.yaml"


class ConfigError(RuntimeError):
    pass


@dataclass
class ImportConfig:
    github_repo: str | None = None
    github_api_url: str = DEFAULT_API_URL
    token_env: str = "GITHUB_TOKEN"
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    verbose: bool = False
    dry_run_default: bool = False
    max_file_mb: int = 50
    summary_json: str | None = None
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "INFO"
    source_path: Path | None = None


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith("$"):
        return os.getenv(value[1:], value)
    return value


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return cast(dict[str, Any], value)


def _apply_env_overrides(cfg: ImportConfig) -> ImportConfig:
    api = os.environ.get("ISSUEIMPORT_GITHUB_API", "").strip()
    if api:
        cfg.github_api_url = api
    delay = os.environ.get("ISSUEIMPORT_DELAY", "").strip()
    if delay:
        try:
            cfg.delay_seconds = max(0.0, float(delay))
        except ValueError as exc:
            raise ConfigError(f"ISSUEIMPORT_DELAY must be a number, got {delay!r}") from exc
    return cfg


def default_config() -> ImportConfig:
    return _apply_env_overrides(ImportConfig())


def load_config(path: str | Path) -> ImportConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Configuration file not found: {p}")
    try:
        loaded = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration root must be a mapping: {p}")
    raw = cast(dict[str, Any], loaded)
    gh = _section(raw, "github")
    upload = _section(raw, "upload")
    out = _section(raw, "output")
    logging_config = _section(raw, "logging")

    try:
        cfg = ImportConfig(
            github_repo=_resolve_env_var(gh.get("repo")),
            github_api_url=str(gh.get("api_url") or DEFAULT_API_URL),
            token_env=str(gh.get("token_env") or "GITHUB_TOKEN"),
            delay_seconds=max(0.0, float(upload.get("delay_seconds", DEFAULT_DELAY_SECONDS))),
            verbose=bool(upload.get("verbose", False)),
            dry_run_default=bool(upload.get("dry_run", False)),
            max_file_mb=int(upload.get("max_file_mb", 50)),
            summary_json=out.get("summary_json"),
            logging_json_enabled=bool(logging_config.get("json_enabled", False)),
            logging_level=str(logging_config.get("level", "INFO")),
            source_path=p,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in {p}: {exc}") from exc
    return _apply_env_overrides(cfg)


def load_config_or_default(path: str | Path | None) -> ImportConfig:
    """Load ``path`` when it exists; otherwise fall back to defaults."""
    if path and Path(path).exists():
        return load_config(path)
    return default_config()


__all__ = [
    "CONFIG_DEFAULT",
    "ConfigError",
    "ImportConfig",
    "default_config",
    "load_config",
    "load_config_or_default",
]
