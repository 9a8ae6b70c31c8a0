from __future__ import annotations

import json
import os
from pathlib import Path

from .stats import StatsOptions

DEFAULT_CONFIG: dict[str, object] = {
    "github_token": "",
    "timezone": "UTC",
    "session_timeout_min": 45,
    "first_commit_bonus_min": 15,
    "exclude_bots": True,
    "exclude_merge_commits": False,
    "authors": [],
    "per_page": 100,
    "max_pages": 0,
    "cache_ttl_s": 3600,
    "api_url": "https://api.github.com",
}


def _number(v: object) -> int | float:
    f = float(v)
    return int(f) if f.is_integer() else f


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    data = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"config must be a JSON object: {config_path}")
    return data


def save_config(config_path: Path, config: dict) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def resolve_token(config: dict, environ: dict[str, str] | None = None) -> str:
    if environ is None:
        environ = dict(os.environ)
    token = str(config.get("github_token", "") or "").strip()
    if token:
        return token
    return str(environ.get("GITHUB_TOKEN", "") or "").strip()


def options_from_config(config: dict, environ: dict[str, str] | None = None) -> StatsOptions:
    """Build StatsOptions from a config dict; unknown keys are ignored, missing keys keep defaults."""
    opts = StatsOptions()
    if "timezone" in config and str(config["timezone"] or "").strip():
        opts.timezone = str(config["timezone"]).strip()
    if config.get("session_timeout_min") is not None:
        opts.session_timeout_min = _number(config["session_timeout_min"])
    if config.get("first_commit_bonus_min") is not None:
        opts.first_commit_bonus_min = _number(config["first_commit_bonus_min"])
    if "exclude_bots" in config:
        opts.exclude_bots = bool(config["exclude_bots"])
    if "exclude_merge_commits" in config:
        opts.exclude_merge_commits = bool(config["exclude_merge_commits"])
    if isinstance(config.get("authors"), list):
        opts.authors = [str(a) for a in config["authors"] if str(a).strip()]
    if config.get("per_page"):
        opts.per_page = int(config["per_page"])
    if config.get("max_pages"):
        opts.max_pages = int(config["max_pages"])
    if config.get("cache_ttl_s") is not None:
        opts.cache_ttl_s = float(config["cache_ttl_s"])
    if str(config.get("api_url", "") or "").strip():
        opts.api_url = str(config["api_url"]).strip()
    opts.github_token = resolve_token(config, environ)
    return opts


def ensure_config_file(config_path: Path) -> dict:
    """Write a config with default values unless one exists; return the loaded config."""
    if not config_path.exists():
        save_config(config_path, dict(DEFAULT_CONFIG))
    return load_config(config_path)
