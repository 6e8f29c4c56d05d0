"""
Runtime configuration.

All settings come from the process environment and are collected once, at
startup, into a frozen Config value that is handed to every component.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_API_VERSION = "2022-11-28"
DEFAULT_README_PATH = "README.md"
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_CACHE_TTL_SECONDS = 600
DEFAULT_PORT = 5000


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Config:
    token: str
    username: str
    readme_path: str = DEFAULT_README_PATH
    api_base: str = DEFAULT_API_BASE
    api_version: str = DEFAULT_API_VERSION
    timeout: int = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "Config":
        """
        Build a Config from environment variables.

        Keyword overrides (e.g. CLI flags) win over the environment when they
        are not None. Raises ConfigError when the token or username is missing.
        """
        env = os.environ if environ is None else environ
        overrides = {k: v for k, v in overrides.items() if v is not None}

        token = overrides.pop("token", None) or _get(env, "GITHUB_TOKEN")
        username = overrides.pop("username", None) or _get(env, "USERNAME") or _get(env, "GITHUB_USERNAME")

        if not token:
            raise ConfigError("GITHUB_TOKEN is not set. Export a personal access token before running.")
        if not username:
            raise ConfigError("USERNAME is not set. Export the GitHub login whose commits should be counted.")

        config = cls(
            token=token,
            username=username,
            readme_path=_get(env, "README_PATH") or DEFAULT_README_PATH,
            api_base=(_get(env, "GITHUB_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            api_version=_get(env, "GITHUB_API_VERSION") or DEFAULT_API_VERSION,
            timeout=_get_int(env, "REQUEST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            log_level=(_get(env, "LOG_LEVEL") or "INFO").upper(),
            cache_ttl_seconds=_get_int(env, "CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
            port=_get_int(env, "PORT", DEFAULT_PORT),
        )
        if overrides:
            config = replace(config, **overrides)
        return config


def _get(env: Mapping[str, str], name: str) -> str:
    return (env.get(name) or "").strip()


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _get(env, name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from None
