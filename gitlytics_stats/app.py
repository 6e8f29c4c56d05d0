"""
Read-only JSON service over the stats pipeline (Flask).

Endpoints:
  GET /healthz         -> liveness + whether a token is configured
  GET /api/stats       -> streaks, yearly activity and languages for the configured user
  GET /api/fragments   -> the markdown fragments the README updater would splice in

Run:
  export GITHUB_TOKEN="github_pat_..."
  export USERNAME="octocat"
  python -m gitlytics_stats serve
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from flask import Flask, jsonify

from .config import Config
from .github import GitHubAPIError, GitHubClient
from .pipeline import StatsReport, build_report

logger = logging.getLogger(__name__)


def create_app(config: Config, client_factory: Optional[Callable[[Config], GitHubClient]] = None) -> Flask:
    app = Flask(__name__)
    make_client = client_factory or GitHubClient

    # Simple in-memory TTL cache: one entry, the configured user's report.
    cache: Dict[str, Tuple[float, StatsReport]] = {}

    def _report() -> Tuple[bool, StatsReport]:
        key = config.username.lower()
        cached = cache.get(key)
        if cached:
            ts, report = cached
            if (time.time() - ts) <= config.cache_ttl_seconds:
                return True, report
        report = build_report(make_client(config), config)
        cache[key] = (time.time(), report)
        return False, report

    def _error(e: GitHubAPIError) -> Tuple[Any, int]:
        logger.error("Stats request failed: %s", e)
        return jsonify({"error": str(e)}), 502

    @app.route("/healthz", methods=["GET"])
    def healthz():
        return jsonify({"ok": True, "token_configured": bool(config.token), "cache_ttl_seconds": config.cache_ttl_seconds})

    @app.route("/api/stats", methods=["GET"])
    def api_stats():
        try:
            cached, report = _report()
        except GitHubAPIError as e:
            return _error(e)
        return jsonify({"cached": cached, **report.to_json()})

    @app.route("/api/fragments", methods=["GET"])
    def api_fragments():
        try:
            cached, report = _report()
        except GitHubAPIError as e:
            return _error(e)
        return jsonify({"cached": cached, "fragments": report.fragments()})

    return app
