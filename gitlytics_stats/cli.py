"""
Command-line entry point.

Usage:
    gitlytics-stats                 # update README.md (same as `update`)
    gitlytics-stats update --readme docs/README.md
    gitlytics-stats stats           # print computed stats as JSON
    gitlytics-stats serve           # JSON service on $PORT
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import Config, ConfigError
from .github import GitHubAPIError, GitHubClient
from .pipeline import build_report, update_readme

logger = logging.getLogger("gitlytics_stats")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitlytics-stats",
        description="Render GitHub contribution stats into a README.",
    )
    parser.add_argument("--username", "-u", help="GitHub login whose commits are counted (default: $USERNAME)")
    parser.add_argument("--log-level", help="Logging level (default: $LOG_LEVEL or INFO)")

    sub = parser.add_subparsers(dest="command")
    update = sub.add_parser("update", help="Rewrite the stats sections of the README")
    update.add_argument("--readme", "-r", dest="readme_path", help="README to update (default: $README_PATH or README.md)")
    sub.add_parser("stats", help="Print the computed statistics as JSON")
    serve = sub.add_parser("serve", help="Serve the statistics over HTTP")
    serve.add_argument("--port", type=int, help="Port to listen on (default: $PORT or 5000)")
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    command = args.command or "update"

    try:
        config = Config.from_env(
            username=args.username,
            log_level=args.log_level.upper() if args.log_level else None,
            readme_path=getattr(args, "readme_path", None),
            port=getattr(args, "port", None),
        )
    except ConfigError as e:
        _configure_logging("INFO")
        logger.error("Configuration error: %s", e)
        return 1

    _configure_logging(config.log_level)

    try:
        if command == "serve":
            from .app import create_app

            create_app(config).run(host="0.0.0.0", port=config.port)
        elif command == "stats":
            report = build_report(GitHubClient(config), config)
            print(json.dumps(report.to_json(), indent=2))
        else:
            update_readme(config)
    except GitHubAPIError as e:
        logger.error("GitHub request failed: %s", e)
        return 1
    except OSError as e:
        logger.error("Could not update %s: %s", config.readme_path, e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 1
    except Exception:
        logger.exception("Stats run failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
