"""prwatch entry point.

Watches your open pull requests and the ones waiting for your review,
polls for status changes and notifies on CI transitions.
Usage: prwatch [--config config.yaml] [--once] [--check] [--verbose].
"""

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import List

from prwatch.adapters.github import GitHubFetcher
from prwatch.config import AppConfig, load_config
from prwatch.grouping import RepoGroup
from prwatch.logging import PrwatchLogging
from prwatch.manager import PRManager
from prwatch.notifications import LogNotificationService
from prwatch.readiness import effective_ci_status
from prwatch.store import SettingsStore, YamlFileBackend

LOG = logging.getLogger("prwatch")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="prwatch",
        description="prwatch - watch pull request status and notify on CI transitions",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Refresh once, print the PR lists, then exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    return parser.parse_args(argv)


def build_manager(config: AppConfig) -> PRManager:
    """Wire fetcher, settings store and notifier from config."""
    fetcher = GitHubFetcher(
        token=config.github_token_resolved,
        api_url=config.github.api_url,
        graphql_url=config.github.graphql_url,
        timeout=config.github.timeout,
        page_size=config.github.page_size,
    )
    store = SettingsStore(
        YamlFileBackend(Path(config.settings.path)),
        default_refresh_interval=config.polling.default_interval_seconds,
    )
    notifier = LogNotificationService(enabled=config.notifications.enabled)
    return PRManager(fetcher, store, notifier, user=config.github.username)


def format_groups(title: str, groups: List[RepoGroup], ignored_checks: set[str]) -> str:
    lines = [f"{title}:"]
    if not groups:
        lines.append("  (none)")
    for group in groups:
        lines.append(f"  {group.repo}")
        for pr in group.prs:
            status = effective_ci_status(pr, ignored_checks)
            lines.append(f"    {pr.display_number} [{pr.state}/{status}] {pr.title}")
    return "\n".join(lines)


def run_once(manager: PRManager) -> int:
    manager.start(polling=False)
    ignored = manager.filter_settings.ignored_check_names
    print(format_groups("My PRs", manager.grouped_pull_requests(), ignored))
    print(format_groups("Reviews", manager.grouped_review_prs(), ignored))
    if manager.last_error:
        print(f"Error: {manager.last_error}", file=sys.stderr)
        return 1
    return 0


def run_watch(manager: PRManager, config: AppConfig) -> None:
    """Refresh, then poll until interrupted."""
    manager.start(polling=config.polling.enabled)
    LOG.info(
        "prwatch started | user=%s | interval=%s | status=%s",
        manager.user,
        manager.refresh_interval_label,
        manager.status_glyph,
    )
    try:
        threading.Event().wait()
    finally:
        manager.stop_polling()


def main(argv: list[str] | None = None) -> int:
    """Entry point for prwatch."""
    args = parse_args(argv)
    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            LOG.warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)

    if args.check:
        print("Config OK:", config.github.api_url, config.settings.path)
        return 0

    PrwatchLogging(config.logging, verbose=args.verbose).setup()
    manager = build_manager(config)

    try:
        if args.once:
            return run_once(manager)
        run_watch(manager, config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        LOG.exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
