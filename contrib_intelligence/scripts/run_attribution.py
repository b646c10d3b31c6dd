#!/usr/bin/env python3
"""
Contributor Attribution Runner
Command-line interface: collect contributors for repositories or pull requests and attribute them to organizations
"""

import argparse
import logging
import os
import re
import signal
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import dateutil.parser
import yaml

from ..core.beautiful_logger import (
    BeautifulLogger,
    create_progress_bar,
    log_error,
    log_success,
    log_warning,
    setup_logging,
)
from ..core.cache_store import SqliteCacheStore
from ..core.cancellation import CancellationToken
from ..core.config import CollectionOptions, load_config
from ..core.errors import FetchError, InvalidTargetError
from ..core.fetch_client import FetchClient
from ..core.orchestrator import CollectionResult, collect_contributors, collect_pr_contributors
from ..core.rate_limiter import RateLimiter
from ..core.timezone_utils import default_since, ensure_utc
from ..reporting.report import export_report_json, format_report_text, generate_report

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_ABORTED = 130

REPO_URL = re.compile(r'^https?://github\.com/([^/]+)/([^/\s#?]+)/?$')
PR_URL = re.compile(r'^https?://github\.com/([^/]+)/([^/\s#?]+)/pull/(\d+)/?$')
SHORTHAND = re.compile(r'^[\w.-]+/[\w.-]+$')


@dataclass
class Target:
    """A repository, or one pull request within it"""
    owner: str
    repo: str
    pr_number: Optional[int] = None
    url: str = ''

    @property
    def label(self) -> str:
        base = f"{self.owner}/{self.repo}"
        return f"{base}#{self.pr_number}" if self.pr_number is not None else base


def _strip_git(repo: str) -> str:
    return repo[:-4] if repo.endswith('.git') else repo


def parse_github_url(url: str) -> Target:
    """Parse https://github.com/owner/repo or https://github.com/owner/repo/pull/N"""
    url = url.strip()

    match = PR_URL.match(url)
    if match:
        owner, repo, number = match.groups()
        return Target(owner=owner, repo=_strip_git(repo), pr_number=int(number), url=url)

    match = REPO_URL.match(url)
    if match:
        owner, repo = match.groups()
        repo = _strip_git(repo)
        if repo:
            return Target(owner=owner, repo=repo, url=url)

    if SHORTHAND.match(url):
        raise InvalidTargetError(
            f"'{url}' is not a URL; use full URLs like https://github.com/{url}"
        )
    raise InvalidTargetError(
        f"Unrecognised target '{url}'; use full URLs like https://github.com/owner/repo"
    )


def _parse_since(value: str) -> datetime:
    try:
        return ensure_utc(dateutil.parser.isoparse(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='contrib-intel',
        description='Attribute public repository contributions to organizations',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  contrib-intel https://github.com/psf/requests
  contrib-intel https://github.com/psf/requests/pull/6000 --verbose
  contrib-intel https://github.com/a/b https://github.com/a/c --since 2024-01-01 --output report.json
        """
    )

    parser.add_argument('urls', nargs='+', metavar='URL', help='Repository or pull request URL')
    parser.add_argument('--since', type=_parse_since,
                        help='Only count activity after this date (default: 12 months ago)')
    parser.add_argument('--delay', type=int, metavar='MS', help='Minimum delay between requests in ms')
    parser.add_argument('--no-cache', action='store_true', help='Bypass the response cache')
    parser.add_argument('--config', help='YAML configuration file')
    parser.add_argument('--fail-fast', action='store_true', help='Stop at the first target that fails')
    parser.add_argument('--output', '-o', help='Write the report as JSON to this path')
    parser.add_argument('--log-dir', help='Also write a JSON-lines run log to this directory')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    verbosity.add_argument('--quiet', '-q', action='store_true', help='Only show warnings and the report')

    return parser


class ProgressDisplay:
    """Progress observer rendering one tqdm bar per stage"""

    def __init__(self, disable: bool = False):
        self.disable = disable
        self._stage: Optional[str] = None
        self._bar = None

    def __call__(self, stage: str, current: int, total: Optional[int]) -> None:
        if stage != self._stage:
            self.close()
            self._stage = stage
            self._bar = create_progress_bar(total=total, desc=stage, disable=self.disable)
        if total is not None and self._bar.total != total:
            self._bar.total = total
        self._bar.n = current
        self._bar.refresh()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
        self._bar = None
        self._stage = None


def install_interrupt_handler(token: CancellationToken):
    """First Ctrl-C requests a graceful stop; the second one is fatal"""
    def handler(signum, frame):
        token.cancel()
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        log_warning("Interrupted, finishing the current request (Ctrl-C again to force quit)")

    return signal.signal(signal.SIGINT, handler)


def run_target(client: FetchClient, target: Target, options: CollectionOptions) -> CollectionResult:
    if target.pr_number is not None:
        return collect_pr_contributors(client, target.owner, target.repo, target.pr_number, options)
    return collect_contributors(client, target.owner, target.repo, options)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        log_error(f"Invalid configuration: {e}")
        return EXIT_FAILURE

    setup_logging(verbose=args.verbose, quiet=args.quiet, log_dir=args.log_dir or config.log_dir)
    blog = BeautifulLogger()

    if args.delay is not None:
        if args.delay < 0:
            log_error("--delay must be non-negative")
            return EXIT_FAILURE
        config.fetch.delay_ms = args.delay
    if args.no_cache:
        config.fetch.cache_enabled = False

    try:
        targets = [parse_github_url(url) for url in args.urls]
    except InvalidTargetError as e:
        log_error(str(e))
        return EXIT_FAILURE

    since = args.since or default_since(config.lookback_months)
    token = CancellationToken()
    progress = ProgressDisplay(disable=args.quiet)

    def on_retry(attempt: int, error: Exception) -> None:
        logger.warning(f"Retry {attempt}/{config.fetch.max_attempts}: {error}")

    cache = None
    if config.fetch.cache_enabled:
        cache = SqliteCacheStore(config.fetch.cache_path, config.fetch.cache_ttl_secs)

    client = FetchClient(
        config=config.fetch,
        cache=cache,
        rate_limiter=RateLimiter(config.fetch.delay_ms, config.fetch.jitter_ms),
        on_retry=on_retry,
    )
    options = CollectionOptions(
        since=since,
        cancellation=token,
        on_progress=progress,
        verbose=args.verbose,
    )

    previous_handler = install_interrupt_handler(token)
    results: List[CollectionResult] = []
    labels: List[str] = []
    failures = 0

    try:
        for target in targets:
            if token.cancelled:
                break
            blog.phase_start("Target", f"{target.label} (since {since.date().isoformat()})")
            try:
                result = run_target(client, target, options)
            except FetchError as e:
                failures += 1
                log_error(f"{target.label}: {e}")
                if args.fail_fast:
                    return EXIT_FAILURE
                continue
            finally:
                progress.close()

            results.append(result)
            labels.append(target.label)
            blog.data_stats(target.label, result.stats.unique_contributors, result.stats.to_dict())

        if not results:
            log_error("No target could be collected")
            return EXIT_FAILURE

        report = generate_report(results, labels)
        print(format_report_text(report))

        summary = {
            'targets': len(results),
            'failed_targets': failures,
            'organizations': len(report.organizations),
            'unknown_contributors': len(report.unknown_contributors),
            'requests_made': client.requests_made,
        }
        blog.pipeline_summary(summary)
        if cache is not None:
            blog.cache_stats(cache.hits, cache.misses)

        if args.output:
            # Bare file names go to the configured output directory
            output = args.output if os.path.dirname(args.output) else os.path.join(config.output_dir, args.output)
            path = export_report_json(report, output)
            log_success(f"Report saved to {path}")

        if token.cancelled:
            log_warning("Run was interrupted; the report covers partial results")
            return EXIT_ABORTED
        return 0
    finally:
        progress.close()
        if cache is not None:
            cache.close()
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)


if __name__ == '__main__':
    sys.exit(main())
