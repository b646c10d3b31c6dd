#!/usr/bin/env python3
"""
Configuration
Typed configuration dataclasses and YAML loading
"""

import os
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

SEVEN_DAYS_SECS = 7 * 24 * 60 * 60


def default_cache_path() -> str:
    """SQLite cache location, honouring XDG_CACHE_HOME"""
    base = os.environ.get('XDG_CACHE_HOME') or str(Path.home() / '.cache')
    return str(Path(base) / 'contrib-intelligence' / 'cache.db')


ProgressCallback = Callable[[str, int, Optional[int]], None]
RetryCallback = Callable[[int, Exception], None]


@dataclass
class FetchConfig:
    """Fetch layer configuration"""
    delay_ms: int = 1500            # minimum spacing between outbound requests
    jitter_ms: int = 200            # +/- random spread applied to each wait
    max_attempts: int = 5           # total attempts for retriable failures
    backoff_base_secs: float = 2.0  # first retry delay, doubled each attempt
    backoff_max_secs: float = 60.0
    timeout_secs: int = 30
    cache_enabled: bool = True
    cache_ttl_secs: int = SEVEN_DAYS_SECS
    cache_path: str = field(default_factory=default_cache_path)

    def __post_init__(self):
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {self.delay_ms}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")


@dataclass
class CollectionOptions:
    """Options for a single collection run

    since: only activity strictly after this instant counts; None means no window
    cancellation: checked before every page and profile fetch
    on_progress: called as (stage, current, total) with total None for open-ended paging
    """
    since: Optional[datetime] = None
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    on_progress: Optional[ProgressCallback] = None
    verbose: bool = False


@dataclass
class AppConfig:
    """Main application configuration"""
    fetch: FetchConfig = field(default_factory=FetchConfig)
    lookback_months: int = 12
    log_dir: Optional[str] = None
    output_dir: str = 'reports'


def _build(cls, data: Dict[str, Any], section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{section}' config: {', '.join(sorted(unknown))}")
    return cls(**data)


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load and validate configuration; a missing file yields defaults"""
    if not path or not Path(path).exists():
        if path:
            logger.debug(f"Config file {path} not found, using defaults")
        return AppConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config {path} must be a mapping at the top level")

    fetch_data = raw.pop('fetch', {}) or {}
    fetch_cfg = _build(FetchConfig, fetch_data, 'fetch')

    app_data = dict(raw)
    app_data['fetch'] = fetch_cfg
    return _build(AppConfig, app_data, 'root')
