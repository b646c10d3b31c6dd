#!/usr/bin/env python3
"""
Beautiful Logging System
Colored console logging with icons, plus an optional JSON-lines run log
"""

import json
import logging
import pathlib
import sys
import time
from datetime import datetime
from typing import Optional

from colorama import Fore, Back, Style, init
from tqdm import tqdm

# Initialize colorama
init(autoreset=True)

ROOT_LOGGER_NAME = 'contrib_intelligence'


class BeautifulFormatter(logging.Formatter):
    """Console formatter: time, icon, [component] message

    The level name is only spelled out for warnings and worse; debug lines are dimmed.
    """

    LEVEL_STYLES = {
        'DEBUG': Style.DIM,
        'WARNING': Fore.YELLOW + Style.BRIGHT,
        'ERROR': Fore.RED + Style.BRIGHT,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    ICONS = {
        'WARNING': '⚠️',
        'ERROR': '❌',
        'CRITICAL': '🚨',
        'PHASE': '🚀',
        'END': '🏁',
        'DATA': '📊',
        'CACHE': '💾',
    }

    RULE = '─' * 72

    @staticmethod
    def component(name: str) -> str:
        """'contrib_intelligence.collectors.PullRequestCollector' -> 'PullRequestCollector'"""
        return name.rsplit('.', 1)[-1]

    def format(self, record):
        icon = getattr(record, 'icon', None) or self.ICONS.get(record.levelname, '·')
        style = self.LEVEL_STYLES.get(record.levelname, '')

        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        component = f"{Fore.MAGENTA}[{self.component(record.name)}]{Style.RESET_ALL}"

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        if record.levelno >= logging.WARNING:
            message = f"{record.levelname}: {message}"

        line = f"{Fore.BLUE}{timestamp}{Style.RESET_ALL} {icon} {component} {style}{message}{Style.RESET_ALL}"

        if getattr(record, 'separator', False):
            return f"{Fore.CYAN}{self.RULE}{Style.RESET_ALL}\n{line}"
        return line


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        base = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "lvl": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "ctx"):
            base.update(record.ctx)
        return json.dumps(base, ensure_ascii=False, default=str)


def setup_logging(verbose: bool = False, quiet: bool = False,
                  log_dir: Optional[str] = None, run_id: Optional[str] = None) -> logging.Logger:
    """Configure console (and optionally JSON file) logging for the package logger"""
    root = logging.getLogger(ROOT_LOGGER_NAME)

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(BeautifulFormatter())
    root.addHandler(console_handler)

    if log_dir:
        pathlib.Path(log_dir).mkdir(parents=True, exist_ok=True)
        suffix = run_id or datetime.now().strftime('%Y%m%d_%H%M%S')
        fh = logging.FileHandler(f"{log_dir}/run_{suffix}.jsonl", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(JsonFormatter())
        root.addHandler(fh)

    root.propagate = False

    # Suppress noisy loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)

    return root


class BeautifulLogger:
    """Phase-oriented helpers on top of the package logger"""

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        self.logger = logging.getLogger(name)

    def phase_start(self, phase_name: str, description: str = ""):
        message = f"Phase: {phase_name}"
        if description:
            message += f" - {description}"
        self._log_with_icon(logging.INFO, message, 'PHASE', separator=True)

    def phase_end(self, phase_name: str, stats: Optional[dict] = None):
        message = f"Completed: {phase_name}"
        if stats:
            message += f" ({_format_stats(stats)})"
        self._log_with_icon(logging.INFO, message, 'END')

    def data_stats(self, data_type: str, count: int, details: Optional[dict] = None):
        message = f"{data_type}: {count:,} items"
        if details:
            message += f" ({_format_stats(details)})"
        self._log_with_icon(logging.INFO, message, 'DATA')

    def cache_stats(self, hits: int, misses: int):
        self._log_with_icon(logging.INFO, f"Cache: {hits} cached, {misses} fetched", 'CACHE')

    def pipeline_summary(self, stats: dict):
        """Print the end-of-run summary block"""
        print(f"\n{Fore.CYAN}{'═' * 80}{Style.RESET_ALL}")
        print(f"{Fore.GREEN}{'🏆 ANALYSIS COMPLETE'}{Style.RESET_ALL}".center(80))
        print(f"{Fore.CYAN}{'═' * 80}{Style.RESET_ALL}")

        for key, value in stats.items():
            label = key.replace('_', ' ').title()
            if isinstance(value, float):
                print(f"{Fore.WHITE}  • {label}: {Fore.YELLOW}{value:,.1f}{Style.RESET_ALL}")
            elif isinstance(value, int):
                print(f"{Fore.WHITE}  • {label}: {Fore.YELLOW}{value:,}{Style.RESET_ALL}")
            else:
                print(f"{Fore.WHITE}  • {label}: {Fore.YELLOW}{value}{Style.RESET_ALL}")

        print(f"{Fore.CYAN}{'═' * 80}{Style.RESET_ALL}\n")

    def _log_with_icon(self, level: int, message: str, icon_key: Optional[str] = None,
                       separator: bool = False):
        extra = {}
        if icon_key:
            extra['icon'] = BeautifulFormatter.ICONS.get(icon_key, '📝')
        if separator:
            extra['separator'] = True
        self.logger.log(level, message, extra=extra)


def _format_stats(stats: dict) -> str:
    parts = []
    for key, value in stats.items():
        if isinstance(value, float):
            parts.append(f"{key}: {value:.1f}")
        else:
            parts.append(f"{key}: {value}")
    return ', '.join(parts)


def log_success(message: str):
    """Print success message with green color and checkmark"""
    print(f"{Fore.GREEN}✅ {message}{Style.RESET_ALL}")


def log_warning(message: str):
    """Print warning message with yellow color and warning icon"""
    print(f"{Fore.YELLOW}⚠️  {message}{Style.RESET_ALL}", file=sys.stderr)


def log_error(message: str):
    """Print error message with red color and X mark"""
    print(f"{Fore.RED}❌ {message}{Style.RESET_ALL}", file=sys.stderr)


def create_progress_bar(total: Optional[int] = None, desc: str = "Processing", unit: str = "items",
                        disable: bool = False) -> tqdm:
    """Create a beautiful progress bar; total None gives an open-ended counter"""
    bar_format = ("{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]" if total
                  else "{desc}: {n_fmt} {unit} [{elapsed}]")
    return tqdm(
        total=total,
        desc=f"{Fore.GREEN}{desc}{Style.RESET_ALL}",
        unit=unit,
        bar_format=bar_format,
        colour="green",
        ncols=80,
        leave=False,
        disable=disable,
    )
