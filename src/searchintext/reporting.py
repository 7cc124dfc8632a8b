"""
Reporting sink, logging setup and summary rendering for searchintext.

The engine only hands facts to a SearchReporter; how they look (plain text
lines or JSON records) is decided by the logging formatter installed with
configure_logging().
"""

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import IO, Any, Dict, Optional

import orjson

from .models.search_results import MatchResult, SearchSummary


logger = logging.getLogger("searchintext.results")

BANNER_RULE = "=================================="

_RESERVED_RECORD_KEYS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class SearchReporter:
    """
    Sink for search events.

    The base class ignores everything; it is what the engine uses when no
    reporter is given.
    """

    def report_match(self, result: MatchResult, verbose: bool) -> None:
        pass

    def report_skipped_too_large(self, path: str, size: int) -> None:
        pass

    def report_unreadable(self, path: str, error: OSError) -> None:
        pass


class LogReporter(SearchReporter):
    """Reporter that writes each event as a log record."""

    def __init__(self, keyword: str, log: Optional[logging.Logger] = None):
        self.keyword = keyword
        self.log = log or logger

    def report_match(self, result: MatchResult, verbose: bool) -> None:
        extra = {
            "path": result.path,
            "entry_name": result.name,
            "is_directory": result.is_directory,
            "matched": result.matched,
            "kind": result.kind.value,
        }
        if result.matched:
            self.log.info(f"{result.path} {result.entry_type} contains {self.keyword}", extra=extra)
        elif verbose:
            self.log.info(f"{result.path} does NOT contain {self.keyword}", extra=extra)

    def report_skipped_too_large(self, path: str, size: int) -> None:
        self.log.info(
            f"{path} skipped. File too large ({size} bytes).",
            extra={"path": path, "size": size, "skipped": "too_large"},
        )

    def report_unreadable(self, path: str, error: OSError) -> None:
        self.log.warning(f"{path} FILE cannot be read: {error}", extra={"path": path, "error": error})


class JsonFormatter(logging.Formatter):
    """One JSON object per record, including any ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS and not key.startswith("_"):
                log_entry[key] = value

        return orjson.dumps(log_entry, default=self._json_default).decode("utf-8")

    def _json_default(self, value: Any) -> Any:
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, (bytes, bytearray)):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, Exception):
            return str(value)
        return repr(value)


def configure_logging(level: str = "INFO", json_output: bool = False, stream: Optional[IO[str]] = None) -> None:
    """Configure the root logger with a single stream handler.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit structured JSON records when True, bare messages otherwise
        stream: Destination stream (stdout when None)
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))

    root.addHandler(handler)


def format_summary(summary: SearchSummary) -> str:
    """Render the end-of-search summary block."""
    counters = summary.counters
    lines = [
        BANNER_RULE,
        f"Done searching for {summary.keyword}",
        f"Path: {summary.root_path}",
        f"Checked {counters.files_visited} files in {counters.folders_visited} folders",
        f"Found {counters.files_matched} files containing {summary.keyword}",
        f"Found {counters.folders_matched} folders containing {summary.keyword}",
        f"Elapsed {summary.elapsed_seconds:.3f}s",
        BANNER_RULE,
    ]
    return "\n".join(lines)
