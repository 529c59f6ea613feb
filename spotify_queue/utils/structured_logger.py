"""
Structured logging for dispatch events.
Provides event-named log lines on the console and optional JSONL files.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("spotify_queue")
        logger.info("item_enqueued", index=3, track="Song - Artist")
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            json_log_path = log_dir / f"spotify_queue_{timestamp}.jsonl"
            self._json_file = open(json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
        }

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, TypeError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _log(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(
                level, self._format_message(event, **context), extra={"markup": False}
            )
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._log(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._log(logging.INFO, event, **context)

    def error(self, event: str, **context) -> None:
        self._log(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()


class DispatchLogger:
    """Specialized logger for dispatch events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def batch_dispatched(self, size: int, interval: float):
        self.logger.info("batch_dispatched", size=size, interval_s=interval)

    def item_scheduled(self, index: int, track: str, delay: float):
        self.logger.debug("item_scheduled", index=index, track=track, delay_s=delay)

    def item_enqueued(self, index: int, track: str, url: str):
        self.logger.info("item_enqueued", index=index, track=track, url=url)

    def item_failed(self, index: int, track: str, stage: str, error: str):
        """Log a lookup or enqueue failure for one item."""
        self.logger.error(
            "item_failed", index=index, track=track, stage=stage, error=error
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, DispatchLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, dispatch_logger)
    """
    base = StructuredLogger("spotify_queue", log_dir=log_dir, enable_json=enable_json)
    return base, DispatchLogger(base)
