"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Protocol

import structlog

_LOGGING_INITIALISED = False


class WritableSink(Protocol):
    def write(self, message: str) -> Any: ...


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger."""

    global _LOGGING_INITIALISED
    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        handlers: dict[str, dict[str, Any]] = {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "plain",
            },
        }
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers["file"] = {
                "class": "logging.FileHandler",
                "level": "INFO",
                "filename": str(log_file),
                "formatter": "plain",
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": handlers,
                "loggers": {
                    "esi_processor": {
                        "handlers": list(handlers),
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        # Forward structlog events to stdlib logging; JSON rendering happens in the handler
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("esi_processor")


class SinkLogger:
    """Write raw messages to a caller supplied sink.

    The sink can be an open file, a stream or any collector with a ``write``
    method. Messages are written verbatim. Without a sink they become
    structlog events on the ``esi_processor`` logger.
    """

    def __init__(
        self,
        sink: WritableSink | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.sink = sink
        self._logger = logger or structlog.get_logger("esi_processor")

    def write(self, message: str) -> None:
        if self.sink is None:
            self._logger.info("esi_log", message=message)
            return
        try:
            self.sink.write(message)
            flush = getattr(self.sink, "flush", None)
            if callable(flush):
                flush()
        except Exception as exc:  # noqa: BLE001
            # a broken sink must not fail the document being processed
            self._logger.warning("log_sink_failed", message=message, error=str(exc))


__all__ = ["SinkLogger", "WritableSink", "configure_logging"]
