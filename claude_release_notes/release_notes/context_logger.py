"""Adapt the logger supplied with a release to the calls the pipeline makes."""

import sys
from typing import Any

import structlog

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

# Console-style loggers only know log/warn/error.
CONSOLE_METHODS = {
    "debug": "log",
    "info": "log",
    "warning": "warn",
    "error": "error",
    "exception": "error",
}


class ReleaseLogger:
    """Lets the pipeline log through whatever logger the host handed in.

    Two shapes are accepted. A structlog-style logger (anything with an
    ``info`` method) is called with the event and keyword fields. A
    console-style logger exposing only ``log``, ``warn`` and ``error`` gets
    the event plus the fields as one trailing mapping. Without a host logger
    the ``default`` structlog logger is used.

    A host logger that is missing a method, or raises, never interrupts a
    run: the event goes to the module logger instead.
    """

    def __init__(self, target: Any = None, default: Any = None) -> None:
        """Initialize with the host logger and the logger to use without one."""
        self.target = target if target is not None else (default or logger)
        self.structured = hasattr(self.target, "info")

    def _emit(self, level: str, event: str, fields: dict[str, Any]) -> None:
        if self.structured:
            method = getattr(self.target, level, None)
            if method is None and level == "exception":
                method = getattr(self.target, "error", None)
        else:
            method = getattr(self.target, CONSOLE_METHODS[level], None)
            if level == "exception":
                exc = sys.exc_info()[1]
                if exc is not None:
                    fields = {**fields, "error": str(exc), "error_type": type(exc).__name__}

        if method is None:
            getattr(logger, level)(event, **fields)
            return
        try:
            if self.structured:
                method(event, **fields)
            elif fields:
                method(event, fields)
            else:
                method(event)
        except Exception as exc:
            logger.warning("Release logger failed, event logged here instead", level=level, error=str(exc))
            getattr(logger, level)(event, **fields)

    def debug(self, event: str, **fields: Any) -> None:
        self._emit("debug", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._emit("info", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._emit("warning", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._emit("error", event, fields)

    def exception(self, event: str, **fields: Any) -> None:
        self._emit("exception", event, fields)
