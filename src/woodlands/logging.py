"""Opt-in loguru output for woodlands.

Training, prediction fallbacks, and evaluation log under the ``woodlands``
logger name, which is disabled at import. `enable_logging` turns it on for
as long as at least one returned handle is alive.

Importing this module removes loguru's default stderr handler so records are
not printed twice once `enable_logging` adds its own.
"""

from __future__ import annotations

import contextlib
import sys
import threading
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

# woodlands only emits these levels: member sampling and unseen-value
# fallbacks at DEBUG, forest summaries at INFO, empty evaluations at WARNING.
type LogLevel = Literal["DEBUG", "INFO", "WARNING"]

type LogFormat = Literal["short", "full"]

_TIME_AND_LEVEL: Final[str] = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
_MESSAGE_AND_EXTRA: Final[str] = " - <level>{message}</level> {extra}"

_FORMATS: Final[dict[LogFormat, str]] = {
    "short": _TIME_AND_LEVEL + "<cyan>{function}</cyan>" + _MESSAGE_AND_EXTRA,
    "full": _TIME_AND_LEVEL + "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>" + _MESSAGE_AND_EXTRA,
}


class LoggingHandle:
    """One stderr handler added by `enable_logging`.

    Call `disable()` or use the handle as a context manager to remove it.
    The package logger is switched off again when the last handle goes.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     RandomForest(rows, "label", ["color", "shape"])
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove this handle's handler. Calling it again does nothing."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """int: Number of handles that have not been disabled yet."""
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(*, level: LogLevel = "INFO", log_format: LogFormat = "short") -> LoggingHandle:
    """Print woodlands records to stderr.

    Args:
        level (LogLevel): Minimum level shown. "INFO" reports forest training
            summaries and empty-evaluation warnings; "DEBUG" adds every member
            tree and every unseen-value fallback.
        log_format (LogFormat): "short" prefixes records with the function
            name; "full" uses `module:function:line`. Structured fields are
            appended in both.

    Returns:
        LoggingHandle: Handle owning the new handler.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(sys.stderr, level=level, filter=_is_woodlands_record, format=_FORMATS[log_format])
    return LoggingHandle(handler_id)


def _is_woodlands_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
