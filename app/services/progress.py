"""Progress reporting for the chunked bulk operations."""

from __future__ import annotations

import logging
from collections.abc import Callable

# (processed, total); called between store round-trips, must not block
ProgressCallback = Callable[[int, int], None]


def report(on_progress: ProgressCallback | None, current: int, total: int) -> None:
    if on_progress is not None:
        on_progress(current, total)


def log_progress(operation: str, logger: logging.Logger) -> ProgressCallback:
    """Build a callback that logs each progress step for *operation*."""

    def _log(current: int, total: int) -> None:
        logger.info("%s progress: %d/%d", operation, current, total)

    return _log
