# skydist/hooks.py
"""
Optional observability hooks.

A hook is any callable ``hook(stage, **info)``. Every entry point takes a
``hook`` keyword that defaults to ``None`` (no instrumentation).
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Protocol


class Hook(Protocol):
    def __call__(self, stage: str, **info: Any) -> None: ...


@contextmanager
def timed(hook: Optional[Hook], stage: str, **info: Any) -> Iterator[None]:
    """
    Report wall time spent in the block as ``elapsed`` seconds.

    The event is also sent when the block raises, before the exception
    propagates.
    """
    if hook is None:
        yield
        return
    t0 = time.perf_counter()
    try:
        yield
    finally:
        hook(stage, elapsed=time.perf_counter() - t0, **info)


def log_hook(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
) -> Callable[..., None]:
    """Build a hook that forwards every event to ``logging``."""
    logger = logger or logging.getLogger("skydist")

    def hook(stage: str, **info: Any) -> None:
        details = " ".join(f"{k}={v:.4f}" if isinstance(v, float) else f"{k}={v}"
                           for k, v in sorted(info.items()))
        logger.log(level, "%s %s", stage, details)

    return hook
