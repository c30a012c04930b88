"""
Structured log lines for the medicines import workflow.

Each line is one compact JSON object keyed by ``event`` so import runs can be
followed with a log query (``medicines_import_read``, ``..._parse``,
``..._process``, ``..._complete``).
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


@contextmanager
def log_duration(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> Iterator[None]:
    """
    Emit ``event`` with ``duration_ms`` once the enclosed block exits,
    whether or not it raised.
    """

    started = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        log_event(logger, level, event, **{**fields, "duration_ms": duration_ms})
