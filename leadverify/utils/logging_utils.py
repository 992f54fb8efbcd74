"""Structured log lines for county lookups."""

from __future__ import annotations

import time

from loguru import logger


def log_search(
    jurisdiction_id: str,
    strategy: str,
    query: str | None,
    *,
    candidates: int,
    duration_ms: float | None = None,
    selected: str | None = None,
) -> None:
    """Log one county search with its lookup fields bound as ``extra``.

    ``selected`` is the property id the caller settled on, if any; the file
    sink renders ``{extra}`` so these fields survive into the JSON log.
    """
    bound = logger.bind(jurisdiction=jurisdiction_id, strategy=strategy, candidates=candidates)
    if duration_ms is not None:
        bound = bound.bind(duration_ms=round(duration_ms, 1))
    if selected:
        bound = bound.bind(property_id=selected)

    if candidates:
        bound.info("{strategy} search in {jurisdiction} for {query!r}: {candidates} candidates",
                   strategy=strategy, jurisdiction=jurisdiction_id, query=query, candidates=candidates)
    else:
        bound.debug("{strategy} search in {jurisdiction} for {query!r}: nothing found",
                    strategy=strategy, jurisdiction=jurisdiction_id, query=query)


class Timer:
    """Stopwatch; ``elapsed_ms`` reads live inside the block and freezes on exit."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._stop: float | None = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._stop = None
        return self

    def __exit__(self, *exc: object) -> None:
        self._stop = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        end = time.perf_counter() if self._stop is None else self._stop
        return (end - self._start) * 1000
