"""Optional memoization of built reports.

The engine itself keeps no state.  A caller that recomputes on every
filter change can hold a :class:`ReportCache` and key it by the version
of its trade set; a new version or new parameters is a cache miss.

Usage::

    cache = ReportCache(max_entries=32)
    report = cache.get_or_build(trades, params, trades_version=etag)
"""

from __future__ import annotations

import hashlib
import logging
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any

from .record import TradeRecord
from .report import PerformanceReport, ReportParams, build_report

logger = logging.getLogger(__name__)


def _canonical(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _canonical(v) for k, v in sorted(value.items())}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def params_fingerprint(params: ReportParams) -> str:
    return repr(_canonical(asdict(params)))


def cache_key(trades_version: str, params: ReportParams) -> str:
    """SHA-256 of (trade-set version, parameters)."""
    payload = f"{trades_version}|{params_fingerprint(params)}".encode()
    return hashlib.sha256(payload).hexdigest()


def trades_fingerprint(trades: Sequence[TradeRecord]) -> str:
    """A content hash usable as the trade-set version when the caller has none."""
    h = hashlib.sha256()
    for t in trades:
        h.update(repr(_canonical(asdict(t))).encode())
    return h.hexdigest()


class ReportCache:
    """Bounded LRU map from cache key to built report.

    Parameters
    ----------
    max_entries : int
        Reports retained before the least recently used is evicted.
        Default 16.
    """

    def __init__(self, *, max_entries: int = 16) -> None:
        self._max_entries = max(1, max_entries)
        self._entries: OrderedDict[str, PerformanceReport] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_build(
        self,
        trades: Sequence[TradeRecord],
        params: ReportParams,
        *,
        trades_version: str | None = None,
    ) -> PerformanceReport:
        version = trades_version if trades_version is not None else trades_fingerprint(trades)
        key = cache_key(version, params)

        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug("Report cache hit %s", key[:12])
            return cached

        self.misses += 1
        report = build_report(trades, params)
        self._entries[key] = report
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return report

    def clear(self) -> None:
        self._entries.clear()
