"""Report export — JSON-safe dicts, JSON and CSV output.

Reports are final: the consumer renders what it is given.  Export only
changes representation.  Infinite ratios become the strings
``"Infinity"`` / ``"-Infinity"``, datetimes become ISO strings and enums
their values; floats are optionally rounded.

Usage::

    exporter = ReportExporter(decimal_places=2)
    payload = exporter.to_json(report)
    csv_str = exporter.equity_to_csv(report)
"""

from __future__ import annotations

import csv
import dataclasses
import io
import json
import math
from datetime import datetime
from enum import Enum
from typing import Any

from .report import PerformanceReport

_EQUITY_COLUMNS = ["day", "equity", "day_net", "cum_net"]


class ReportExporter:
    """Export reports to plain data.

    Parameters
    ----------
    decimal_places : int | None
        Rounding precision for floats.  ``None`` keeps full precision.
        Default 4.
    include_trades : bool
        Whether ``to_dict`` lists the filtered trades.  Default False.
    """

    def __init__(self, *, decimal_places: int | None = 4, include_trades: bool = False) -> None:
        self._dp = decimal_places
        self._include_trades = include_trades

    # ------------------------------------------------------------------ #
    # Dict / JSON                                                          #
    # ------------------------------------------------------------------ #

    def to_dict(self, report: Any) -> dict[str, Any]:
        """Convert a report (or any report section) to JSON-safe data."""
        data = self._convert(report)
        if isinstance(report, PerformanceReport) and not self._include_trades:
            data.pop("trades", None)
            data["trade_count"] = len(report.trades)
        return data

    def to_json(self, report: Any, *, indent: int = 2) -> str:
        return json.dumps(self.to_dict(report), indent=indent, ensure_ascii=False)

    # ------------------------------------------------------------------ #
    # CSV                                                                  #
    # ------------------------------------------------------------------ #

    def equity_to_csv(self, report: PerformanceReport) -> str:
        """Equity curve as CSV with a header row."""
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=_EQUITY_COLUMNS)
        writer.writeheader()
        for point in report.equity:
            writer.writerow({
                "day": point.day,
                "equity": self._float(point.equity),
                "day_net": self._float(point.day_net),
                "cum_net": self._float(point.cum_net),
            })
        return buf.getvalue()

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _float(self, value: float) -> float | str:
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if math.isnan(value):
            return "NaN"
        return round(value, self._dp) if self._dp is not None else value

    def _convert(self, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, bool) or value is None or isinstance(value, (int, str)):
            return value
        if isinstance(value, float):
            return self._float(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            out = {f.name: self._convert(getattr(value, f.name)) for f in dataclasses.fields(value)}
            for name, attr in vars(type(value)).items():
                if isinstance(attr, property):
                    out[name] = self._convert(getattr(value, name))
            return out
        if isinstance(value, dict):
            return {str(k): self._convert(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._convert(v) for v in value]
        return str(value)
