"""Trading performance analytics — a pure, deterministic pipeline.

Turns validated trade records plus a small parameter bundle into a
structured performance report.  No I/O, no shared state: the same
inputs always produce the same report.

Key components
--------------
**Boundary**

TradeRecord        Immutable trade as the engine sees it
parse_trades       Raw persisted rows -> ParseResult (trades + typed issues)

**Pipeline**

filter_trades      Categorical / text / date filtering (TradeFilters)
compute_stats      Counts, rates, profit factor, RRR, expectancy, durations
equity_series      Daily equity / cumulative net curve
detect_streaks     Consecutive win / loss runs
symbol_ranking     Grouping by symbol, direction, session, month, time
build_report       Everything above in one PerformanceReport

**Related**

build_monthly_report   Calendar-month report against a carried balance
checklist_scores       Setup checklist adherence per trade
ReportCache            Optional caller-owned memoization
ReportExporter         JSON / CSV rendering
"""

from .cache import ReportCache
from .checklist import ChecklistItem, CriteriaCheck, checklist_scores
from .export import ReportExporter
from .filters import NO_SETUP, TradeFilters, filter_trades
from .metrics import (
    compute_stats,
    daily_net_series,
    equity_series,
    max_drawdown,
    sharpe_ratio,
)
from .monthly import (
    AccountBalance,
    MonthlyReport,
    build_monthly_report,
    month_starting_balance,
    month_summary,
)
from .numeric import to_number_safe
from .pnl import resolve_net_pnl, resolve_net_pnl_pct
from .record import ParseResult, TradeRecord, ValidationIssue, parse_trade, parse_trades
from .report import PerformanceReport, ReportParams, build_report
from .streaks import StreakSummary, detect_streaks
from .grouping import symbol_ranking
from .temporal import session_for, session_label

__all__ = [
    "AccountBalance",
    "ChecklistItem",
    "CriteriaCheck",
    "MonthlyReport",
    "NO_SETUP",
    "ParseResult",
    "PerformanceReport",
    "ReportCache",
    "ReportExporter",
    "ReportParams",
    "StreakSummary",
    "TradeFilters",
    "TradeRecord",
    "ValidationIssue",
    "build_monthly_report",
    "build_report",
    "checklist_scores",
    "compute_stats",
    "daily_net_series",
    "detect_streaks",
    "equity_series",
    "filter_trades",
    "max_drawdown",
    "month_starting_balance",
    "month_summary",
    "parse_trade",
    "parse_trades",
    "resolve_net_pnl",
    "resolve_net_pnl_pct",
    "session_for",
    "session_label",
    "sharpe_ratio",
    "symbol_ranking",
    "to_number_safe",
]
