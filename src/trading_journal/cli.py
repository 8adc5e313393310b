"""CLI entry point for the trading journal analytics."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from .analytics.export import ReportExporter
from .analytics.filters import filters_from_mapping
from .analytics.monthly import AccountBalance, build_monthly_report, month_starting_balance
from .analytics.record import ParseResult, parse_trades, sort_chronologically
from .analytics.report import ReportParams, build_report
from .analytics.temporal import as_utc, day_range, default_range, month_range, resolve_timezone
from .core.config import Settings, load_settings
from .core.enums import Direction, Outcome, ReviewedFilter, Session
from .core.errors import ConfigError
from .observability.logger import get_logger, new_run_id, setup_logging

logger = get_logger(__name__)


def _load_rows(path: Path) -> list[dict[str, Any]]:
    """Read raw trade rows from a JSON list / ``{"trades": [...]}`` or a CSV file."""
    if path.suffix.lower() == ".csv":
        with open(path, newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        raise click.BadParameter("expected a list of trade objects", param_hint="TRADES")
    return [row for row in data if isinstance(row, dict)]


def _load(ctx: click.Context, trades_path: Path, strict: bool) -> ParseResult:
    result = parse_trades(_load_rows(trades_path))
    for issue in result.errors:
        logger.warning(
            "trade_row_rejected",
            index=issue.index,
            trade_id=issue.trade_id,
            kind=issue.kind.value,
            field=issue.field,
            message=issue.message,
        )
    if strict and result.errors:
        ctx.exit(2)
    return result


def _settings(config: str | None, timezone: str | None, starting_balance: float | None) -> Settings:
    analytics: dict[str, Any] = {}
    if timezone is not None:
        analytics["timezone"] = timezone
    if starting_balance is not None:
        analytics["starting_balance"] = starting_balance
    try:
        settings = load_settings(config, {"analytics": analytics} if analytics else None)
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="--config / --starting-balance") from exc
    try:
        settings.validate_timezone()
    except ConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--timezone") from exc
    setup_logging(settings.observability.log_level, settings.observability.log_format)
    new_run_id()
    return settings


@click.group()
def main() -> None:
    """Trading journal analytics."""


@main.command()
@click.argument("trades_path", metavar="TRADES", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--timezone", default=None, help="IANA timezone for day/month/hour bucketing")
@click.option("--starting-balance", type=float, default=None, help="Account starting balance")
@click.option("--start", "start_day", type=click.DateTime(["%Y-%m-%d"]), default=None, help="First day (YYYY-MM-DD)")
@click.option("--end", "end_day", type=click.DateTime(["%Y-%m-%d"]), default=None, help="Last day, inclusive (YYYY-MM-DD)")
@click.option("--all-dates", is_flag=True, help="Ignore the default date window")
@click.option("--instrument", default="", help="Case-insensitive symbol substring")
@click.option("--direction", type=click.Choice([d.value for d in Direction], case_sensitive=False), default=None)
@click.option("--outcome", type=click.Choice([o.value for o in Outcome], case_sensitive=False), default=None)
@click.option("--session", type=click.Choice([s.value for s in Session], case_sensitive=False), default=None)
@click.option("--reviewed", type=click.Choice([r.value for r in ReviewedFilter], case_sensitive=False), default=None)
@click.option("--setup", default=None, help="Template id, or NO_SETUP")
@click.option("--account", default=None, help="Account id")
@click.option("--format", "fmt", type=click.Choice(["json", "csv"]), default="json", help="json report or csv equity curve")
@click.option("--strict", is_flag=True, help="Exit non-zero if any row fails validation")
@click.pass_context
def report(
    ctx: click.Context,
    trades_path: Path,
    config: str | None,
    timezone: str | None,
    starting_balance: float | None,
    start_day: Any,
    end_day: Any,
    all_dates: bool,
    instrument: str,
    direction: str | None,
    outcome: str | None,
    session: str | None,
    reviewed: str | None,
    setup: str | None,
    account: str | None,
    fmt: str,
    strict: bool,
) -> None:
    """Build a performance report from a JSON or CSV trade file."""
    settings = _settings(config, timezone, starting_balance)
    cfg = settings.analytics
    tz = resolve_timezone(cfg.timezone)

    range_start = range_end = None
    if not all_dates:
        default_start, default_end = default_range(datetime.now(tz).date(), cfg.default_range_days)
        first = start_day.date() if start_day else default_start
        last = end_day.date() if end_day else default_end
        range_start, range_end = day_range(first, last, tz)

    filters = filters_from_mapping({
        "range_start": range_start,
        "range_end": range_end,
        "instrument_query": instrument,
        "direction": direction,
        "outcome": outcome,
        "session": session,
        "reviewed": reviewed,
        "setup": setup,
        "account_id": account,
    })

    parsed = _load(ctx, trades_path, strict)
    params = ReportParams(
        filters=filters,
        timezone=cfg.timezone,
        starting_balance=cfg.starting_balance,
        top_n=cfg.top_n,
    )
    result = build_report(sort_chronologically(parsed.trades), params)
    logger.info("report_built", trades=result.stats.total_trades, days=len(result.equity))

    exporter = ReportExporter()
    if fmt == "csv":
        click.echo(exporter.equity_to_csv(result), nl=False)
    else:
        click.echo(exporter.to_json(result))


@main.command()
@click.argument("trades_path", metavar="TRADES", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--month", required=True, help="Calendar month (YYYY-MM)")
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--timezone", default=None, help="IANA timezone")
@click.option("--starting-balance", type=float, default=None, help="Account balance before the first trade")
@click.option("--strict", is_flag=True, help="Exit non-zero if any row fails validation")
@click.pass_context
def monthly(
    ctx: click.Context,
    trades_path: Path,
    month: str,
    config: str | None,
    timezone: str | None,
    starting_balance: float | None,
    strict: bool,
) -> None:
    """Build the monthly report for one calendar month."""
    settings = _settings(config, timezone, starting_balance)
    cfg = settings.analytics
    parsed = _load(ctx, trades_path, strict)
    trades = sort_chronologically(parsed.trades)
    try:
        month_start, _ = month_range(month, resolve_timezone(cfg.timezone))
        # The month opens at the configured balance plus everything realized before it
        prior = [t for t in trades if as_utc(t.opened_at) < month_start]
        start = month_starting_balance(
            [AccountBalance("file", cfg.starting_balance)], "file", prior
        )
        result = build_monthly_report(
            trades,
            month=month,
            timezone=cfg.timezone,
            starting_balance=start,
        )
    except ConfigError as exc:
        raise click.BadParameter(str(exc)) from exc
    click.echo(ReportExporter().to_json(result))


@main.command()
@click.argument("trades_path", metavar="TRADES", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def validate(ctx: click.Context, trades_path: Path) -> None:
    """Check a trade file and list rows that fail validation."""
    result = parse_trades(_load_rows(trades_path))
    for issue in result.errors:
        click.echo(f"row {issue.index}: [{issue.kind.value}] {issue.message}")
    click.echo(f"{len(result.trades)} valid, {len(result.errors)} rejected")
    if result.errors:
        ctx.exit(1)


if __name__ == "__main__":
    main()
