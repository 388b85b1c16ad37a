# chartdesk/runner.py
"""
Replay candle history through the indicators from the command line.

Usage:
    chartdesk-replay candles.csv --indicator rsi --indicator bollinger
    chartdesk-replay bars.csv --tick-based --config chart.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .chart import ChartIndicators
from .config import Settings, settings, settings_from_config
from .history import load_source_csv
from .indicators.kinds import IndicatorKind

log = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", force: bool = False) -> None:
    """
    Configure root logger with console output.

    By default, this is non-destructive: if the root logger already has handlers,
    it will do nothing (assuming the application has configured logging).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        force: If True, clear existing handlers and force this configuration
    """
    root_logger = logging.getLogger()

    # If logging is already configured and we aren't forcing it, exit.
    if root_logger.hasHandlers() and not force:
        return

    root_logger.setLevel(level.upper())

    if force:
        root_logger.handlers.clear()

    # Create console handler with formatting
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def replay(
    path: str | Path,
    kinds: Sequence[IndicatorKind],
    config: Settings | None = None,
    tick_based: bool = False,
) -> dict[IndicatorKind, Any]:
    """
    Load a CSV into a source, build the requested indicators from it and
    return the newest value of each.
    """
    config = config or settings
    source = load_source_csv(path, tick_based=tick_based)
    log.info("Loaded %d candles from %s", len(source), path)

    chart = ChartIndicators(source, config)
    for kind in kinds:
        chart.enable(kind)

    result = chart.snapshot()
    for kind, value in result.items():
        indicator = chart.get(kind)
        if value is None:
            log.info("%s: not enough history (needs %d candles)", kind, indicator.warmup_periods())
        else:
            log.info("%s", indicator.format_value(value))
    return result


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chartdesk-replay",
        description="Replay a candle CSV through the chart indicators.",
    )
    parser.add_argument("path", help="CSV file of candles, oldest first")
    parser.add_argument(
        "--indicator",
        "-i",
        action="append",
        dest="indicators",
        help="Indicator to compute (repeatable; default: all)",
    )
    parser.add_argument("--tick-based", action="store_true", help="Key candles by row position")
    parser.add_argument("--config", help="YAML file with an 'indicators' settings section")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level or settings.log_level)

    try:
        config = settings_from_config(args.config) if args.config else settings
        config.validate()
        if args.indicators:
            kinds = [IndicatorKind.parse(name) for name in args.indicators]
        else:
            kinds = list(IndicatorKind)
        replay(args.path, kinds, config, tick_based=args.tick_based)
    except (ValueError, FileNotFoundError) as e:
        log.error("Replay failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
