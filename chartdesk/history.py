# chartdesk/history.py
"""
Load candle history from CSV into a chart source.

CSV requirements:
  - a key column (timestamp) unless loading a tick-based source
  - a close column
  - optional open/high/low and buy/sell volume columns

Header names are matched case-insensitively against a set of aliases.
"""

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path

from chartdesk.chartdata import Candle, Source, TickSource, TimeSeriesSource

log = logging.getLogger(__name__)

# canonical -> accepted aliases
ALIASES = {
    "key": {"key", "timestamp", "time", "datetime", "date"},
    "open": {"open", "o"},
    "high": {"high", "h"},
    "low": {"low", "l"},
    "close": {"close", "c"},
    "buy_volume": {"buy_volume", "buy", "taker_buy_volume", "buy_vol"},
    "sell_volume": {"sell_volume", "sell", "taker_sell_volume", "sell_vol"},
}


def _norm(s: str) -> str:
    return s.strip().lower()


def parse_key(raw: str) -> int:
    """
    Parse a candle key: integer milliseconds, or an ISO 8601 timestamp
    (converted to UTC epoch milliseconds; naive timestamps are taken as UTC).
    """
    s = raw.strip()
    try:
        return int(float(s))
    except ValueError:
        pass

    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        raise ValueError(f"Unparseable candle timestamp: '{raw}'")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _fnum(val: str | None, default: float = 0.0) -> float:
    if val is None:
        return default
    s = str(val).strip()
    return default if s == "" else float(s)


def load_source_csv(
    path: str | Path,
    *,
    tick_based: bool = False,
    delimiter: str = ",",
) -> Source:
    """
    Load a candle series from CSV.

    Args:
        path: CSV file with a header row
        tick_based: Build a TickSource keyed by row position instead of a
            TimeSeriesSource keyed by the timestamp column
        delimiter: Field delimiter

    Returns:
        The populated source, candles in file order
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Candle file not found: {path}")

    source: Source = TickSource() if tick_based else TimeSeriesSource()
    skipped = 0

    with path.open("r", newline="") as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        if reader.fieldnames is None:
            raise ValueError("CSV has no header row")

        # Build normalized header map
        header_map = {_norm(h): h for h in reader.fieldnames if h is not None}

        def pick(key: str) -> str | None:
            for a in ALIASES[key]:
                if a in header_map:
                    return header_map[a]
            return None

        columns = {name: pick(name) for name in ALIASES}

        required = ["close"] if tick_based else ["key", "close"]
        missing = [name for name in required if columns[name] is None]
        if missing:
            raise ValueError(f"CSV missing required columns: {', '.join(missing)}")

        for row in reader:
            if tick_based:
                key = len(source)
            else:
                raw_key = (row.get(columns["key"]) or "").strip()
                if not raw_key:
                    skipped += 1
                    continue
                key = parse_key(raw_key)

            def col(name: str) -> float:
                column = columns[name]
                return _fnum(row.get(column)) if column else 0.0

            source.insert(
                Candle(
                    key=key,
                    open=col("open"),
                    high=col("high"),
                    low=col("low"),
                    close=col("close"),
                    buy_volume=col("buy_volume"),
                    sell_volume=col("sell_volume"),
                )
            )

    if skipped:
        log.warning("Skipped %d row(s) without a timestamp in %s", skipped, path)
    log.debug("Loaded %d candles from %s", len(source), path)
    return source
