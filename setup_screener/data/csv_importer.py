"""
CSV importer for long-format OHLCV exports (TradingView and similar).

One row per (ticker, date). Column names are matched case-insensitively
against a list of aliases; optional metadata columns (company, sector,
industry, market cap, earnings date) fill TickerMeta.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Dict, List, Optional, Union

import pandas as pd

from setup_screener.data.models import OHLCV_COLUMNS, TickerMeta
from setup_screener.data.provider import DataProviderError

logger = logging.getLogger(__name__)

COLUMN_ALIASES: Dict[str, List[str]] = {
    'ticker': ['Ticker', 'Symbol'],
    'date': ['Date', 'Timestamp', 'Time'],
    'Open': ['Open', 'o'],
    'High': ['High', 'h'],
    'Low': ['Low', 'l'],
    'Close': ['Close', 'c', 'Adj Close', 'adj_close'],
    'Volume': ['Volume', 'v'],
    'company': ['Company', 'Name'],
    'sector': ['Sector'],
    'industry': ['Industry'],
    'market_cap': ['Market Cap', 'MarketCap', 'market_cap'],
    'next_earnings_date': ['NextEarningsDate', 'Earnings Date', 'earnings_date', 'next_earnings_date'],
}

REQUIRED_FIELDS = ['ticker', 'date'] + OHLCV_COLUMNS
METADATA_FIELDS = ['company', 'sector', 'industry', 'market_cap', 'next_earnings_date']


@dataclass
class ImportResult:
    """Engine inputs read from one CSV file."""
    timeseries: Dict[str, pd.DataFrame]
    metadata: Dict[str, TickerMeta]
    as_of_date: str     # latest bar date across all tickers


def resolve_columns(headers: List[str]) -> Dict[str, str]:
    """Map each known field to the first header matching one of its aliases."""
    by_lower = {}
    for header in headers:
        by_lower.setdefault(header.strip().lower(), header)

    resolved = {}
    for name, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias.lower() in by_lower:
                resolved[name] = by_lower[alias.lower()]
                break
    return resolved


def _to_number(column: pd.Series) -> pd.Series:
    cleaned = column.str.strip().str.replace(r'[,$]', '', regex=True)
    return pd.to_numeric(cleaned, errors='coerce')


def _to_date(column: pd.Series) -> pd.Series:
    return pd.to_datetime(column.str.strip(), errors='coerce', format='mixed').dt.normalize()


def _first_present(values: pd.Series) -> Optional[object]:
    present = values.dropna()
    if present.empty:
        return None
    return present.iloc[0]


def import_csv(source: Union[str, Path, IO[str]]) -> ImportResult:
    """
    Read a long-format CSV into per-ticker OHLCV frames and metadata.

    Rows with a missing ticker, an unparseable date or any missing OHLCV value
    are skipped. Each ticker's bars are sorted by date; metadata fields take
    the first non-empty value in date order.

    Args:
        source: Path or open text stream

    Returns:
        ImportResult with timeseries, metadata and the latest bar date

    Raises:
        DataProviderError: Unreadable file, missing required columns, or no valid rows
    """
    try:
        raw = pd.read_csv(source, dtype=str, skipinitialspace=True, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataProviderError(f"Could not read CSV: {e}") from e

    if raw.empty:
        raise DataProviderError("CSV must contain at least a header row and one data row")

    columns = resolve_columns(list(raw.columns))
    missing = [name for name in REQUIRED_FIELDS if name not in columns]
    if missing:
        raise DataProviderError(f"Missing required columns: {', '.join(missing)}")

    rows = pd.DataFrame({
        'ticker': raw[columns['ticker']].str.strip(),
        'Date': _to_date(raw[columns['date']]),
    })
    for name in OHLCV_COLUMNS:
        rows[name] = _to_number(raw[columns[name]])

    for name in METADATA_FIELDS:
        if name not in columns:
            rows[name] = None
        elif name == 'market_cap':
            rows[name] = _to_number(raw[columns[name]])
        elif name == 'next_earnings_date':
            rows[name] = _to_date(raw[columns[name]]).dt.strftime('%Y-%m-%d')
        else:
            text = raw[columns[name]].str.strip()
            rows[name] = text.mask(text == '')

    valid = rows['ticker'].ne('') & rows[['Date'] + OHLCV_COLUMNS].notna().all(axis=1)
    skipped = int((~valid).sum())
    rows = rows[valid]
    if rows.empty:
        raise DataProviderError("No valid data rows found in CSV")
    if skipped:
        logger.warning("Skipped %d malformed CSV rows", skipped)

    timeseries: Dict[str, pd.DataFrame] = {}
    metadata: Dict[str, TickerMeta] = {}

    for ticker, group in rows.groupby('ticker', sort=False):
        group = group.sort_values('Date', kind='stable').drop_duplicates('Date', keep='last')
        df = group.set_index('Date')[OHLCV_COLUMNS].astype(float)
        timeseries[ticker] = df

        market_cap = _first_present(group['market_cap'])
        metadata[ticker] = TickerMeta(
            ticker=ticker,
            company=_first_present(group['company']),
            sector=_first_present(group['sector']),
            industry=_first_present(group['industry']),
            market_cap=None if market_cap is None else float(market_cap),
            next_earnings_date=_first_present(group['next_earnings_date']),
            last_completed_bar=df.index[-1].date().isoformat(),
        )

    as_of_date = max(meta.last_completed_bar for meta in metadata.values())
    logger.info("Imported %d tickers from CSV, latest bar %s", len(timeseries), as_of_date)

    return ImportResult(timeseries=timeseries, metadata=metadata, as_of_date=as_of_date)
