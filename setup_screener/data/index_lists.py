"""
Index constituent lists for the Leo index filter and for building a screening
universe from an index name.

The lists are static snapshots. S&P 500 is a liquidity-ranked subset and
Russell 2000 a sample of its most liquid names; the full constituent sets are
too large to screen on a free data tier.
"""
from typing import Dict, Iterable, List, Sequence, Tuple

DOW_JONES: Tuple[str, ...] = (
    'AAPL', 'AMGN', 'AXP', 'BA', 'CAT', 'CRM', 'CSCO', 'CVX', 'DIS', 'DOW',
    'GS', 'HD', 'HON', 'IBM', 'INTC', 'JNJ', 'JPM', 'KO', 'MCD', 'MMM',
    'MRK', 'MSFT', 'NKE', 'PG', 'TRV', 'UNH', 'V', 'VZ', 'WBA', 'WMT',
)

NASDAQ_100: Tuple[str, ...] = (
    'AAPL', 'ABNB', 'ADBE', 'ADI', 'ADP', 'ADSK', 'AEP', 'AMAT', 'AMD', 'AMGN',
    'AMZN', 'ANSS', 'ARM', 'ASML', 'AVGO', 'AZN', 'BIIB', 'BKNG', 'BKR', 'CCEP',
    'CDNS', 'CDW', 'CEG', 'CHTR', 'CMCSA', 'COST', 'CPRT', 'CRWD', 'CSCO', 'CSGP',
    'CSX', 'CTAS', 'CTSH', 'DASH', 'DDOG', 'DLTR', 'DXCM', 'EA', 'EXC', 'FANG',
    'FAST', 'FTNT', 'GEHC', 'GFS', 'GILD', 'GOOG', 'GOOGL', 'HON', 'IDXX', 'ILMN',
    'INTC', 'INTU', 'ISRG', 'KDP', 'KHC', 'KLAC', 'LIN', 'LRCX', 'LULU', 'MAR',
    'MCHP', 'MDB', 'MDLZ', 'MELI', 'META', 'MNST', 'MRNA', 'MRVL', 'MSFT', 'MU',
    'NFLX', 'NVDA', 'NXPI', 'ODFL', 'ON', 'ORLY', 'PANW', 'PAYX', 'PCAR', 'PDD',
    'PEP', 'PYPL', 'QCOM', 'REGN', 'ROP', 'ROST', 'SBUX', 'SMCI', 'SNPS', 'TEAM',
    'TMUS', 'TSLA', 'TTD', 'TTWO', 'TXN', 'VRSK', 'VRTX', 'WBD', 'WDAY', 'ZS',
)

# Ordered by market cap / liquidity
SP500: Tuple[str, ...] = (
    # Mega caps
    'AAPL', 'MSFT', 'AMZN', 'NVDA', 'GOOGL', 'META', 'BRK-B', 'LLY', 'AVGO', 'JPM',
    'TSLA', 'UNH', 'V', 'XOM', 'MA', 'JNJ', 'HD', 'PG', 'COST', 'MRK',
    'ABBV', 'CVX', 'CRM', 'NFLX', 'AMD', 'KO', 'PEP', 'BAC', 'ADBE', 'WMT',
    'TMO', 'MCD', 'CSCO', 'ACN', 'LIN', 'ABT', 'ORCL', 'DHR', 'QCOM', 'INTU',
    'CMCSA', 'TXN', 'WFC', 'VZ', 'DIS', 'PM', 'INTC', 'IBM', 'AMGN', 'NKE',
    # Large caps
    'CAT', 'RTX', 'GE', 'SPGI', 'HON', 'ISRG', 'NOW', 'GS', 'NEE', 'BKNG',
    'UNP', 'LOW', 'T', 'ELV', 'AMAT', 'PFE', 'AXP', 'MS', 'SYK', 'BLK',
    'VRTX', 'TJX', 'DE', 'SBUX', 'MDT', 'LRCX', 'PLD', 'MDLZ', 'GILD', 'ADP',
    'AMT', 'C', 'MMC', 'ADI', 'REGN', 'SCHW', 'CB', 'ETN', 'MO', 'CI',
    'ZTS', 'PANW', 'SO', 'DUK', 'CME', 'BDX', 'KLAC', 'SNPS', 'ICE', 'CDNS',
    # Mid-large caps
    'PNC', 'CL', 'EOG', 'EQIX', 'MU', 'SHW', 'MCO', 'AON', 'ITW', 'NOC',
    'APD', 'FDX', 'USB', 'HUM', 'CMG', 'TGT', 'GD', 'ORLY', 'MAR', 'CTAS',
    'PGR', 'TDG', 'MSI', 'FCX', 'EMR', 'AJG', 'PSA', 'NSC', 'SLB', 'CARR',
    'WM', 'ROP', 'ECL', 'APH', 'COF', 'PCAR', 'AZO', 'MCHP', 'ADSK', 'ROST',
    'OXY', 'CCI', 'WELL', 'HLT', 'AFL', 'F', 'GM', 'CPRT', 'AEP', 'MNST',
    'JCI', 'MET', 'AIG', 'SRE', 'TFC', 'PSX', 'PAYX', 'MSCI', 'NXPI', 'KMB',
    'SPG', 'NEM', 'VLO', 'DHI', 'FTNT', 'DLR', 'TEL', 'HES', 'IDXX', 'O',
    'GWW', 'KMI', 'COR', 'D', 'A', 'BK', 'YUM', 'ODFL', 'CMI', 'ALL',
    'KHC', 'IQV', 'PRU', 'FAST', 'PCG', 'CTVA', 'GIS', 'LHX', 'OTIS', 'PEG',
    'HSY', 'VRSK', 'EA', 'EW', 'CTSH', 'ED', 'IT', 'XEL', 'VMC', 'HAL',
    # Other components
    'GEHC', 'RCL', 'BIIB', 'CHTR', 'KR', 'FANG', 'MTD', 'WAB', 'CBRE', 'EXC',
    'ACGL', 'MLM', 'ON', 'EIX', 'DAL', 'PPG', 'HWM', 'KEYS', 'DOW', 'AWK',
    'WEC', 'EFX', 'ROK', 'ANSS', 'CDW', 'FTV', 'GRMN', 'STZ', 'SYY', 'MTB',
    'NUE', 'RMD', 'TROW', 'HPQ', 'WTW', 'ZBH', 'DTE', 'VICI', 'GLW', 'BRO',
    'AVB', 'CHD', 'PPL', 'AMP', 'ES', 'SBAC', 'LYB', 'FE', 'EQR', 'ULTA',
)

RUSSELL_2000_SAMPLE: Tuple[str, ...] = (
    'AMC', 'GME', 'PLUG', 'SIRI', 'RIOT', 'MARA', 'SOFI', 'HOOD', 'LCID', 'RIVN',
    'PLTR', 'SNAP', 'RBLX', 'DKNG', 'COIN', 'AFRM', 'PATH', 'U', 'CRSP', 'BEAM',
    'ROKU', 'BILL', 'NET', 'SNOW', 'DOCU', 'ZM', 'OKTA', 'TWLO', 'SQ', 'SHOP',
    'BYND', 'SPCE', 'NKLA', 'LAZR', 'WKHS', 'GOEV', 'FSR', 'QS', 'BLNK', 'CHPT',
    'STEM', 'RUN', 'NOVA', 'ENPH', 'SEDG', 'FSLR', 'ARRY', 'JKS', 'MAXN', 'SPWR',
    'WOLF', 'CRNC', 'DQ', 'CSIQ', 'SOL', 'GEVO', 'BE', 'BLDP', 'FCEL', 'APPS',
    'CRSR', 'HEAR', 'GPRO', 'SONO', 'OLED', 'MTCH', 'PINS', 'ETSY', 'W', 'CHWY',
    'PTON', 'OPEN', 'CVNA', 'CARG', 'VRM', 'SFT', 'RIDE', 'ARVL', 'REE', 'XPEV',
    'LI', 'NIO', 'PSNY', 'FFIE', 'MULN', 'JOBY', 'ACHR', 'EVTL', 'LILM', 'EVGO',
    'DCFC', 'AMPX', 'PTRA',
)

INDEX_CONSTITUENTS: Dict[str, Tuple[str, ...]] = {
    'sp500': SP500,
    'dowjones': DOW_JONES,
    'nasdaq100': NASDAQ_100,
    'russell2000': RUSSELL_2000_SAMPLE,
}

INDEX_DISPLAY_NAMES: Dict[str, str] = {
    'sp500': 'S&P 500',
    'dowjones': 'Dow Jones 30',
    'nasdaq100': 'Nasdaq 100',
    'russell2000': 'Russell 2000',
    '*': 'All Indices',
}


def normalize_ticker(ticker: str) -> str:
    """Upper-case and use '-' for share classes (BRK.B -> BRK-B), as Yahoo does."""
    return ticker.strip().upper().replace('.', '-')


def _constituents(index_name: str) -> Tuple[str, ...]:
    try:
        return INDEX_CONSTITUENTS[index_name]
    except KeyError:
        raise ValueError(
            f"Unknown index '{index_name}'. Available: {list(INDEX_CONSTITUENTS)}"
        ) from None


def is_ticker_in_indices(ticker: str, index_names: Sequence[str]) -> bool:
    """
    True if the ticker belongs to at least one of the named indices.

    An empty selection means no index filtering, so every ticker passes.
    """
    if not index_names:
        return True

    symbol = normalize_ticker(ticker)
    return any(symbol in _constituents(name) for name in index_names)


def filter_by_indices(tickers: Iterable[str], index_names: Sequence[str]) -> List[str]:
    """Keep the tickers that belong to any of the named indices, in input order."""
    tickers = list(tickers)
    if not index_names:
        return tickers

    combined = set()
    for name in index_names:
        combined.update(_constituents(name))
    return [t for t in tickers if normalize_ticker(t) in combined]


def get_index_tickers(index_name: str) -> List[str]:
    """
    Constituents of an index. ``"*"`` returns the de-duplicated union of all
    indices, in first-seen order.
    """
    if index_name == '*':
        seen: Dict[str, None] = {}
        for name in ('dowjones', 'nasdaq100', 'sp500', 'russell2000'):
            seen.update(dict.fromkeys(INDEX_CONSTITUENTS[name]))
        return list(seen)
    return list(_constituents(index_name))


def get_index_display_name(index_name: str) -> str:
    return INDEX_DISPLAY_NAMES.get(index_name, 'Unknown')
