#!/usr/bin/env python3
"""
Command-line interface for the Setup Screener.

Usage:
    setup-screener screen NVDA AAPL MSFT
    setup-screener screen --index dowjones --leo
    setup-screener screen --csv export.csv --max-results 20
    setup-screener screen --params swing.json --leo
    setup-screener screen --index nasdaq100 --mock  # Use simulated data
    setup-screener inspect NVDA
    setup-screener indices
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from setup_screener.config import (
    DEFAULT_CONFIG,
    TIMEFRAMES,
    LeoParams,
    ScreenerConfigError,
    ScreenerParams,
    load_params_file
)
from setup_screener.data import (
    INDEX_CONSTITUENTS,
    CachedProvider,
    DataProviderError,
    MockDataProvider,
    YFinanceProvider,
    get_index_display_name,
    get_index_tickers,
    import_csv
)
from setup_screener.indicators import compute_indicators
from setup_screener.main import load_universe, resolve_timeframe
from setup_screener.screeners import ClassifiedPick, EngineOutput, run

app = typer.Typer(
    name="setup-screener",
    help="Screen stocks for breakout, momentum, pullback and Leo reversal setups.",
    no_args_is_help=True
)
console = Console()

SETUP_COLORS = {
    "Breakout": "green",
    "Momentum": "cyan",
    "Pullback": "blue",
    "Fib Pullback": "blue",
    "Consolidation": "yellow",
    "Reversal": "magenta",
    "Reversal_Accumulation": "bold green",
    "BB_Lower_Bounce": "green",
    "Stoch_Oversold_Reversal": "green",
    "Reversal_Distribution": "bold red",
    "BB_Upper_Reject": "red",
    "Stoch_Overbought_Reversal": "red",
}


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)]
    )


def _fmt(value: Optional[float], spec: str = ".1f", prefix: str = "") -> str:
    return "-" if value is None else f"{prefix}{value:{spec}}"


def create_picks_table(output: EngineOutput, leo: bool) -> Table:
    """Create a summary table of ranked picks."""
    table = Table(
        title=f"Setups as of {output.as_of_date}",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan"
    )

    table.add_column("#", justify="right", style="dim")
    table.add_column("Ticker", style="bold")
    table.add_column("Setup")
    table.add_column("Price", justify="right")
    table.add_column("RSI", justify="right")
    table.add_column("RelVol", justify="right")
    table.add_column("Trend", justify="center")
    table.add_column("Sector")
    if leo:
        table.add_column("Pattern")
        table.add_column("%B", justify="right")
        table.add_column("Stoch", justify="right")
        table.add_column("Target", justify="right", style="cyan")
        table.add_column("Earn", justify="center")

    for rank, pick in enumerate(output.picks, 1):
        color = SETUP_COLORS.get(pick.selection_reason, "white")
        row = [
            str(rank),
            pick.ticker,
            f"[{color}]{pick.selection_reason}[/]",
            f"${pick.price:,.2f}",
            _fmt(pick.rsi),
            _fmt(pick.relative_volume, ".2f"),
            pick.trend or "-",
            pick.sector or "-",
        ]
        if leo:
            first_target = pick.price_targets[0].price if pick.price_targets else None
            row += [
                pick.candlestick_pattern or "-",
                _fmt(pick.bb_percent_b, ".2f"),
                _fmt(pick.stoch_k),
                _fmt(first_target, ",.2f", "$"),
                "[yellow]![/]" if pick.earnings_warning else "",
            ]
        table.add_row(*row)

    return table


def create_pick_panel(pick: ClassifiedPick) -> Panel:
    """Detail panel for a Leo pick with its price targets."""
    content = [
        f"[bold]Setup:[/bold]          {pick.selection_reason}",
        f"[bold]Price:[/bold]          ${pick.price:,.2f}",
        f"[bold]Pattern:[/bold]        {pick.candlestick_pattern or '-'}",
        f"[bold]Volume shift:[/bold]   {pick.volume_shift or '-'} ({_fmt(pick.volume_shift_strength, '.0f')})",
        f"[bold]BB position:[/bold]    {pick.bb_position or '-'} (%B {_fmt(pick.bb_percent_b, '.2f')})",
        f"[bold]Stochastic:[/bold]     {pick.stoch_position or '-'} (%K {_fmt(pick.stoch_k)})",
        f"[bold]Entry confirmed:[/bold] {'yes' if pick.entry_confirmed else 'no'}",
        f"[bold]Timeline:[/bold]       {pick.reversal_timeline or '-'}",
    ]
    if pick.earnings_warning:
        content.append(f"[yellow]Earnings on {pick.next_earnings_date}[/yellow]")

    if pick.price_targets:
        content.append("")
        content.append("[bold]Price Targets:[/bold]")
        for target in pick.price_targets:
            content.append(
                f"  ${target.price:,.2f}  [dim]{target.description} ({target.confidence}%)[/dim]"
            )

    return Panel(
        "\n".join(content),
        title=f"[bold white]{pick.ticker}[/bold white]",
        border_style="cyan",
        box=box.ROUNDED
    )


def _to_json(output: EngineOutput) -> str:
    # numpy scalars expose .item()
    return json.dumps(output.to_dict(), indent=2, default=lambda o: o.item() if hasattr(o, "item") else str(o))


@app.command()
def screen(
    tickers: Optional[List[str]] = typer.Argument(
        None,
        help="Ticker(s) to screen (default: --index, CSV contents or the config watchlist)"
    ),
    index: Optional[str] = typer.Option(
        None,
        "--index", "-i",
        help="Screen an index: sp500, dowjones, nasdaq100, russell2000 or '*' for all"
    ),
    csv_path: Optional[Path] = typer.Option(
        None,
        "--csv",
        help="Long-format OHLCV CSV export to screen instead of fetching data"
    ),
    params_file: Optional[Path] = typer.Option(
        None,
        "--params", "-p",
        help="JSON file of run parameters; command-line options override it"
    ),
    mock: bool = typer.Option(
        False,
        "--mock",
        help="Use simulated data (for testing/demo when network unavailable)"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Always fetch fresh data"),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="As-of date YYYY-MM-DD (default: latest CSV bar, else today)"
    ),
    max_results: Optional[int] = typer.Option(None, "--max-results", "-n", help="Maximum picks to return [50]"),
    sector: Optional[str] = typer.Option(None, "--sector", help="Exact sector match, '*' for any"),
    industry: Optional[str] = typer.Option(None, "--industry", help="Exact industry match, '*' for any"),
    market_cap_min: Optional[float] = typer.Option(None, "--market-cap-min", help="Minimum market cap, USD [2e9]"),
    market_cap_max: Optional[float] = typer.Option(None, "--market-cap-max", help="Maximum market cap, USD [1e13]"),
    trend: Optional[str] = typer.Option(None, "--trend", help="up, down, sideways or '*'"),
    trend_lookback: Optional[int] = typer.Option(None, "--trend-lookback", help="Bars for trend direction [60]"),
    ma_cross: Optional[str] = typer.Option(None, "--ma-cross", help="20>50, 50>200, 20>200 or none"),
    rsi_min: Optional[float] = typer.Option(None, "--rsi-min", help="Minimum RSI(14) [0]"),
    rsi_max: Optional[float] = typer.Option(None, "--rsi-max", help="Maximum RSI(14) [100]"),
    stoch_min: Optional[float] = typer.Option(None, "--stoch-min", help="Minimum Stochastic %K [0]"),
    stoch_max: Optional[float] = typer.Option(None, "--stoch-max", help="Maximum Stochastic %K [100]"),
    adx_min: Optional[float] = typer.Option(None, "--adx-min", help="Minimum ADX(14) [0]"),
    sr_proximity: Optional[float] = typer.Option(
        None, "--sr-proximity", help="Maximum % distance to support/resistance [3]"
    ),
    atr_lookback: Optional[int] = typer.Option(None, "--atr-lookback", help="ATR window [14]"),
    fib_reference: Optional[str] = typer.Option(
        None, "--fib-reference", help="swing_low_to_high or swing_high_to_low"
    ),
    fib_zone: Optional[str] = typer.Option(
        None, "--fib-zone", help="38.2-50, 50-61.8, 38.2-61.8, extension-127, extension-161.8 or '*'"
    ),
    leo: Optional[bool] = typer.Option(None, "--leo/--no-leo", help="Enable Leo reversal methodology"),
    min_price_leo: Optional[float] = typer.Option(None, "--min-price-leo", help="Leo minimum price [50]"),
    leo_index: Optional[List[str]] = typer.Option(
        None, "--leo-index", help="Leo index filter, repeatable [sp500, dowjones, nasdaq100]"
    ),
    leo_pattern: Optional[List[str]] = typer.Option(
        None, "--leo-pattern", help="Allowed candlestick pattern, repeatable [doji, hammer, long_lower_shadow]"
    ),
    volume_shift: Optional[bool] = typer.Option(
        None, "--volume-shift/--no-volume-shift", help="Require a volume shift for Leo reversals"
    ),
    bb_bounce: Optional[bool] = typer.Option(
        None, "--bb-bounce/--no-bb-bounce", help="Enable Bollinger bounce/reject setups"
    ),
    stoch_oversold: Optional[float] = typer.Option(None, "--stoch-oversold", help="Leo oversold %K [20]"),
    stoch_overbought: Optional[float] = typer.Option(None, "--stoch-overbought", help="Leo overbought %K [80]"),
    earnings_days: Optional[int] = typer.Option(
        None, "--earnings-days", help="Warn when earnings fall within this many days [30]"
    ),
    timeframe: Optional[str] = typer.Option(
        None,
        "--timeframe", "-t",
        help="daily, weekly or monthly bars (default: weekly with --leo, else daily)"
    ),
    workers: int = typer.Option(
        DEFAULT_CONFIG.data.max_workers,
        "--workers", "-w",
        help="Worker threads for fetching and screening"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")
):
    """
    Screen stocks and print ranked setup picks.

    Examples:

        setup-screener screen NVDA AAPL MSFT

        setup-screener screen --index dowjones --leo

        setup-screener screen --csv export.csv --trend up -n 20

        setup-screener screen --index nasdaq100 --params swing.json --mock
    """
    setup_logging(verbose)

    if timeframe is not None and timeframe not in TIMEFRAMES:
        console.print(f"[red]Invalid timeframe '{timeframe}'. Use one of: {', '.join(TIMEFRAMES)}[/red]")
        raise typer.Exit(1)

    imported = None
    if csv_path is not None:
        try:
            imported = import_csv(csv_path)
        except DataProviderError as e:
            console.print(f"[red]Error importing {csv_path}: {e}[/red]")
            raise typer.Exit(1)

    options = {
        "user_sector": sector,
        "user_industry": industry,
        "market_cap_min": market_cap_min,
        "market_cap_max": market_cap_max,
        "trend_type": trend,
        "trend_lookback": trend_lookback,
        "ma_cross": ma_cross,
        "rsi_min": rsi_min,
        "rsi_max": rsi_max,
        "stoch_k_min": stoch_min,
        "stoch_k_max": stoch_max,
        "adx_min": adx_min,
        "sr_proximity_pct": sr_proximity,
        "atr_lookback": atr_lookback,
        "fib_reference": fib_reference,
        "fib_zone": fib_zone,
        "max_results": max_results,
        "as_of_date": as_of,
        # prefixed keys override the file's nested "leo" mapping
        "leo_enabled": leo,
        "leo_min_price": min_price_leo,
        "leo_index_filters": leo_index or None,
        "leo_candlestick_patterns": leo_pattern or None,
        "leo_require_volume_shift": volume_shift,
        "leo_bb_bounce_enabled": bb_bounce,
        "leo_stoch_oversold_threshold": stoch_oversold,
        "leo_stoch_overbought_threshold": stoch_overbought,
        "leo_earnings_warning_days": earnings_days,
    }

    try:
        values = load_params_file(params_file) if params_file is not None else {}
        values.update({key: value for key, value in options.items() if value is not None})
        if "as_of_date" not in values and imported is not None:
            values["as_of_date"] = imported.as_of_date
        params = ScreenerParams.from_dict(values)
    except ScreenerConfigError as e:
        console.print(f"[red]Invalid parameters: {e}[/red]")
        raise typer.Exit(1)

    if imported is not None:
        symbols = [t.upper() for t in tickers] if tickers else list(imported.timeseries)
        timeseries = {t: imported.timeseries[t] for t in symbols if t in imported.timeseries}
        metadata = {t: imported.metadata[t] for t in symbols if t in imported.metadata}
    else:
        try:
            symbols = [t.upper() for t in tickers] if tickers else (
                get_index_tickers(index) if index else list(DEFAULT_CONFIG.watchlist)
            )
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

        if mock:
            provider = MockDataProvider(seed=42, end_date=params.as_of_date)
            delay = 0.0
            if not json_output:
                console.print("[dim]Using simulated data (--mock mode)[/dim]\n")
        else:
            provider = YFinanceProvider()
            if DEFAULT_CONFIG.data.cache_enabled and not no_cache:
                provider = CachedProvider(provider)
            delay = DEFAULT_CONFIG.data.request_delay_seconds

        frame = resolve_timeframe(params, timeframe)
        with console.status(f"[bold green]Fetching {frame} data for {len(symbols)} tickers..."):
            timeseries, metadata, errors = load_universe(
                symbols, provider, frame, workers, batch_delay=delay
            )
        for ticker, message in errors.items():
            console.print(f"[red]Error fetching {ticker}: {message}[/red]")

    if not timeseries:
        console.print("[red]No data loaded; nothing to screen.[/red]")
        raise typer.Exit(1)

    output = run(params, timeseries, metadata, max_workers=workers)

    if json_output:
        console.print_json(_to_json(output))
        return

    if not output.picks:
        console.print(f"[yellow]No setups found among {output.stats.universe_size} tickers.[/yellow]")
        return

    console.print(create_picks_table(output, params.leo.enabled))
    if params.leo.enabled:
        console.print()
        for pick in output.picks:
            console.print(create_pick_panel(pick))

    excluded = ", ".join(f"{k}: {v}" for k, v in output.stats.excluded.items()) or "none"
    console.print(
        f"[dim]{output.stats.returned} picks from {output.stats.universe_size} tickers "
        f"in {output.stats.execution_time_seconds:.2f}s (excluded: {excluded})[/dim]"
    )


@app.command()
def inspect(
    ticker: str = typer.Argument(..., help="Stock ticker"),
    leo: bool = typer.Option(True, "--leo/--no-leo", help="Include Leo indicators"),
    timeframe: str = typer.Option("daily", "--timeframe", "-t", help="daily, weekly or monthly"),
    mock: bool = typer.Option(False, "--mock", help="Use simulated data")
):
    """
    Show the indicator snapshot for a single ticker.

    Example: setup-screener inspect NVDA
    """
    if timeframe not in TIMEFRAMES:
        console.print(f"[red]Invalid timeframe '{timeframe}'. Use one of: {', '.join(TIMEFRAMES)}[/red]")
        raise typer.Exit(1)

    provider = MockDataProvider(seed=42) if mock else YFinanceProvider()
    ticker = ticker.upper()
    try:
        df = provider.get_ohlcv(
            ticker,
            period=DEFAULT_CONFIG.data.timeframe_periods[timeframe],
            interval=DEFAULT_CONFIG.data.timeframe_intervals[timeframe]
        )
        meta = provider.get_ticker_meta(ticker)
    except DataProviderError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    params = ScreenerParams(leo=LeoParams(enabled=leo))
    ind = compute_indicators(df, params, meta)

    content = [
        f"[bold]{meta.company or ticker}[/bold]  [dim]{meta.sector or '-'} / {meta.industry or '-'}[/dim]",
        f"[bold]Price:[/bold]        ${float(df['Close'].iloc[-1]):,.2f}   [dim]{len(df)} {timeframe} bars[/dim]",
        "",
        f"[bold]SMA 20/50/200:[/bold] {_fmt(ind.sma20, ',.2f')} / {_fmt(ind.sma50, ',.2f')} / {_fmt(ind.sma200, ',.2f')}",
        f"[bold]RSI(14):[/bold]      {_fmt(ind.rsi14)}",
        f"[bold]Stoch %K:[/bold]     {_fmt(ind.stoch_k)}",
        f"[bold]ADX(14):[/bold]      {_fmt(ind.adx14)}",
        f"[bold]ATR(14):[/bold]      {_fmt(ind.atr, ',.2f', '$')}",
        f"[bold]Rel volume:[/bold]   {_fmt(ind.rel_vol, '.2f')}",
        f"[bold]BB width:[/bold]     {_fmt(ind.bb_width, '.3f')}",
        f"[bold]Trend:[/bold]        {ind.trend or '-'}",
        f"[bold]S/R dist:[/bold]     {_fmt(ind.sr_distance_pct, '.2f')}%",
        f"[bold]Fib hit:[/bold]      {'yes' if ind.fib_hit else 'no'}"
    ]
    if leo:
        content += [
            "",
            f"[bold]%B:[/bold]           {_fmt(ind.bb_percent_b, '.2f')}",
            f"[bold]Pattern:[/bold]      {ind.candlestick_pattern or '-'}",
            f"[bold]Volume shift:[/bold] {ind.volume_shift or '-'} ({_fmt(ind.volume_shift_strength, '.0f')})",
            f"[bold]FVGs:[/bold]         {len(ind.fvg_zones or [])}",
            f"[bold]Swings H/L:[/bold]   {len(ind.swing_highs or [])} / {len(ind.swing_lows or [])}",
            f"[bold]Entry conf.:[/bold]  {'yes' if ind.entry_confirmed else 'no'}",
            f"[bold]Earnings:[/bold]     {meta.next_earnings_date or '-'}"
            + (" [yellow](within window)[/yellow]" if ind.earnings_warning else ""),
        ]

    console.print(Panel(
        "\n".join(content),
        title=f"[bold white]{ticker}[/bold white]",
        border_style="cyan",
        box=box.ROUNDED
    ))


@app.command()
def indices():
    """List the supported indices and their constituent counts."""
    table = Table(title="Index Filters", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Index")
    table.add_column("Tickers", justify="right")

    for name, constituents in INDEX_CONSTITUENTS.items():
        table.add_row(name, get_index_display_name(name), str(len(constituents)))
    table.add_row("*", get_index_display_name("*"), str(len(get_index_tickers("*"))))

    console.print(table)


if __name__ == "__main__":
    app()
