"""
Command line front end for the FKS trading client
"""
import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigLoader
from .config.loader import DEFAULT_CONFIG_PATH
from .models import SignalResponse
from .repositories.signals import SIGNAL_CATEGORIES
from .services import FksServices
from .viewmodels.base import ViewModel

logger = logging.getLogger(__name__)

console = Console()


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Setup logging configuration"""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    # Suppress noisy loggers
    logging.getLogger('websockets').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('aiohttp').setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='FKS Trading client - signals, portfolio and market data',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py health
  python main.py price BTC/USD --no-cache
  python main.py --username alice --password secret signals --category bitcoin
  python main.py stream --limit 10

Service URLs come from the config file or FKS_API_URL, FKS_AUTH_URL,
FKS_DATA_URL and FKS_PORTFOLIO_URL. Credentials may also be given as
FKS_USERNAME / FKS_PASSWORD.
        """
    )
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH,
                        help=f'YAML config file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: from config)')
    parser.add_argument('--username', default=None, help='Login before running the command')
    parser.add_argument('--password', default=None, help='Password for --username')

    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('health', help='Health of the auth, data and portfolio services')

    price = commands.add_parser('price', help='Current price for a symbol')
    price.add_argument('symbol')
    price.add_argument('--provider', default=None)
    price.add_argument('--no-cache', action='store_true', help='Bypass the server-side cache')

    candles = commands.add_parser('candles', help='OHLCV candles for a symbol')
    candles.add_argument('symbol')
    candles.add_argument('--interval', default='1h')
    candles.add_argument('--provider', default=None)
    candles.add_argument('--tail', type=int, default=20, help='Rows to show (default: 20)')

    signals = commands.add_parser('signals', help='Generate trading signals')
    signals.add_argument('--category', default='swing', choices=SIGNAL_CATEGORIES)
    signals.add_argument('--symbols', default=None, help='Comma-separated symbol list')
    signals.add_argument('--ai', action='store_true', help='AI-enhanced analysis')

    commands.add_parser('portfolio', help='Portfolio value, prices and correlations')
    commands.add_parser('wall', help='One trading wall snapshot')

    stream = commands.add_parser('stream', help='Print live signals from the WebSocket')
    stream.add_argument('--limit', type=int, default=0, help='Stop after N signals (default: run forever)')

    return parser


def _fail_on_error(view_model: ViewModel) -> int:
    error = view_model.current.error
    if error:
        console.print(f"[red]{error}[/red]")
        return 1
    return 0


def _signal_table(signals: List[SignalResponse], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    for column in ("Symbol", "Type", "Strength", "Confidence", "Entry", "TP", "SL", "R:R"):
        table.add_column(column)
    for s in signals:
        color = "green" if s.signal_type.upper() == "BUY" else "red" if s.signal_type.upper() == "SELL" else "yellow"
        table.add_row(
            s.symbol, f"[{color}]{s.signal_type}[/{color}]", s.strength, f"{s.confidence:.0%}",
            f"{s.entry_price:,.4f}", f"{s.take_profit:,.4f}", f"{s.stop_loss:,.4f}",
            f"{s.risk_reward_ratio:.2f}"
        )
    return table


async def cmd_health(services: FksServices, args) -> int:
    table = Table(title="Service health", box=box.SIMPLE_HEAVY)
    table.add_column("Service")
    table.add_column("URL")
    table.add_column("Status")

    failures = 0
    checks = (
        ("auth", services.client.auth_url, services.auth.get_health),
        ("data", services.client.data_url, services.data.get_health),
        ("portfolio", services.client.portfolio_url, services.portfolio.get_health),
    )
    for name, url, check in checks:
        try:
            health = await check()
            table.add_row(name, url, f"[green]{health.status}[/green]")
        except Exception as e:
            failures += 1
            table.add_row(name, url, f"[red]{e}[/red]")

    console.print(table)
    return 1 if failures else 0


async def cmd_price(services: FksServices, args) -> int:
    quote = await services.data.get_price(args.symbol, args.provider, use_cache=not args.no_cache)
    cached = " (cached)" if quote.cached else ""
    console.print(f"{quote.symbol}: [bold]{quote.price:,.4f}[/bold] via {quote.provider}{cached}")
    return 0


async def cmd_candles(services: FksServices, args) -> int:
    response = await services.data.get_ohlcv(args.symbol, args.interval, args.provider)
    df = response.to_dataframe().tail(args.tail)
    console.print(f"{response.symbol} {response.interval} via {response.provider}")
    console.print(df.to_string(index=False))
    return 0


async def cmd_signals(services: FksServices, args) -> int:
    view_model = services.signal_view_model()
    await view_model.load_signals(args.category, args.symbols, args.ai)
    if _fail_on_error(view_model):
        return 1

    state = view_model.current
    console.print(_signal_table(list(state.signals), f"{state.selected_category} signals"))
    console.print(f"Average confidence: {view_model.get_average_confidence():.0%}  "
                  f"Strong: {len(view_model.get_strong_signals())}")
    return 0


async def cmd_portfolio(services: FksServices, args) -> int:
    view_model = services.portfolio_view_model()
    await view_model.load_portfolio()
    if _fail_on_error(view_model):
        return 1

    state = view_model.current
    value = state.portfolio_value
    usd = view_model.get_portfolio_value_usd()
    console.print(f"Total: [bold]{value.total_btc:.6f} BTC[/bold]"
                  + (f" (~${usd:,.2f})" if usd is not None else "")
                  + f"  BTC allocation: {value.btc_allocation:.1%}")

    table = Table(title="Assets", box=box.SIMPLE_HEAVY)
    for column in ("Symbol", "Holding (BTC)", "Price (USD)", "24h", "Corr. to BTC"):
        table.add_column(column)
    correlations = {c.symbol: c.correlation_to_btc for c in state.correlations}
    for price in state.asset_prices:
        table.add_row(
            price.symbol,
            f"{value.holdings_btc.get(price.symbol, 0.0):.6f}",
            f"{price.price_usd:,.2f}" if price.price_usd is not None else "-",
            f"{price.change_24h:+.2f}%" if price.change_24h is not None else "-",
            f"{correlations[price.symbol]:.2f}" if price.symbol in correlations else "-",
        )
    console.print(table)
    return 0


async def cmd_wall(services: FksServices, args) -> int:
    view_model = services.trading_wall_view_model()
    await view_model.refresh()
    state = view_model.current

    clocks = Table(title="World clocks", box=box.SIMPLE_HEAVY)
    for column in ("City", "Time", "Session"):
        clocks.add_column(column)
    for clock in state.world_clocks:
        session = "open" if clock.is_open else "pre-market" if clock.is_pre_market else "closed"
        if clock.is_overlap:
            session += " (overlap)"
        clocks.add_row(clock.city, clock.time, session)
    console.print(clocks)

    ticker = Table(title=state.connection_status, box=box.SIMPLE_HEAVY)
    ticker.add_column("Symbol")
    ticker.add_column("Price")
    for price in state.ticker_prices:
        ticker.add_row(price.symbol, f"{price.price:,.4f}")
    console.print(ticker)

    if state.metrics and state.metrics.signal_generation:
        console.print(f"Signals generated: {state.metrics.signal_generation.total}")
    if state.portfolio_metrics and state.portfolio_metrics.pnl is not None:
        console.print(f"P&L: {state.portfolio_metrics.pnl:,.2f}")
    return 0


async def cmd_stream(services: FksServices, args) -> int:
    view_model = services.websocket_view_model()
    done = asyncio.Event()
    last = None
    printed = 0

    def on_state(state):
        nonlocal last, printed
        if state.latest_signal is not None and state.latest_signal is not last:
            last = s = state.latest_signal
            printed += 1
            console.print(f"{s.timestamp} {s.symbol} {s.signal_type} {s.strength} {s.confidence:.0%}")
            if args.limit and printed >= args.limit:
                done.set()
        if not state.is_connected:
            done.set()

    view_model.state.subscribe(on_state)
    await view_model.connect()
    try:
        await done.wait()
    finally:
        await view_model.disconnect()
    return 0


COMMANDS = {
    'health': cmd_health,
    'price': cmd_price,
    'candles': cmd_candles,
    'signals': cmd_signals,
    'portfolio': cmd_portfolio,
    'wall': cmd_wall,
    'stream': cmd_stream,
}


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader(args.config).load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    setup_logging(args.log_level or config.log_level, config.log_file)

    username = args.username or os.getenv('FKS_USERNAME')
    password = args.password or os.getenv('FKS_PASSWORD')

    async with FksServices.from_config(config) as services:
        if username:
            auth = services.auth_view_model()
            await auth.login(username, password or "")
            if not auth.current.is_authenticated:
                console.print(f"[red]{auth.current.error}[/red]")
                return 1
            console.print(f"Logged in as [bold]{auth.current.user_profile.username}[/bold]")

        try:
            return await COMMANDS[args.command](services, args)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            logger.error(f"Command {args.command} failed: {e}", exc_info=True)
            return 1
        finally:
            if username:
                await services.auth.logout()


def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        console.print("\nStopped")
        sys.exit(0)
