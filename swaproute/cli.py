from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.table import Table

from swaproute import __version__
from swaproute.api import create_app
from swaproute.config import settings
from swaproute.core.base import PipelineContext, RuntimeConfig
from swaproute.core.errors import ConfigurationError, PriceSourceError, RouteNotFoundError
from swaproute.models.pipeline import SnapshotResult
from swaproute.models.routes import RouteEntry
from swaproute.pipeline import GraphBuilder, RoutePipeline, RouteQueryService, SnapshotStage
from swaproute.sources import ChainlinkSource, PriceSource, StaticPriceSource
from swaproute.sources.static import parse_price_overrides
from swaproute.utils.heartbeat import Heartbeat
from swaproute.utils.logging import setup as setup_logging

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)
console = Console()

_DEFAULT_DATA_DIR = Path(settings.default.data_dir)
_DEFAULT_HTTP_TIMEOUT = settings.default.http_timeout
_DEFAULT_MAX_CONCURRENCY = settings.default.max_concurrency


class SourceKind(str, Enum):
    chainlink = "chainlink"
    static = "static"


def create_context(runtime_config: RuntimeConfig | None = None) -> PipelineContext:
    runtime_config = runtime_config or RuntimeConfig()
    data_dir = Path(runtime_config.data_dir) if runtime_config.data_dir else _DEFAULT_DATA_DIR
    return PipelineContext(
        settings=settings,
        run_timestamp=datetime.now(timezone.utc),
        data_dir=data_dir,
        runtime_config=runtime_config,
    )


def _runtime_config(ctx: typer.Context) -> RuntimeConfig:
    return ctx.obj if ctx and ctx.obj else RuntimeConfig()


def _make_source(context: PipelineContext, kind: SourceKind, prices: Sequence[str]) -> PriceSource:
    if kind is SourceKind.static:
        try:
            return StaticPriceSource(parse_price_overrides(list(prices)))
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    if prices:
        console.print("[yellow]--price is only used with --source static; ignoring[/yellow]")
    try:
        return ChainlinkSource(context)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _make_pipeline(context: PipelineContext, source: PriceSource) -> RoutePipeline:
    builder = GraphBuilder(
        source=source,
        tokens=context.settings.tokens,
        candidates=context.settings.candidate_edges,
        max_concurrency=context.max_concurrency,
    )
    snapshot = SnapshotStage(
        store=context.store,
        symbols=context.settings.symbols,
        precision=context.settings.output_precision,
    )
    return RoutePipeline(builder, snapshot, interval=context.interval_seconds)


def _build_routes_table(entries: list[RouteEntry], title: str = "Latest Routes") -> Table:
    table = Table(title=title)
    table.add_column("From")
    table.add_column("To")
    table.add_column("Path")
    table.add_column("Output", justify="right")

    for e in entries:
        table.add_row(e.from_token, e.to_token, " -> ".join(e.path), f"{e.output:.6f}")

    return table


def _build_snapshot_table(result: SnapshotResult) -> Table:
    table = Table(title="Snapshot Results")
    table.add_column("Metric")
    table.add_column("Value")

    table.add_row("Timestamp", result.timestamp)
    table.add_row("Pairs considered", str(result.pairs_considered))
    table.add_row("Routes written", str(result.entry_count))
    if result.skipped_sources:
        table.add_row("Skipped (negative cycle)", ", ".join(result.skipped_sources))

    return table


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"swaproute v{__version__}")
        raise typer.Exit()


@app.callback()
def init(
    ctx: typer.Context,
    _version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    data_dir: Path = typer.Option(
        _DEFAULT_DATA_DIR,
        "--data-dir",
        "-d",
        help="Directory holding the route history and heartbeat log (overrides TOML config)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose (DEBUG) logging",
    ),
    http_timeout: int = typer.Option(
        _DEFAULT_HTTP_TIMEOUT,
        "--http-timeout",
        help="RPC timeout in seconds per price fetch (overrides TOML config)",
    ),
    max_concurrency: int = typer.Option(
        _DEFAULT_MAX_CONCURRENCY,
        "--max-concurrency",
        help="Max concurrent price fetches (overrides TOML config)",
    ),
) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level=level)

    ctx.obj = RuntimeConfig(
        http_timeout=http_timeout if http_timeout != _DEFAULT_HTTP_TIMEOUT else None,
        max_concurrency=max_concurrency if max_concurrency != _DEFAULT_MAX_CONCURRENCY else None,
        data_dir=str(data_dir) if data_dir != _DEFAULT_DATA_DIR else None,
    )


@app.command(help="Compute routes now and then on a fixed interval")
def run(
    ctx: typer.Context,
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between runs (default: interval_seconds from config)",
    ),
    source_kind: SourceKind = typer.Option(SourceKind.chainlink, "--source", help="Price source"),
    prices: list[str] = typer.Option([], "--price", help="SYMBOL=PRICE for the static source (repeatable)"),
) -> None:
    runtime_config = _runtime_config(ctx)
    if interval is not None:
        if interval <= 0:
            console.print("[red]Error: --interval must be positive[/red]")
            raise typer.Exit(1)
        runtime_config.interval_seconds = interval

    context = create_context(runtime_config)
    source = _make_source(context, source_kind, prices)
    pipeline = _make_pipeline(context, source)
    heartbeat = Heartbeat(context.heartbeat_path, interval=context.settings.heartbeat_seconds)

    async def main_loop() -> None:
        async with source:
            if isinstance(source, ChainlinkSource):
                try:
                    block = await source.block_number()
                except (httpx.HTTPError, PriceSourceError) as e:
                    console.print(f"[red]Error: cannot reach RPC endpoint: {e}[/red]")
                    raise typer.Exit(1)
                console.print(f"[green]Connected to Ethereum. Latest block: {block}[/green]")
            async with heartbeat:
                await pipeline.run_forever()

    console.log(
        f"interval={context.interval_seconds}s, source={source.name}, "
        f"store={context.store.path}, tokens={len(context.settings.tokens)}"
    )

    try:
        asyncio.run(main_loop())
    except KeyboardInterrupt:
        console.print(f"Stopped after {pipeline.runs} runs ({pipeline.skipped} skipped), up {heartbeat.uptime}.")


@app.command(help="Run the pipeline once and append the snapshot")
def snapshot(
    ctx: typer.Context,
    source_kind: SourceKind = typer.Option(SourceKind.chainlink, "--source", help="Price source"),
    prices: list[str] = typer.Option([], "--price", help="SYMBOL=PRICE for the static source (repeatable)"),
) -> None:
    context = create_context(_runtime_config(ctx))
    source = _make_source(context, source_kind, prices)
    pipeline = _make_pipeline(context, source)

    async def run_once():
        async with source:
            return await pipeline.run_once()

    result = asyncio.run(run_once())

    assert result.snapshot is not None
    console.print(_build_snapshot_table(result.snapshot))
    latest = RouteQueryService(context.store).get_latest_routes()
    written = [e for e in latest if e.timestamp == result.snapshot.timestamp]
    if written:
        console.print(_build_routes_table(written))
    console.print("Snapshot complete.")


@app.command(help="Show every route of the latest snapshot")
def routes(ctx: typer.Context) -> None:
    context = create_context(_runtime_config(ctx))
    entries = RouteQueryService(context.store).get_latest_routes()
    if not entries:
        console.print("[yellow]No routes recorded yet.[/yellow]")
        return
    console.print(_build_routes_table(entries, title=f"Routes at {entries[0].timestamp}"))


@app.command(help="Show the latest route for one token pair")
def route(
    ctx: typer.Context,
    from_token: str = typer.Argument(..., help="Token to sell"),
    to_token: str = typer.Argument(..., help="Token to buy"),
) -> None:
    context = create_context(_runtime_config(ctx))
    try:
        entry = RouteQueryService(context.store).get_route(from_token, to_token)
    except RouteNotFoundError:
        console.print(f"[red]No route found for {from_token.upper()} -> {to_token.upper()}[/red]")
        raise typer.Exit(1)
    console.print(_build_routes_table([entry], title=f"Route at {entry.timestamp}"))


@app.command(help="Serve the latest routes over HTTP")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(4000, "--port", "-p", help="Bind port"),
) -> None:
    context = create_context(_runtime_config(ctx))
    flask_app = create_app(
        RouteQueryService(context.store),
        heartbeat_path=context.heartbeat_path,
        heartbeat_stale_seconds=context.settings.heartbeat_stale_seconds,
    )
    console.print(f"[green]Swap route API is running at http://{host}:{port}/api/routes[/green]")
    flask_app.run(host=host, port=port)


def main() -> None:
    try:
        code = app(standalone_mode=False)
    except typer.Exit as e:
        raise SystemExit(e.exit_code) from None
    except typer.Abort:
        console.print("[red]Aborted.[/red]")
        raise SystemExit(1) from None
    if isinstance(code, int) and code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
