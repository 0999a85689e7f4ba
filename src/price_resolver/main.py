"""CLI entrypoint for the price resolver."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import backoff
import requests
import typer
from eth_typing import URI
from rich.console import Console
from rich.table import Table
from web3 import Web3

from .constants import (
    DEFAULT_BASE_RPC_URL,
    DEFAULT_MAINNET_RPC_URL,
    DEFAULT_SEPOLIA_RPC_URL,
)
from .errors import PriceError
from .logger import setup_logging
from .oracle import PriceOracle
from .settings import Network, ResolverSettings
from .state import AppState
from .units import WAD

NETWORK_RPC_DEFAULTS = {
    Network.MAINNET: DEFAULT_MAINNET_RPC_URL,
    Network.SEPOLIA: DEFAULT_SEPOLIA_RPC_URL,
    Network.BASE: DEFAULT_BASE_RPC_URL,
}

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Resolve 18-decimal prices between arbitrary on-chain assets.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("price_resolver")


def format_wad(value: int) -> str:
    """Render an 18-decimal fixed-point value as a plain decimal string."""
    return f"{Decimal(value) / Decimal(WAD):.18f}"


def _fetch_block_number(w3: Web3, retries: int) -> int:
    @backoff.on_exception(
        backoff.expo,
        (requests.exceptions.ConnectionError, requests.exceptions.Timeout),
        max_tries=retries + 1,
        jitter=backoff.full_jitter,
    )
    def _latest() -> int:
        return w3.eth.block_number

    return _latest()


def build_oracle(state: AppState) -> PriceOracle:
    """Connect to the RPC, pin the block and build the oracle."""
    settings = state.settings
    w3 = Web3(
        Web3.HTTPProvider(
            URI(settings.rpc_url_required),
            request_kwargs={"timeout": settings.rpc_timeout},
        )
    )
    if settings.block_number is None:
        settings.block_number = _fetch_block_number(w3, settings.connect_retries)
        state.logger.info("Pinned latest block %d", settings.block_number)
    return PriceOracle.from_settings(settings, w3=w3)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [price_resolver] table).",
        ),
    ] = None,
    network: Annotated[
        Network | None,
        typer.Option(
            "--network",
            "-n",
            help="Network to use (mainnet, sepolia, or base).",
        ),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option(
            "--rpc-url",
            help="RPC endpoint; overrides the default network RPC.",
        ),
    ] = None,
    block_number: Annotated[
        int | None,
        typer.Option(
            "--block-number",
            help="Block to read state at. If not provided, the latest block is pinned.",
        ),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", help="Recursion budget for unwrap and pivot steps."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
):
    """Load configuration shared by every command."""
    if config_path:
        os.environ["PRICE_RESOLVER_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Network | int | str] = {}
    if network is not None:
        init_kwargs["network"] = network
    if rpc_url is not None:
        init_kwargs["rpc_url"] = rpc_url
    if block_number is not None:
        init_kwargs["block_number"] = block_number
    if max_depth is not None:
        init_kwargs["max_depth"] = max_depth
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = ResolverSettings(**init_kwargs)
    if settings.rpc_url is None:
        settings.rpc_url = NETWORK_RPC_DEFAULTS[settings.network]

    setup_logging(settings.log_level)
    ctx.obj = AppState(settings=settings, logger=_build_logger())


@app.command()
def quote(
    ctx: typer.Context,
    token_in: Annotated[str, typer.Argument(help="Asset being priced.")],
    token_out: Annotated[str, typer.Argument(help="Asset the price is expressed in.")],
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the result as JSON.")
    ] = False,
):
    """Price one unit of TOKEN_IN in TOKEN_OUT."""
    state: AppState = ctx.obj
    oracle = build_oracle(state)
    try:
        price = oracle.get_price(token_in, token_out)
    except PriceError as e:
        typer.echo(f"{e.kind.value}: {e}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(
            json.dumps(
                {
                    "token_in": token_in,
                    "token_out": token_out,
                    "block_number": state.settings.block_number,
                    "price_d18": str(price),
                }
            )
        )
    else:
        typer.echo(f"{format_wad(price)} ({price})")


def _parse_pair(raw: str) -> tuple[str, str]:
    token_in, sep, token_out = raw.partition(":")
    if not sep or not token_in or not token_out:
        raise typer.BadParameter(f"Expected TOKEN_IN:TOKEN_OUT, got {raw!r}")
    return token_in, token_out


@app.command()
def batch(
    ctx: typer.Context,
    pairs: Annotated[
        list[str], typer.Argument(help="Pairs written as TOKEN_IN:TOKEN_OUT.")
    ],
):
    """Price several independent pairs against one pinned block."""
    state: AppState = ctx.obj
    parsed = [_parse_pair(raw) for raw in pairs]
    oracle = build_oracle(state)
    results = asyncio.run(oracle.get_prices(parsed))

    table = Table(title=f"Prices at block {state.settings.block_number}", expand=True)
    table.add_column("In", style="cyan", no_wrap=True)
    table.add_column("Out", style="cyan", no_wrap=True)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Error", style="red")
    for result in results:
        if result.ok:
            assert result.price is not None
            table.add_row(result.token_in, result.token_out, format_wad(result.price), "")
        else:
            error = result.error
            table.add_row(
                result.token_in,
                result.token_out,
                "[dim]<N/A>[/]",
                f"{error.kind.value}: {error}" if error else "",
            )
    Console().print(table)

    if not all(result.ok for result in results):
        raise typer.Exit(code=1)


@app.command("show-config")
def show_config(ctx: typer.Context):
    """Print effective config (with credentials redacted) and exit."""
    state: AppState = ctx.obj
    typer.echo(json.dumps(state.settings.as_safe_dict(), indent=2))


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
