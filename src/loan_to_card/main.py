"""CLI entrypoint for loan-to-card."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from .chains import ChainConfig, get_chain_config, load_chain_configs
from .clients import HolyheldClient, HttpRateSource, Web3ChainClient
from .domain import Mode, TransactionPlan
from .errors import LoanToCardError, PipelineFailure
from .logger import setup_logging
from .pipeline.context import Collaborators, WalletContext
from .pipeline.run import run_plan
from .processors import fetch_max_spendable, load_strategy_listing
from .report import (
    build_summary,
    render_failure,
    render_outcome,
    render_strategies,
    render_summary,
)
from .settings import LoanToCardSettings, Network
from .state import AppState

EXIT_FAILED = 1
EXIT_PARTIAL = 3

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Borrow against yield-bearing collateral and top up a card with the loan.",
)

console = Console()


def _build_logger() -> logging.Logger:
    return logging.getLogger("loan_to_card")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [loan_to_card] table).",
        ),
    ] = None,
    network: Annotated[
        Network | None,
        typer.Option("--network", "-n", help="Network to use (optimism, arbitrum or mainnet)."),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option("--rpc-url", help="RPC endpoint; overrides the network default."),
    ] = None,
    account: Annotated[
        str | None,
        typer.Option("--account", help="Wallet address; defaults to the signing key's address."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option("--show-config", help="Print effective config (with secrets redacted) and exit."),
    ] = False,
):
    """Load configuration and logging shared by every command."""
    if config_path:
        os.environ["LOAN_TO_CARD_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Network | str] = {}
    if network is not None:
        init_kwargs["network"] = network
    if rpc_url is not None:
        init_kwargs["rpc_url"] = rpc_url
    if account is not None:
        init_kwargs["account_address"] = account
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = LoanToCardSettings(**init_kwargs)
    setup_logging(settings.log_level)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    ctx.obj = AppState(settings=settings, logger=_build_logger())
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj


def _chain_config(state: AppState) -> ChainConfig:
    configs = load_chain_configs(state.settings.chains_file)
    return get_chain_config(configs, state.settings.chain_id)


def _chain_client(state: AppState) -> Web3ChainClient:
    s = state.settings
    return Web3ChainClient(
        s.rpc_url_required,
        s.private_key.get_secret_value() if s.private_key else None,
        receipt_timeout=s.receipt_timeout,
        read_retries=s.read_retries,
    )


def _rate_source(state: AppState) -> HttpRateSource:
    s = state.settings
    return HttpRateSource(s.rate_api_url, timeout=s.http_timeout, max_tries=s.read_retries + 1)


def _topup_provider(state: AppState) -> HolyheldClient:
    s = state.settings
    return HolyheldClient(
        s.topup_api_url,
        s.topup_api_key.get_secret_value() if s.topup_api_key else None,
        timeout=s.http_timeout,
        max_tries=s.read_retries + 1,
    )


def _fail(error: LoanToCardError) -> typer.Exit:
    if isinstance(error, PipelineFailure):
        render_failure(error, console)
        return typer.Exit(code=EXIT_PARTIAL if error.partial else EXIT_FAILED)
    console.print(f"[bold red]Error:[/] {error}")
    return typer.Exit(code=EXIT_FAILED)


@app.command()
def strategies(
    ctx: typer.Context,
    asset: Annotated[str, typer.Argument(help="Deposit asset (ETH, WETH, USDC, DAI or USDT).")],
):
    """List the strategies accepting ASSET with their live APR."""
    state = _state(ctx)
    try:
        config = _chain_config(state)
    except LoanToCardError as e:
        raise _fail(e) from e
    listing = asyncio.run(load_strategy_listing(config, asset, _rate_source(state)))
    render_strategies(listing, console)
    if not listing.ready:
        raise typer.Exit(code=EXIT_FAILED)


@app.command("max-amount")
def max_amount(
    ctx: typer.Context,
    asset: Annotated[str, typer.Argument(help="Deposit asset.")],
):
    """Print the largest depositable amount of ASSET for the wallet."""
    state = _state(ctx)
    s = state.settings
    try:
        config = _chain_config(state)
        client = _chain_client(state)
        account = s.account_address or client.address
        if not account:
            raise typer.BadParameter(
                "account_address is required.",
                param_hint=["--account", "LOAN_TO_CARD_ACCOUNT_ADDRESS"],
            )
        amount: Decimal = asyncio.run(
            fetch_max_spendable(client, account, config, asset, s.native_gas_reserve)
        )
    except LoanToCardError as e:
        raise _fail(e) from e
    typer.echo(f"{amount.normalize():f}")


def _execute(state: AppState, plan: TransactionPlan, yes: bool) -> None:
    s = state.settings
    config = _chain_config(state)
    client = _chain_client(state)
    rates = _rate_source(state)
    provider = _topup_provider(state) if plan.mode is Mode.TOP_UP else None

    listing = asyncio.run(load_strategy_listing(config, plan.deposit_asset, rates))
    rated = listing.find(plan.strategy_address)
    if rated is not None:
        render_summary(build_summary(plan, rated), console)
        if not yes and not typer.confirm("Proceed?", default=False):
            raise typer.Exit(code=0)

    wallet = WalletContext(
        account=s.account_address or client.address,
        chain=config.chain,
        chain_client=client,
        strategies=listing,
    )
    outcome = asyncio.run(
        run_plan(
            state,
            plan,
            wallet,
            Collaborators(rates=rates, provider=provider),
            chain_configs={config.id: config},
            on_event=lambda event: state.logger.debug(
                "event %s %s %s", event.state.value, event.detail or "", event.tx_hash or ""
            ),
        )
    )
    render_outcome(outcome, console)


@app.command()
def topup(
    ctx: typer.Context,
    amount: Annotated[str, typer.Argument(help="Amount to deposit.")],
    asset: Annotated[str, typer.Argument(help="Deposit asset.")],
    strategy: Annotated[str, typer.Argument(help="Strategy (yield token) address.")],
    holytag: Annotated[str, typer.Option("--holytag", help="Recipient Holytag.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
):
    """Deposit, borrow half and top up the card behind HOLYTAG."""
    plan = TransactionPlan(
        mode=Mode.TOP_UP,
        deposit_asset=asset,
        deposit_amount=amount,
        strategy_address=strategy,
        holytag=holytag,
    )
    try:
        _execute(_state(ctx), plan, yes)
    except LoanToCardError as e:
        raise _fail(e) from e


@app.command()
def borrow(
    ctx: typer.Context,
    amount: Annotated[str, typer.Argument(help="Amount to deposit.")],
    asset: Annotated[str, typer.Argument(help="Deposit asset.")],
    strategy: Annotated[str, typer.Argument(help="Strategy (yield token) address.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
):
    """Deposit and borrow half, keeping the synthetic debt in the wallet."""
    plan = TransactionPlan(
        mode=Mode.BORROW_ONLY,
        deposit_asset=asset,
        deposit_amount=amount,
        strategy_address=strategy,
    )
    try:
        _execute(_state(ctx), plan, yes)
    except LoanToCardError as e:
        raise _fail(e) from e


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
