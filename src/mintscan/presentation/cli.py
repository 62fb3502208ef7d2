import asyncio, logging
from typing import List, Optional

import typer
from rich.console import Console

from ..adapters.console_report import ConsoleReport, format_call
from ..adapters.rpc_httpx import HttpxRPC
from ..application.planning import resolve_range
from ..application.use_cases import scan_blocks, validate_rules
from ..config import RPC_URL_ENV, Settings, parse_address, parse_match_rule
from ..domain.decoding import DEFAULT_DECIMALS, decode_input
from ..domain.errors import ConfigError, DecodeError, FatalConfigError, RPCError
from ..domain.models import ScanStats
from ..domain.registry import default_registry
from ..domain.value_types import hex0x, hex_to_bytes
from ..log import configure_logging

app = typer.Typer(help="mintscan — audit trail of token mint & distribution activity.", no_args_is_help=True)
logger = logging.getLogger(__name__)


def _fail(msg: str, code: int) -> typer.Exit:
    typer.echo(f"Error: {msg}", err=True)
    return typer.Exit(code=code)

@app.command()
def scan(
    rpc_url: Optional[str] = typer.Option(None, "--rpc", envvar=RPC_URL_ENV, help="RPC endpoint URL"),
    contract: Optional[List[str]] = typer.Option(None, "--contract", help="ADDRESS:SELECTOR[:LABEL]; repeat for several"),
    token: Optional[str] = typer.Option(None, "--token", help="Token whose Transfer events are reported"),
    days: Optional[int] = typer.Option(None, "--days", help="Lookback window in days"),
    block_time: Optional[int] = typer.Option(None, "--block-time", help="Assumed average block time (s)"),
    from_block: Optional[int] = typer.Option(None, "--from-block", help="Override window start"),
    to_block: Optional[int] = typer.Option(None, "--to-block", help="Override window end (default: head)"),
    decimals: Optional[int] = typer.Option(None, "--decimals", help="Fixed display scale of amounts"),
    pace: Optional[float] = typer.Option(None, "--pace", help="Delay after every block (s)"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Blocks fetched in parallel"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    quiet: bool = typer.Option(False, "--quiet", "-q"),
):
    """Scan the lookback window (newest block first) and print every matched transaction."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO)
    try:
        registry = default_registry()
        settings = Settings().with_overrides(
            rpc_url=rpc_url,
            contracts=tuple(parse_match_rule(c) for c in contract) if contract else None,
            token_address=parse_address(token, "token") if token else None,
            lookback_days=days, block_time_s=block_time, display_decimals=decimals,
            pace_s=pace, concurrency=concurrency,
        )
        validate_rules(registry, settings.contracts)
    except (FatalConfigError, ConfigError) as e:
        raise _fail(str(e), 2)

    report = ConsoleReport(Console(), decimals=settings.display_decimals)

    async def main() -> ScanStats:
        rpc = HttpxRPC(settings.rpc_url, timeout_s=settings.timeout_s)
        try:
            head = await rpc.latest_block()
            block_range = resolve_range(head, settings.lookback_days, settings.block_time_s,
                                        from_block=from_block, to_block=to_block)
            logger.info("head=%d, scanning %d blocks", head, block_range.span())
            return await scan_blocks(
                rpc=rpc, registry=registry, block_range=block_range,
                match_rules=settings.contracts, token_address=settings.token_address,
                report=report, pace_s=settings.pace_s, concurrency=settings.concurrency,
                progress_every=settings.progress_every,
            )
        finally:
            await rpc.aclose()

    try:
        asyncio.run(main())
    except RPCError as e:
        raise _fail(str(e), 1)
    except ValueError as e:
        raise _fail(str(e), 2)

@app.command()
def signatures():
    """List the registered call signatures and the Transfer topic."""
    try:
        registry = default_registry()
    except FatalConfigError as e:
        raise _fail(str(e), 2)
    console = Console()
    for sig in registry.signatures():
        args = ", ".join(f"{a.type} {a.name}" for a in sig.argument_schema)
        console.print(f"[bold]{hex0x(sig.selector)}[/]  {sig.name}({args})", highlight=False, soft_wrap=True)
    console.print(f"Transfer topic: {hex0x(registry.transfer_topic)}", highlight=False, soft_wrap=True)

@app.command()
def decode(
    input_hex: str = typer.Argument(..., help="Raw call input (0x-prefixed hex)"),
    decimals: int = typer.Option(DEFAULT_DECIMALS, "--decimals", help="Fixed display scale of amounts"),
):
    """Decode a raw call input offline and print it the way `scan` does."""
    try:
        registry = default_registry()
        data = hex_to_bytes(input_hex)
        call = decode_input(registry, data)
    except FatalConfigError as e:
        raise _fail(str(e), 2)
    except (DecodeError, ValueError) as e:
        raise _fail(str(e), 1)
    typer.echo(format_call(call, decimals))


if __name__ == "__main__":
    app()
