"""
tops-decoder CLI.

Commands:
- decode: Dump every message in a capture file
- summary: Count messages per type
- config: Generate or validate configuration
- version: Show version
"""

import json
import logging
import time
from enum import Enum
from itertools import islice
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..config import load_config, generate_default_config, TopsConfig
from ..core.errors import ConfigError, DecodeError
from ..decoder.stream import ON_ERROR_CHOICES
from ..formats.reader import TopsReader
from ..formats.records import OpaqueMessage, QuoteUpdate, SystemEvent, TradeReport


logger = logging.getLogger(__name__)

app = typer.Typer(
    name="tops-decoder",
    help="Decode TOPS market-data captures",
    add_completion=False,
)
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")

console = Console()


class OutputFormat(str, Enum):
    json = "json"
    table = "table"


def _setup(config_path: Optional[Path], log_level: Optional[str]) -> TopsConfig:
    try:
        cfg = load_config(config_path)
        if log_level:
            cfg.logging.level = log_level
        cfg.check()
    except ConfigError as e:
        console.print(f"[red]Invalid config:[/] {escape(str(e))}")
        raise typer.Exit(1)

    cfg.logging.apply()
    return cfg


def _resolve_on_error(cfg: TopsConfig, on_error: Optional[str]) -> str:
    on_error = on_error or cfg.decoder.on_error
    if on_error not in ON_ERROR_CHOICES:
        console.print(f"[red]Error:[/] --on-error must be one of {', '.join(ON_ERROR_CHOICES)}")
        raise typer.Exit(1)
    return on_error


def _table_row(msg) -> tuple:
    if isinstance(msg, QuoteUpdate):
        detail = (f"{msg.bid_size} @ {msg.bid_price:.4f} / "
                  f"{msg.ask_size} @ {msg.ask_price:.4f}")
        return msg.message_type.name, msg.timestamp.isoformat(), msg.to_dict()['symbol'], detail
    if isinstance(msg, TradeReport):
        detail = f"{msg.size} @ {msg.price:.4f} id={msg.id}"
        return msg.message_type.name, msg.timestamp.isoformat(), msg.to_dict()['symbol'], detail
    if isinstance(msg, SystemEvent):
        return msg.message_type.name, msg.timestamp.isoformat(), "", msg.kind.name
    if isinstance(msg, OpaqueMessage):
        return msg.message_type.name, "", "", ""
    raise TypeError(f"Unexpected record: {type(msg).__name__}")


# === DECODE COMMAND ===

@app.command()
def decode(
    capture: Path = typer.Argument(..., help="Capture file of concatenated messages", exists=True),
    format: OutputFormat = typer.Option(OutputFormat.json, "-f", "--format"),
    limit: Optional[int] = typer.Option(None, "-n", "--limit", help="Stop after N messages"),
    on_error: Optional[str] = typer.Option(None, "--on-error", help="raise | skip"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
    log_level: Optional[str] = typer.Option(None, "--log-level"),
):
    """Decode a capture file and print one record per message."""
    cfg = _setup(config_path, log_level)

    table = None
    if format == OutputFormat.table:
        table = Table(title=str(capture))
        table.add_column("Type")
        table.add_column("Timestamp")
        table.add_column("Symbol")
        table.add_column("Detail")

    messages = TopsReader.read_path(
        capture,
        symbol=cfg.decoder.symbol_factory(),
        chunk_size=cfg.decoder.chunk_size,
        on_error=_resolve_on_error(cfg, on_error),
    )
    if limit is not None:
        messages = islice(messages, max(limit, 0))

    count = 0
    try:
        for msg in messages:
            if table is not None:
                table.add_row(*_table_row(msg))
            else:
                typer.echo(json.dumps(msg.to_dict()))
            count += 1
    except DecodeError as e:
        console.print(f"[red]Decode error after {count} messages:[/] {escape(str(e))}")
        raise typer.Exit(1)

    if table is not None:
        console.print(table)


# === SUMMARY COMMAND ===

@app.command()
def summary(
    capture: Path = typer.Argument(..., help="Capture file of concatenated messages", exists=True),
    on_error: Optional[str] = typer.Option(None, "--on-error", help="raise | skip"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
    log_level: Optional[str] = typer.Option(None, "--log-level"),
):
    """Count messages per type in a capture file."""
    cfg = _setup(config_path, log_level)

    start = time.time()
    try:
        stats = TopsReader.summarize(
            capture,
            symbol=cfg.decoder.symbol_factory(),
            chunk_size=cfg.decoder.chunk_size,
            on_error=_resolve_on_error(cfg, on_error),
        )
    except DecodeError as e:
        console.print(f"[red]Decode error:[/] {escape(str(e))}")
        raise typer.Exit(1)
    duration = time.time() - start
    logger.info(f"Decoded {stats.total_messages} messages in {duration:.2f}s, "
                f"skipped {stats.bytes_skipped} bytes")

    if as_json:
        typer.echo(json.dumps(stats.to_dict(), indent=2))
        return

    table = Table(title="Summary")
    table.add_column("Message Type")
    table.add_column("Count", justify="right")
    for name, n in sorted(stats.messages.items()):
        table.add_row(name, f"{n:,}")
    table.add_row("Total", f"{stats.total_messages:,}")
    table.add_row("Bytes skipped", f"{stats.bytes_skipped:,}")
    if duration > 0:
        table.add_row("Throughput", f"{stats.total_messages / duration:,.0f}/s")
    console.print(table)


# === CONFIG COMMANDS ===

@config_app.command("init")
def config_init(
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to file"),
):
    """Print (or write) a default configuration file."""
    text = generate_default_config()
    if output:
        output.write_text(text)
        console.print(f"[green]Written to:[/] {output}")
    else:
        typer.echo(text)


@config_app.command("validate")
def config_validate(
    path: Path = typer.Argument(..., help="Config file", exists=True),
):
    """Validate a configuration file."""
    try:
        cfg = TopsConfig.load(path)
    except ConfigError as e:
        console.print(f"[red]Invalid:[/] {escape(str(e))}")
        raise typer.Exit(1)

    errors = cfg.validate()
    if errors:
        for err in errors:
            console.print(f"[red]✗[/] {escape(err)}")
        raise typer.Exit(1)

    console.print("[green]✓ Config is valid[/]")


# === VERSION COMMAND ===

@app.command()
def version():
    """Show version."""
    typer.echo(f"tops-decoder {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
