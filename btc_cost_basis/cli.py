"""Typer-based console interface for ``btc_cost_basis``.

Usage::

    btc-cost-basis <csv-file-path> [START_DATE]

Environment variables are loaded from a local ``.env`` with ``python-dotenv``
before any settings are resolved. Business logic lives in
:mod:`btc_cost_basis.pipeline` and the modules it composes; this module only
prints progress and the final report.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from .config import (
    AnalysisConfig,
    resolve_api_key,
    resolve_price_url,
    resolve_request_delay,
    resolve_timeout,
)
from .deposits import DATE
from .errors import LedgerReadError
from .logging_setup import configure_logging, get_logger
from .models import Record
from .pipeline import Stage, run_analysis
from .prices import PriceResolver
from .report import format_report

_logger = get_logger("btc_cost_basis.cli")

err_console = Console(stderr=True, highlight=False)


def _create_resolver() -> PriceResolver:
    return PriceResolver(
        resolve_price_url(),
        api_key=resolve_api_key(),
        timeout=resolve_timeout(),
    )


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    return typer.Exit(1)


_STAGE_MESSAGES: dict[str, str] = {
    "reading": "Reading CSV file...",
    "parsing": "Parsing transactions...",
    "filtering": "Filtering Bitcoin deposits...",
    "filtered": "Found {count} Bitcoin deposit transactions",
    "pricing": "Fetching Bitcoin prices for each transaction...",
}


def cmd_analyze(config: AnalysisConfig) -> int:
    """Run the analysis for ``config`` and print progress plus the report.

    Returns ``0`` for completed runs, including runs with nothing to report.
    Raises :class:`LedgerReadError` when the ledger cannot be read.
    """

    def _stage(stage: Stage, count: int) -> None:
        typer.echo(_STAGE_MESSAGES[stage].format(count=count))

    def _progress(record: Record, position: int, total: int) -> None:
        typer.echo(f"Fetching price for {record.get(DATE, '')} ({position}/{total})")

    with _create_resolver() as resolver:
        result = run_analysis(config, resolver, on_progress=_progress, on_stage=_stage)

    if not result.deposits:
        typer.echo("No Bitcoin deposits found matching the criteria.")
        return 0
    if result.summary is None:
        typer.echo("No price data could be retrieved for any transactions.")
        return 0

    typer.echo(format_report(result.summary, result.transactions, start_date=config.start_date))
    return 0


def _validate_delay(value: float | None) -> float | None:
    if value is not None and not math.isfinite(value):
        raise typer.BadParameter("must be a finite number of seconds")
    return value


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    add_completion=False,
    help=(
        "Compute historical cost-basis statistics for Bitcoin deposits in a "
        "wallet-exported CSV. Loads settings from a local .env before running."
    ),
)


@app.command()
def analyze(
    csv_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the wallet-exported transactions CSV",
            dir_okay=False,
            # Existence is reported by the handler with a friendlier message.
            exists=False,
        ),
    ],
    start_date: Annotated[
        datetime | None,
        typer.Argument(
            help="Only include deposits on or after this date (YYYY-MM-DD)",
            formats=["%Y-%m-%d"],
            show_default=False,
        ),
    ] = None,
    delay: Annotated[
        float | None,
        typer.Option(
            "--delay",
            min=0.0,
            callback=_validate_delay,
            help="Seconds to wait between price requests "
            "(default: BTC_COST_BASIS_REQUEST_DELAY or 3).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Logging level (default: BTC_COST_BASIS_LOG_LEVEL or INFO).",
        ),
    ] = None,
) -> None:
    """Analyze Bitcoin deposits and report average, median and weighted cost."""

    # Load environment from .env in CWD without overriding existing values
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level, fmt="%(levelname)s: %(message)s")

    if not csv_path.is_file():
        raise _fail(f"CSV file not found: {csv_path}")

    config = AnalysisConfig(
        csv_path=csv_path,
        start_date=start_date.replace(tzinfo=UTC) if start_date is not None else None,
        request_delay=resolve_request_delay(delay),
    )
    _logger.debug(
        "cli:analyze csv_path=%s start_date=%s delay=%.2f",
        config.csv_path,
        config.start_date.date().isoformat() if config.start_date else "-",
        config.request_delay,
    )

    try:
        code = cmd_analyze(config)
    except LedgerReadError as e:
        raise _fail(str(e)) from e
    raise typer.Exit(code)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()
