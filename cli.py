import logging
import os
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from notifyhub import (
    DispatchRecorder,
    DispatchReport,
    NotificationHub,
    get_default_config,
)
from notifyhub.report import handler_name

app = typer.Typer(add_completion=False)
console = Console()

DEFAULT_RECORD_DIR = os.environ.get("NOTIFYHUB_RECORD_DIR") or None


# -------------------------
# Common helpers
# -------------------------
def _setup_logging(verbose: bool) -> None:
    """Route library log records through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _print_report(report: DispatchReport) -> None:
    """Pretty-print a dispatch report."""
    status = "[green]ok[/green]" if report.ok else "[red]partial failure[/red]"
    console.print(
        Panel.fit(
            f"[bold]Dispatch[/bold]  kind=[cyan]{report.kind}[/cyan]  "
            f"handlers=[magenta]{len(report)}[/magenta]  status={status}"
        )
    )

    t = Table(title="Outcomes", show_lines=True)
    t.add_column("index", justify="right")
    t.add_column("subscription", justify="right")
    t.add_column("handler")
    t.add_column("status")
    t.add_column("error")
    t.add_column("duration_ms", justify="right")

    for o in report:
        t.add_row(
            str(o.index),
            str(o.subscription.id),
            handler_name(o.handler),
            "[green]success[/green]" if o.ok else "[red]failure[/red]",
            "-" if o.error is None else f"{type(o.error).__name__}: {o.error}",
            f"{o.duration * 1000:.3f}",
        )
    console.print(t)


# -------------------------
# Commands
# -------------------------
@app.command()
def demo(
    kind: str = typer.Option("x", help="Event kind to publish."),
    payload: str = typer.Option("hello", help="Payload forwarded to handlers."),
    record_dir: Optional[Path] = typer.Option(
        DEFAULT_RECORD_DIR, help="Append dispatch summaries as JSONL here."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print summary JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Subscribe a logging handler and a failing handler, then publish once."""
    _setup_logging(verbose)

    config = get_default_config()
    # the failure is shown in the report table already
    config.log_failures = verbose
    recorder = DispatchRecorder(record_dir) if record_dir is not None else None
    hub = NotificationHub(config=config, recorder=recorder)

    log: List[Any] = []

    def record_payload(p: Any) -> None:
        log.append(p)

    def reject_payload(p: Any) -> None:
        raise ValueError(f"cannot handle {p!r}")

    hub.subscribe(kind, record_payload)
    hub.subscribe(kind, reject_payload)
    report = hub.publish(kind, payload)

    if as_json:
        console.print_json(report.summary().model_dump_json())
    else:
        _print_report(report)
        console.print(f"handler log: {log}", markup=False, highlight=False)

    if recorder is not None:
        console.print(f"[dim]recorded to {recorder.log_path(hub.name)}[/dim]")


@app.command("show-config")
def show_config() -> None:
    """Print the default hub configuration."""
    console.print_json(get_default_config().to_json())


if __name__ == "__main__":
    app()
