from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_settings, Settings
from .mediation.context import MessageContext
from .mediation.transform import TransformMediator, MediationOutcome
from .obs.metrics import start_metrics_server
from .relay.client import ClassificationClient
from .util.logger import configure_logging

app = typer.Typer(add_completion=False)
console = Console()

def _settings(api_url: Optional[str], model: Optional[str], log_level: Optional[str], json_logs: bool) -> Settings:
    s = load_settings().with_overrides(api_url=api_url, model=model, log_level=log_level)
    configure_logging(s.log_level, json_logs=json_logs)
    return s

def _read_payload(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")

def _render_context(ctx: MessageContext, outcome: MediationOutcome) -> None:
    color = "green" if outcome.succeeded else "red"
    console.print(f"[{color}]Outcome:[/{color}] {outcome.value}")

    table = Table(title="Message Context", show_header=True, header_style="bold cyan")
    table.add_column("Scope", style="yellow")
    table.add_column("Property", style="yellow")
    table.add_column("Value", style="green")
    for name, value in ctx.properties.items():
        text = value if isinstance(value, str) else repr(value)
        table.add_row("message", name, escape(text[:120]))
    for name, value in ctx.transport_properties.items():
        table.add_row("transport", name, escape(str(value)))
    console.print(table)

    body = ctx.json_payload_to_string()
    if body is not None:
        console.print("[bold]Body:[/bold]")
        try:
            console.print_json(body)
        except json.JSONDecodeError:
            console.print(body, markup=False)

@app.command()
def mediate(
    payload: str = typer.Argument(..., help="Path to a JSON request body, or - for stdin"),
    api_url: str = typer.Option(None, "--api-url", help="Override TRANSFORM_API_URL"),
    model: str = typer.Option(None, "--model", help="Override TRANSFORM_MODEL"),
    metrics: bool = typer.Option(False, "--metrics/--no-metrics", help="Expose Prometheus metrics while running"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
    log_level: str = typer.Option(None, "--log-level", help="Override TRANSFORM_LOG_LEVEL"),
):
    """Run one mediation pass over a request body and show the rewritten context."""
    s = _settings(api_url, model, log_level, json_logs)
    if metrics:
        start_metrics_server(s.metrics_host, s.metrics_port)
        console.print(f"[green]Metrics:[/green] http://{s.metrics_host}:{s.metrics_port}/metrics")

    ctx = MessageContext(_read_payload(payload))
    mediator = TransformMediator(s)
    mediator.init()
    try:
        outcome = mediator.process(ctx)
    finally:
        mediator.destroy()

    _render_context(ctx, outcome)
    if not outcome.succeeded:
        raise typer.Exit(code=1)

@app.command()
def classify(
    prompt: str = typer.Argument(..., help="User prompt"),
    system: str = typer.Option(None, "--system", help="Optional system prompt"),
    raw: bool = typer.Option(False, "--raw", help="Print the full JSON response instead of the text"),
    api_url: str = typer.Option(None, "--api-url", help="Override TRANSFORM_API_URL"),
    model: str = typer.Option(None, "--model", help="Override TRANSFORM_MODEL"),
    log_level: str = typer.Option(None, "--log-level", help="Override TRANSFORM_LOG_LEVEL"),
):
    """Send a single prompt to the upstream service."""
    s = _settings(api_url, model, log_level, False)
    with ClassificationClient.from_settings(s) as client:
        if raw:
            out = (client.get_full_json_response_with_system_prompt(system, prompt) if system
                   else client.get_full_json_response(prompt))
        else:
            out = (client.classify_request_with_system_prompt(system, prompt) if system
                   else client.classify_request(prompt))

    if out is None:
        console.print("[red]No response from upstream service[/red]")
        raise typer.Exit(code=1)
    if raw:
        try:
            console.print_json(out)
        except json.JSONDecodeError:
            console.print(out, markup=False)
    else:
        console.print(out, markup=False)

@app.command()
def health(
    api_url: str = typer.Option(None, "--api-url", help="Override TRANSFORM_API_URL"),
    log_level: str = typer.Option(None, "--log-level", help="Override TRANSFORM_LOG_LEVEL"),
):
    """Check whether the upstream service answers a minimal request."""
    s = _settings(api_url, None, log_level, False)
    with ClassificationClient.from_settings(s) as client:
        ok = client.is_service_available()
    if ok:
        console.print(f"[green]✓ Available:[/green] {s.api_url} ({s.model})")
        return
    console.print(f"[red]✗ Unavailable:[/red] {s.api_url}")
    raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
