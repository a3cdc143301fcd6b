"""
Command line interface for travel rain-risk reports.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import AppConfig, ConfigError, Destination, Itinerary, get_destination, load_config
from .errors import MalformedJsonError, SchemaValidationError, TripcastError
from .llm import ChatTurn, build_day_context, build_repair_prompt, resolve_llm_settings, send_chat_message
from .pipeline import RiskReportResult, generate_travel_risk_report, summarize_day
from .risk import RiskLevel

console = Console()
app = typer.Typer(help="Generate AI-assisted daily rain-risk reports for a trip.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]

_RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.EXTREME: "bold magenta",
}


def _configure_logging(level_name: str) -> None:
    env_override = os.getenv("TRIPCAST_LOG_LEVEL")
    level_str = (env_override or level_name or "warning").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "WARNING"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_config_path(value: Optional[Path]) -> Optional[Path]:
    """Ensure config path exists and return absolute path."""
    if value is None:
        return None
    resolved = value.expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _load_config_or_exit(path: Optional[Path]) -> AppConfig:
    if path is None:
        return AppConfig()
    try:
        return load_config(path)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _resolve_destination_or_exit(destination_id: str, app_config: AppConfig) -> Destination:
    try:
        return get_destination(destination_id, app_config)
    except TripcastError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _build_itinerary(target: Destination, start_date: str, end_date: str) -> Itinerary:
    try:
        return Itinerary(destination_id=target.id, start_date=start_date, end_date=end_date)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _print_report(result: RiskReportResult, display_name: str) -> None:
    report = result.report
    table = Table(title=f"Rain risk for {display_name} ({report.timezone})")
    table.add_column("Date")
    table.add_column("Risk")
    table.add_column("Rain %", justify="right")
    table.add_column("Rain mm", justify="right")
    table.add_column("Temp °C", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Advice", overflow="fold")

    forecasts = {item.date: item for item in result.forecast_days}
    for day in report.days:
        forecast = forecasts.get(day.date)
        probability = "-"
        temperature = "-"
        if forecast is not None:
            probability = f"{forecast.precip_probability_day or 0}/{forecast.precip_probability_night or 0}"
            if forecast.temp_min_c is not None and forecast.temp_max_c is not None:
                temperature = f"{forecast.temp_min_c:.0f}–{forecast.temp_max_c:.0f}"
        rain = "-"
        if day.expected_rain_mm_range is not None:
            rain = f"{day.expected_rain_mm_range.min:g}–{day.expected_rain_mm_range.max:g}"
        style = _RISK_STYLES[day.risk_level]
        table.add_row(
            day.date,
            f"[{style}]{day.risk_level.value}[/]",
            probability,
            rain,
            temperature,
            f"{day.confidence:.0%}",
            day.advice,
        )
    console.print(table)

    if result.hourly:
        hourly = Table(title="Next hours")
        hourly.add_column("Time")
        hourly.add_column("Temp °C", justify="right")
        hourly.add_column("Rain %", justify="right")
        hourly.add_column("Conditions")
        for hour in result.hourly:
            hourly.add_row(
                f"{hour.date} {hour.local_time}",
                "-" if hour.temperature_c is None else f"{hour.temperature_c:.0f}",
                "-" if hour.precip_probability is None else str(hour.precip_probability),
                hour.icon_phrase or "",
            )
        console.print(hourly)

    if result.corrections:
        console.print(f"[dim]{len(result.corrections)} model value(s) corrected against forecast data.[/]")
    console.print(f"[dim]Model {report.model_version} · generated {report.generated_at}[/]")


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show tripcast version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]tripcast[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            "[bold yellow]tripcast[/] is ready. Run [cyan]tripcast report dubai 2024-01-10 2024-01-12[/] "
            "to analyse a trip."
        )


@app.command()
def destinations(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML config file with extra [[destination]] blocks.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    List the destinations reports can be generated for.
    """
    app_config = _load_config_or_exit(config)
    table = Table(title="Destinations")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Country")
    table.add_column("Timezone")
    table.add_column("Location key")
    for item in app_config.all_destinations():
        table.add_row(item.id, item.display_name, item.country_code, item.timezone, item.location_key)
    console.print(table)


@app.command()
def report(
    destination: str = typer.Argument(..., help="Destination id (see `tripcast destinations`)."),
    start_date: str = typer.Argument(..., help="First trip day, YYYY-MM-DD."),
    end_date: str = typer.Argument(..., help="Last trip day, YYYY-MM-DD."),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML config file.",
        callback=_resolve_config_path,
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the report JSON with its forecast days and hourly data instead of tables.",
    ),
    hourly: Optional[bool] = typer.Option(
        None,
        "--hourly/--no-hourly",
        help="Fetch the 12-hour hourly forecast (defaults to the config setting).",
    ),
    raw_output: Optional[Path] = typer.Option(
        None,
        "--raw-output",
        help="Where to save the model output when it fails validation.",
    ),
) -> None:
    """
    Fetch forecasts, ask the model for a rain-risk analysis and print the corrected report.

    Errors are printed and the command exits with code 1; re-run it to try again.
    """
    app_config = _load_config_or_exit(config)
    target = _resolve_destination_or_exit(destination, app_config)
    itinerary = _build_itinerary(target, start_date, end_date)

    try:
        result = generate_travel_risk_report(target, itinerary, config=app_config, include_hourly=hourly)
    except (MalformedJsonError, SchemaValidationError) as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        if raw_output is not None and exc.raw_text:
            raw_output.write_text(exc.raw_text, encoding="utf-8")
            console.print(f"[dim]Model output saved to {raw_output}; `tripcast repair-prompt {raw_output}` builds a corrective request.[/]")
        raise typer.Exit(code=1) from exc
    except TripcastError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    _print_report(result, target.display_name)


@app.command("repair-prompt")
def repair_prompt(
    output_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File holding the bad model output."),
) -> None:
    """
    Print a corrective instruction for a model output that failed validation.
    """
    bad_output = output_file.read_text(encoding="utf-8")
    typer.echo(build_repair_prompt(bad_output))


@app.command()
def summary(
    destination: str = typer.Argument(..., help="Destination id (see `tripcast destinations`)."),
    day: str = typer.Argument(..., help="Day to summarize, YYYY-MM-DD."),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML config file.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    Print a short plain-language forecast summary for one day.
    """
    app_config = _load_config_or_exit(config)
    target = _resolve_destination_or_exit(destination, app_config)
    _build_itinerary(target, day, day)

    try:
        result = summarize_day(target, day, config=app_config)
    except TripcastError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    facts = result.facts
    console.print(f"[bold]{target.display_name} · {facts.date}[/]")
    if facts.rain_window:
        console.print(f"[dim]Rain window {facts.rain_window}[/]")
    console.print(result.summary)


@app.command()
def chat(
    destination: str = typer.Argument(..., help="Destination id (see `tripcast destinations`)."),
    day: str = typer.Argument(..., help="Trip day to ask about, YYYY-MM-DD."),
    question: Optional[List[str]] = typer.Option(
        None,
        "--question",
        "-q",
        help="Ask this question instead of prompting; repeat for a scripted conversation.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML config file.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    Assess one day, then answer follow-up questions about it.

    Without --question the command prompts until an empty line or "exit".
    """
    app_config = _load_config_or_exit(config)
    target = _resolve_destination_or_exit(destination, app_config)
    itinerary = _build_itinerary(target, day, day)

    try:
        result = generate_travel_risk_report(target, itinerary, config=app_config, include_hourly=False)
        if not result.report.days:
            raise TripcastError(f"The model returned no assessment for {day}.")
        settings = resolve_llm_settings(app_config)
    except TripcastError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    assessed = result.report.days[0]
    forecast = next((item for item in result.forecast_days if item.date == assessed.date), None)
    context = build_day_context(target.display_name, assessed, forecast)
    style = _RISK_STYLES[assessed.risk_level]
    console.print(f"[{style}]{assessed.risk_level.value}[/] {assessed.advice}")

    history: List[ChatTurn] = []
    scripted = list(question or [])
    while True:
        if scripted:
            message = scripted.pop(0)
        elif question:
            break
        else:
            message = typer.prompt("You", default="", show_default=False).strip()
            if message.lower() in {"", "exit", "quit"}:
                break
        try:
            answer = send_chat_message(message, context, history, settings)
        except TripcastError as exc:
            console.print(f"[bold red]Error:[/] {exc}")
            raise typer.Exit(code=1) from exc
        history.extend([ChatTurn(role="user", content=message), ChatTurn(role="assistant", content=answer)])
        console.print(f"[cyan]Assistant:[/] {answer}")


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
