"""Typer CLI for the Bridge Planner."""

from __future__ import annotations

import datetime
import json
import logging
import pathlib
import sys

import typer

from bridgeplan.calendar_days import Holiday
from bridgeplan.config import (
    MAX_YEAR,
    MIN_YEAR,
    ConfigError,
    PlannerConfig,
    PlannerSettings,
    load_config,
)
from bridgeplan.holidays import (
    HolidayDataError,
    JsonHolidaySource,
    parse_holiday_arg,
    public_holidays,
)
from bridgeplan.optimizer import (
    BridgePlanner,
    PlannerLimitError,
    VacationPlan,
    candidate_to_dict,
    format_calendar_view,
    format_plan,
    plan_to_dict,
)

app = typer.Typer(
    name="bridgeplan",
    help="Bridge Planner: spend a PTO budget on the workdays between weekends "
    "and holidays to get the most contiguous time off in a year.",
    add_completion=False,
)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def _resolve_year(year: int | None, configured: int | None = None) -> int:
    if year is not None:
        return year
    if configured is not None:
        return configured
    return datetime.date.today().year


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


def _load(config: str | None) -> PlannerConfig:
    if config is None:
        return PlannerConfig()
    try:
        return load_config(config)
    except ConfigError as exc:
        raise _fail(str(exc)) from None


def _collect_holidays(
    year: int,
    holidays_file: pathlib.Path | None,
    country: str | None,
    extra: list[str] | None,
    configured: tuple[Holiday, ...] = (),
) -> list[Holiday]:
    """Gather public holidays for *year* from a file, config and ``--holiday`` values."""
    records: list[Holiday] = list(configured)

    if holidays_file is not None:
        if not country:
            raise _fail("--country is required together with --holidays-file.")
        try:
            source = JsonHolidaySource(holidays_file)
            records.extend(source(country, year))
        except KeyError as exc:
            raise _fail(exc.args[0]) from None
        except HolidayDataError as exc:
            raise _fail(str(exc)) from None

    for value in extra or []:
        try:
            records.append(parse_holiday_arg(value))
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from None

    # One record per (date, name)
    unique = {(h.date, h.name): h for h in records}
    return public_holidays(unique.values(), year)


def _merge_settings(
    base: PlannerSettings,
    min_length: int | None,
    max_pto_per_vacation: int | None,
) -> PlannerSettings:
    overrides: dict[str, int] = {}
    if min_length is not None:
        overrides["min_desired_length"] = min_length
    if max_pto_per_vacation is not None:
        overrides["max_pto_per_candidate"] = max_pto_per_vacation
    return base._replace(**overrides)


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

YEAR_OPTION = typer.Option(
    None,
    "--year",
    "-y",
    help="Target year. Defaults to the current year.",
    min=MIN_YEAR,
    max=MAX_YEAR,
)
BUDGET_OPTION = typer.Option(
    None, "--budget", "-b", help="Number of PTO days available for the year."
)
HOLIDAYS_FILE_OPTION = typer.Option(
    None, "--holidays-file", help="JSON file with holidays keyed by country and year."
)
COUNTRY_OPTION = typer.Option(
    None, "--country", "-c", help="Country code to look up in --holidays-file."
)
HOLIDAY_OPTION = typer.Option(
    None, "--holiday", "-H", help="Extra public holiday, YYYY-MM-DD[=Name]. Repeatable."
)
MAX_PTO_OPTION = typer.Option(
    None,
    "--max-pto-per-vacation",
    help="Most PTO days a single vacation may use (default 10).",
    min=0,
)
CONFIG_OPTION = typer.Option(None, "--config", help="Path to a JSON config file.")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr.")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def optimize(
    year: int | None = YEAR_OPTION,
    budget: int | None = BUDGET_OPTION,
    holidays_file: pathlib.Path | None = HOLIDAYS_FILE_OPTION,
    country: str | None = COUNTRY_OPTION,
    holiday: list[str] | None = HOLIDAY_OPTION,  # noqa: B008
    min_length: int | None = typer.Option(
        None,
        "--min-length",
        help="Vacations shorter than this many days are de-prioritised (default 4).",
        min=1,
    ),
    max_pto_per_vacation: int | None = MAX_PTO_OPTION,
    calendar: bool = typer.Option(
        True,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON.",
    ),
    config: str | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Find the set of vacations giving the most days off for your PTO."""
    _setup_logging(verbose)
    cfg = _load(config)

    resolved_budget = budget if budget is not None else cfg.budget
    if resolved_budget is None:
        raise _fail("--budget is required (or set 'budget' in --config).")

    resolved_year = _resolve_year(year, cfg.year)
    settings = _merge_settings(cfg.settings, min_length, max_pto_per_vacation)
    holidays = _collect_holidays(
        resolved_year,
        holidays_file if holidays_file is not None else cfg.holidays_file,
        country if country is not None else cfg.country,
        holiday,
        cfg.holidays,
    )

    try:
        planner = BridgePlanner(resolved_year, resolved_budget, holidays, settings)
        plan = planner.optimize()
    except PlannerLimitError as exc:
        raise _fail(str(exc)) from None

    if output_json:
        output = plan_to_dict(plan)
        output["holidays"] = [{"date": h.date.isoformat(), "name": h.name} for h in holidays]
        json.dump(output, sys.stdout, indent=2)
        typer.echo()
    else:
        _print_text(plan, planner, holidays, calendar)


def _print_text(
    plan: VacationPlan,
    planner: BridgePlanner,
    holidays: list[Holiday],
    show_calendar: bool,
) -> None:
    w = 64
    typer.echo("=" * w)
    typer.echo("  BRIDGE PLANNER")
    typer.echo("=" * w)
    typer.echo(f"  Year:             {plan.year}")
    typer.echo(f"  PTO budget:       {plan.pto_budget} days")
    typer.echo(f"  Public holidays:  {len(holidays)}")
    typer.echo()
    for h in holidays:
        typer.echo(f"    {h.date.strftime('%a, %b %d'):>12}  {h.name}")

    typer.echo(format_plan(plan, planner.settings))
    if show_calendar:
        typer.echo(format_calendar_view(plan, planner.calendar))


@app.command()
def candidates(
    year: int | None = YEAR_OPTION,
    budget: int | None = BUDGET_OPTION,
    holidays_file: pathlib.Path | None = HOLIDAYS_FILE_OPTION,
    country: str | None = COUNTRY_OPTION,
    holiday: list[str] | None = HOLIDAY_OPTION,  # noqa: B008
    min_length: int = typer.Option(
        1, "--min-length", help="Only list candidates at least this many days long.", min=1
    ),
    max_pto_per_vacation: int | None = MAX_PTO_OPTION,
    output_json: bool = typer.Option(False, "--json", help="Output candidates as JSON."),
    config: str | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List every bridge candidate the planner considers."""
    _setup_logging(verbose)
    cfg = _load(config)

    resolved_budget = budget if budget is not None else (cfg.budget or 0)
    resolved_year = _resolve_year(year, cfg.year)
    settings = _merge_settings(cfg.settings, None, max_pto_per_vacation)
    holidays = _collect_holidays(
        resolved_year,
        holidays_file if holidays_file is not None else cfg.holidays_file,
        country if country is not None else cfg.country,
        holiday,
        cfg.holidays,
    )

    try:
        planner = BridgePlanner(resolved_year, resolved_budget, holidays, settings)
        found = planner.candidates()
    except PlannerLimitError as exc:
        raise _fail(str(exc)) from None

    shown = sorted(
        (c for c in found if c.total_days >= min_length),
        key=lambda c: (c.start_date, c.end_date),
    )

    if output_json:
        json.dump(
            {
                "year": resolved_year,
                "pto_per_vacation": planner.pto_cap,
                "candidates": [candidate_to_dict(c) for c in shown],
            },
            sys.stdout,
            indent=2,
        )
        typer.echo()
        return

    typer.echo(f"  {len(shown)} candidates for {resolved_year} (up to {planner.pto_cap} PTO each)")
    typer.echo()
    for c in shown:
        label = f"{c.start_date.strftime('%a, %b %d')} -> {c.end_date.strftime('%a, %b %d')}"
        extra = f"  [{', '.join(c.holiday_names)}]" if c.holidays else ""
        typer.echo(f"    {label}  {c.total_days:>2} days  {c.pto_used:>2} PTO{extra}")


@app.command()
def holidays(
    holidays_file: pathlib.Path = typer.Option(
        ..., "--holidays-file", help="JSON file with holidays keyed by country and year."
    ),
    country: str = typer.Option(..., "--country", "-c", help="Country code to list."),
    year: int | None = YEAR_OPTION,
) -> None:
    """List the public holidays of a country from a holiday file."""
    resolved_year = _resolve_year(year)
    found = _collect_holidays(resolved_year, holidays_file, country, None)

    typer.echo(f"  {country.upper()} public holidays, {resolved_year}")
    typer.echo()
    if not found:
        typer.echo("    (none)")
    for h in found:
        typer.echo(f"    {h.date.strftime('%a, %b %d'):>12}  {h.name}")


@app.command()
def countries(
    holidays_file: pathlib.Path = typer.Option(
        ..., "--holidays-file", help="JSON file with holidays keyed by country and year."
    ),
) -> None:
    """List the country codes available in a holiday file."""
    try:
        source = JsonHolidaySource(holidays_file)
    except HolidayDataError as exc:
        raise _fail(str(exc)) from None

    codes = source.countries()
    typer.echo(f"  {len(codes)} countries in {holidays_file.name}")
    typer.echo()
    for code in codes:
        typer.echo(f"    {code}")


def main() -> None:
    """Entry point for the CLI."""
    app()
