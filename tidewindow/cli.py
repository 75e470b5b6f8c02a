"""운영자용 CLI입니다. / Operator-facing CLI."""

from __future__ import annotations

import asyncio
import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from .config import AppConfig, load_app_config
from .planner.matcher import ActivityMatcher
from .planner.windows import ActivityWindow
from .reporting.markdown import build_report
from .tides.models import TideSample
from .tides.providers import create_tide_provider
from .weather.models import ForecastSummary
from .weather.providers import WeatherProvider, WeatherService, create_weather_provider

app = typer.Typer(help="Tide and weather activity planner")


def _build_matcher(config: AppConfig) -> ActivityMatcher:
    """매처를 생성합니다. / Build activity matcher."""

    providers: list[WeatherProvider] = []
    for name in config.provider_order:
        provider_settings = config.provider_by_name(name)
        providers.append(create_weather_provider(provider_settings))
    if config.tide_provider is None:
        raise typer.BadParameter("Config must name a tide_provider")
    tides = create_tide_provider(
        config.provider_by_name(config.tide_provider), config.location.tzinfo
    )
    return ActivityMatcher.from_config(config, WeatherService(providers), tides)


def _print_windows(windows: List[ActivityWindow], config: AppConfig) -> None:
    """활동 창을 출력합니다. / Print activity windows."""

    tz = config.location.tzinfo
    lines = [
        "Activity | Start | End | Hours | Wind (km/h)",
        "---------|-------|-----|-------|------------",
    ]
    for window in windows:
        wind = (
            f"{window.forecast.wind_speed_kmh:.1f}" if window.forecast else "n/a"
        )
        lines.append(
            f"{window.specification.name} | "
            f"{window.start.astimezone(tz):%H:%M} | "
            f"{window.end.astimezone(tz):%H:%M} | "
            f"{window.duration_hours} | {wind}"
        )
    typer.echo("\n".join(lines))


def _print_forecasts(summaries: List[ForecastSummary], config: AppConfig) -> None:
    """예보 요약을 출력합니다. / Print forecast summaries."""

    tz = config.location.tzinfo
    lines = [
        "Time | Temp (°C) | Wind (km/h) | Wind (kn) | Beaufort | Rain (mm)",
        "-----|-----------|-------------|-----------|----------|----------",
    ]
    for item in summaries:
        lines.append(
            f"{item.start.astimezone(tz):%H:%M} | "
            f"{item.temp_min_c:.1f}..{item.temp_max_c:.1f} | "
            f"{item.wind_speed_kmh:.1f} | {item.wind_speed_knots:.1f} | "
            f"{item.beaufort} {item.beaufort_label} | {item.precipitation_mm:.1f}"
        )
    typer.echo("\n".join(lines))


def _print_tides(tides: List[TideSample], config: AppConfig) -> None:
    """조석표를 출력합니다. / Print tide extrema."""

    tz = config.location.tzinfo
    for tide in tides:
        kind = "High" if tide.is_high else "Low "
        coefficient = "" if tide.coefficient is None else f" (coef {tide.coefficient})"
        typer.echo(
            f"{kind} {tide.timestamp.astimezone(tz):%H:%M} "
            f"{tide.height_m:.2f} m{coefficient}"
        )


def _ensure_outputs() -> None:
    """출력 디렉터리를 확인합니다. / Ensure output directories."""

    Path("outputs").mkdir(parents=True, exist_ok=True)


def _append_csv(windows: List[ActivityWindow]) -> None:
    """CSV를 갱신합니다. / Append CSV summary."""

    _ensure_outputs()
    csv_path = Path("outputs/activity_windows.csv")
    headers = ["activity", "start", "end", "hours", "tide_port"]
    write_header = not csv_path.exists()
    with csv_path.open("a", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        if write_header:
            writer.writerow(headers)
        for window in windows:
            writer.writerow(
                [
                    window.specification.name,
                    window.start.isoformat(),
                    window.end.isoformat(),
                    window.duration_hours,
                    window.tide.port_id if window.tide else "",
                ]
            )


@app.callback()
def configure(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    """로깅을 설정합니다. / Configure logging."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@app.command("activities")
def activities(
    day: str = typer.Option("today", help="today, today+N, dayN or ISO date"),
    report_dir: Path = typer.Option(Path("reports"), help="Report directory"),
) -> None:
    """활동 창을 계산합니다. / Compute activity windows."""

    config = load_app_config()
    matcher = _build_matcher(config)
    target = matcher.resolve(day)
    windows = asyncio.run(matcher.compute_activities(target))
    _print_windows(windows, config)
    report = build_report(windows, target, config, report_dir)
    typer.echo(f"\nReport saved to {report.path}")
    _append_csv(windows)


@app.command("forecasts")
def forecasts(
    day: str = typer.Option("today", help="today, today+N, dayN or ISO date"),
) -> None:
    """예보를 조회합니다. / Show normalized forecasts."""

    config = load_app_config()
    matcher = _build_matcher(config)
    summaries = asyncio.run(matcher.compute_forecasts(day))
    _print_forecasts(summaries, config)


@app.command("tides")
def tides(
    day: str = typer.Option("today", help="today, today+N, dayN or ISO date"),
) -> None:
    """조석표를 조회합니다. / Show the day's tide extrema."""

    config = load_app_config()
    matcher = _build_matcher(config)
    _print_tides(asyncio.run(matcher.day_tides(day)), config)


@app.command("tide-height")
def tide_height(
    when: Optional[datetime] = typer.Option(None, help="ISO timestamp, default now"),
) -> None:
    """수위를 추정합니다. / Estimate water height."""

    config = load_app_config()
    matcher = _build_matcher(config)
    moment = None
    if when is not None:
        moment = when if when.tzinfo else when.replace(tzinfo=config.location.tzinfo)
    height = asyncio.run(matcher.water_height_at(moment))
    typer.echo(f"{height:.2f} m")


def main() -> None:
    """CLI 엔트리 포인트입니다. / CLI entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI guard
    main()
