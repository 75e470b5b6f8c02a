"""마크다운 리포트 빌더입니다. / Markdown report builder."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Sequence

from ..base import FrozenModel
from ..config import AppConfig
from ..planner.windows import ActivityWindow
from ..units import beaufort_label


class MarkdownReport(FrozenModel):
    """마크다운 리포트 데이터입니다. / Markdown report data."""

    content: str
    path: Path


def _window_lines(window: ActivityWindow, config: AppConfig) -> list[str]:
    tz = config.location.tzinfo
    start = window.start.astimezone(tz)
    end = window.end.astimezone(tz)
    lines = [
        f"### {window.specification.name}",
        f"- Window: {start:%H:%M} → {end:%H:%M} ({window.duration_hours} h)",
        f"- Minimal Duration: {window.specification.minimal_duration_hours} h",
    ]
    if window.tide is not None:
        tide = window.tide
        lines.append(
            f"- Tide: high {tide.high_height_m:.2f} m at "
            f"{tide.high_time.astimezone(tz):%H:%M}, low {tide.low_height_m:.2f} m at "
            f"{tide.low_time.astimezone(tz):%H:%M} (range {tide.amplitude:.2f} m)"
        )
    if window.forecast is not None:
        forecast = window.forecast
        kmh = forecast.wind_speed_kmh
        lines.append(
            f"- Forecast: wind {kmh:.1f} km/h ({beaufort_label(kmh)}), "
            f"temp {forecast.temp_min_c:.1f}..{forecast.temp_max_c:.1f} °C, "
            f"rain {forecast.precipitation_mm:.1f} mm"
        )
    return lines


def format_markdown(
    windows: Sequence[ActivityWindow], day: date, config: AppConfig
) -> str:
    """마크다운 문자열을 만듭니다. / Build markdown string."""

    lines = [
        f"# Activity Report: {config.location.city_id} ({day.isoformat()})",
        "",
        "## Inputs",
        f"- Tide Port: {config.location.port_id}",
        f"- Timezone: {config.location.timezone}",
        (
            f"- Daytime: {config.daytime.start_hour:02d}:00 → "
            f"{config.daytime.end_hour:02d}:00"
        ),
        f"- Activities Evaluated: {len(config.activities)}",
        "",
        "## Windows",
    ]
    if not windows:
        lines.append("- No activity window found")
    for window in windows:
        lines.append("")
        lines.extend(_window_lines(window, config))
    return "\n".join(lines).strip() + "\n"


def build_report(
    windows: Sequence[ActivityWindow],
    day: date,
    config: AppConfig,
    directory: Path,
) -> MarkdownReport:
    """리포트를 생성합니다. / Build markdown report file."""

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"activities_{day:%Y%m%d}.md"
    content = format_markdown(windows, day, config)
    path.write_text(content, encoding="utf-8")
    return MarkdownReport(content=content, path=path)
