"""요청 날짜 해석과 주간 필터입니다. / Day resolution and daytime filtering."""

from __future__ import annotations

import re
from datetime import date, timedelta, tzinfo
from typing import Iterable, List

from ..config import DaytimeSettings
from ..weather.models import ForecastSample

_OFFSET_PATTERN = re.compile(r"^(?:today\+|day|\+)(\d+)$")


def resolve_day(argument: str, today: date) -> date:
    """날짜 인자를 해석합니다. / Resolve a day argument.

    Accepts ``today``, ``today+N``, ``dayN``, ``+N`` or an ISO date.
    """

    text = argument.strip().lower()
    if text == "today":
        return today
    match = _OFFSET_PATTERN.match(text)
    if match:
        return today + timedelta(days=int(match.group(1)))
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Unrecognised day argument: {argument!r}") from exc


def daytime_samples(
    samples: Iterable[ForecastSample],
    day: date,
    daytime: DaytimeSettings,
    tz: tzinfo,
) -> List[ForecastSample]:
    """주간 예보만 남깁니다. / Keep the day's daytime samples, time-ordered."""

    selected = []
    for sample in samples:
        local = sample.timestamp.astimezone(tz)
        if local.date() == day and daytime.contains(local.hour):
            selected.append(sample)
    return sorted(selected, key=lambda sample: sample.timestamp)
