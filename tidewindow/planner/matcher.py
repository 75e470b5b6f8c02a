"""활동 창 매칭 엔진입니다. / Activity window matching engine."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, List, Optional, Sequence

from ..activity.constraints import ActivitySpecification
from ..config import AppConfig, DaytimeSettings, LocationSettings
from ..errors import TideDataUnavailableError, TideParseError
from ..tides.curve import TideCurveModel
from ..tides.finder import DEFAULT_STEP, TideWindowFinder
from ..tides.models import TideSample
from ..tides.providers import TideTableProvider
from ..weather.models import ForecastSample, ForecastSummary, summarize_forecast
from ..weather.providers import WeatherProvider
from .days import daytime_samples, resolve_day
from .windows import ActivityWindow, build_candidate_windows, nearest_sample

LOGGER = logging.getLogger("tidewindow.planner")


def match_specification(
    specification: ActivitySpecification,
    samples: Sequence[ForecastSample],
    finder: TideWindowFinder,
) -> List[ActivityWindow]:
    """단일 명세의 창을 계산합니다. / Compute the windows of one specification.

    A tide-refined window carries the high/low pair in effect at its
    midpoint. Raises ``TideDataUnavailableError`` when a tide-constrained
    window cannot be evaluated.
    """

    windows: List[ActivityWindow] = []
    for candidate in build_candidate_windows(samples, specification):
        window = candidate
        if specification.tide_height_m is not None:
            run = finder.find_longest_satisfying(
                candidate.start, candidate.end, specification.tide_height_m
            )
            if run is None:
                continue
            window = candidate.model_copy(
                update={
                    "start": run.start,
                    "end": run.end,
                    "tide": finder.model.context_at(
                        run.start + (run.end - run.start) / 2
                    ),
                }
            )
        if window.duration_hours < specification.minimal_duration_hours:
            LOGGER.debug(
                "window_too_short",
                extra={
                    "activity": specification.name,
                    "hours": window.duration_hours,
                    "required": specification.minimal_duration_hours,
                },
            )
            continue
        windows.append(
            window.model_copy(
                update={"forecast": nearest_sample(samples, window.start)}
            )
        )
    return windows


def match_day(
    specifications: Sequence[ActivitySpecification],
    samples: Sequence[ForecastSample],
    tides: Sequence[TideSample],
    step: timedelta = DEFAULT_STEP,
) -> List[ActivityWindow]:
    """하루 치 활동 창을 계산합니다. / Compute all activity windows of a day.

    ``samples`` are the day's daytime forecasts in time order; ``tides`` may
    include the neighbouring days' extrema.
    """

    finder = TideWindowFinder(TideCurveModel(tides), step)
    results: List[ActivityWindow] = []
    for specification in specifications:
        try:
            results.extend(match_specification(specification, samples, finder))
        except TideDataUnavailableError as exc:
            LOGGER.warning(
                "activity_skipped",
                extra={"activity": specification.name, "error": str(exc)},
            )
    return results


class ActivityMatcher:
    """제공자와 엔진을 조율합니다. / Orchestrate providers and engine."""

    def __init__(
        self,
        weather: WeatherProvider,
        tides: TideTableProvider,
        specifications: Sequence[ActivitySpecification],
        location: LocationSettings | None = None,
        daytime: DaytimeSettings | None = None,
        step: timedelta = DEFAULT_STEP,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.weather = weather
        self.tides = tides
        self.specifications = list(specifications)
        self.location = location or LocationSettings()
        self.daytime = daytime or DaytimeSettings()
        self.step = step
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        weather: WeatherProvider,
        tides: TideTableProvider,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "ActivityMatcher":
        """설정으로 매처를 만듭니다. / Build a matcher from configuration."""

        return cls(
            weather=weather,
            tides=tides,
            specifications=config.activities,
            location=config.location,
            daytime=config.daytime,
            step=config.scan.step,
            clock=clock,
        )

    @property
    def tz(self) -> tzinfo:
        """위치 시간대입니다. / Location timezone."""

        return self.location.tzinfo

    def now(self) -> datetime:
        """현재 시각입니다. / Current local time."""

        if self._clock is not None:
            return self._clock().astimezone(self.tz)
        return datetime.now(self.tz)

    def resolve(self, day: str | date) -> date:
        """요청 날짜를 해석합니다. / Resolve the requested day."""

        if isinstance(day, date):
            return day
        return resolve_day(day, self.now().date())

    async def _day_forecasts(self, target: date) -> List[ForecastSample]:
        samples = await self.weather.forecast_for_city(self.location.city_id)
        return daytime_samples(samples, target, self.daytime, self.tz)

    async def _tide_span(self, target: date) -> List[TideSample]:
        """전후일 포함 조석표입니다. / Tides of the day and its neighbours."""

        days = [target - timedelta(days=1), target, target + timedelta(days=1)]
        fetched = await asyncio.gather(
            *(self.tides.day_tides(self.location.port_id, day) for day in days),
            return_exceptions=True,
        )
        span: List[TideSample] = []
        for day, result in zip(days, fetched):
            if isinstance(result, TideParseError):
                LOGGER.warning(
                    "tide_parse_failed",
                    extra={"day": day.isoformat(), "error": str(result)},
                )
                if day == target:
                    return []
                continue
            if isinstance(result, BaseException):
                raise result
            span.extend(result)
        return span

    async def compute_activities(self, day: str | date) -> List[ActivityWindow]:
        """요청 날짜의 활동 창입니다. / Activity windows for the requested day."""

        target = self.resolve(day)
        if any(spec.has_tide_constraint for spec in self.specifications):
            samples, tides = await asyncio.gather(
                self._day_forecasts(target), self._tide_span(target)
            )
        else:
            samples, tides = await self._day_forecasts(target), []
        LOGGER.info(
            "activities_compute",
            extra={
                "day": target.isoformat(),
                "samples": len(samples),
                "tides": len(tides),
            },
        )
        return match_day(self.specifications, samples, tides, self.step)

    async def compute_forecasts(self, day: str | date) -> List[ForecastSummary]:
        """요청 날짜의 예보 요약입니다. / Forecast summaries for the day."""

        target = self.resolve(day)
        samples = await self.weather.forecast_for_city(self.location.city_id)
        return [
            summarize_forecast(sample)
            for sample in samples
            if sample.timestamp.astimezone(self.tz).date() == target
        ]

    async def day_tides(self, day: str | date) -> List[TideSample]:
        """요청 날짜의 조석표입니다. / Tide extrema of the requested day."""

        target = self.resolve(day)
        tides = await self.tides.day_tides(self.location.port_id, target)
        return sorted(tides, key=lambda sample: sample.timestamp)

    async def water_height_at(self, when: datetime | None = None) -> float:
        """주어진 시각의 수위입니다. / Water height at ``when`` (default now)."""

        moment = when or self.now()
        span = await self._tide_span(moment.astimezone(self.tz).date())
        return TideCurveModel(span).height_at(moment)
