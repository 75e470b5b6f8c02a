"""활동 매칭 엔진 테스트입니다. / Activity matcher tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List

import pytest
import respx

from tidewindow.activity.constraints import ActivitySpecification, RangeConstraint
from tidewindow.config import LocationSettings, ProviderSettings
from tidewindow.errors import TideParseError, UpstreamUnavailableError
from tidewindow.planner.matcher import ActivityMatcher, match_day
from tidewindow.tides.models import TideSample
from tidewindow.tides.providers import FixtureTideProvider, MeteoFranceTideProvider
from tidewindow.weather.models import ForecastSample
from tidewindow.weather.providers import FixtureWeatherProvider

DAY = date(2025, 6, 14)
PORT = "la-rochelle-pallice"
UTC_LOCATION = LocationSettings(timezone="UTC", port_id=PORT)

BOAT_PIAF = ActivitySpecification(
    name="boat-piaf",
    minimal_duration_hours=2,
    wind_speed_kmh=RangeConstraint(min=19.0, max=31.0),
    tide_height_m=RangeConstraint(min=5.0, max=6.0),
)
CLAMS = ActivitySpecification(
    name="fishing-landingnet-clam",
    tide_height_m=RangeConstraint(min=0.0, max=3.0),
)


def _at(hour: int, minute: int = 0) -> datetime:
    """테스트 날짜의 UTC 시각입니다. / UTC time on the test day."""

    return datetime(2025, 6, 14, hour, minute, tzinfo=timezone.utc)


def _forecasts() -> List[ForecastSample]:
    """6개 3시간 예보입니다. / Six three-hourly forecasts."""

    winds = {2: 3.0, 5: 3.0, 8: 7.0, 11: 7.0, 14: 7.0, 17: 7.0}
    return [
        ForecastSample(
            timestamp=_at(hour),
            wind_speed_mps=wind,
            temp_min_c=14.0,
            temp_max_c=19.5,
        )
        for hour, wind in winds.items()
    ]


def _tides() -> List[TideSample]:
    """테스트 날짜의 조석표입니다. / Tide table of the test day."""

    return [
        TideSample(port_id=PORT, timestamp=_at(2, 50), height_m=1.4, coefficient=85, is_high=False),
        TideSample(port_id=PORT, timestamp=_at(9), height_m=5.8, coefficient=86, is_high=True),
        TideSample(port_id=PORT, timestamp=_at(15), height_m=1.2, coefficient=86, is_high=False),
        TideSample(port_id=PORT, timestamp=_at(21, 15), height_m=5.7, coefficient=87, is_high=True),
    ]


def _daytime() -> List[ForecastSample]:
    return [sample for sample in _forecasts() if 8 <= sample.timestamp.hour < 20]


def _matcher(
    specifications: List[ActivitySpecification],
    tides: object | None = None,
    weather: object | None = None,
) -> ActivityMatcher:
    """고정 제공자 매처입니다. / Matcher over fixture providers."""

    return ActivityMatcher(
        weather=weather or FixtureWeatherProvider(_forecasts()),  # type: ignore[arg-type]
        tides=tides or FixtureTideProvider(_tides()),  # type: ignore[arg-type]
        specifications=specifications,
        location=UTC_LOCATION,
        clock=lambda: _at(6),
    )


@pytest.mark.asyncio
async def test_boat_piaf_end_to_end() -> None:
    """boat-piaf 시나리오입니다. / boat-piaf end-to-end scenario."""

    windows = await _matcher([BOAT_PIAF]).compute_activities("today")
    assert len(windows) == 1
    window = windows[0]
    assert window.specification.name == "boat-piaf"
    assert _at(8) <= window.start < window.end <= _at(20)
    assert window.duration_hours >= 2
    assert window.start == _at(8)
    assert window.end == _at(10, 40)
    assert window.forecast is not None
    assert window.forecast.timestamp == _at(8)
    assert window.tide is not None
    assert window.tide.high_time == _at(9)
    assert window.tide.low_time == _at(15)


@pytest.mark.asyncio
async def test_results_are_deterministic() -> None:
    """같은 입력은 같은 결과입니다. / Identical inputs, identical output."""

    matcher = _matcher([BOAT_PIAF, CLAMS])
    first = await matcher.compute_activities(DAY)
    second = await matcher.compute_activities(DAY)
    assert first == second


def test_clam_window_follows_low_tide() -> None:
    """조개잡이 창은 간조를 따릅니다. / Clam window sits around low tide."""

    windows = match_day([CLAMS], _daytime(), _tides())
    assert len(windows) == 1
    window = windows[0]
    assert window.start < _at(15) < window.end
    assert window.tide is not None
    assert window.tide.low_time == _at(15)


@pytest.mark.parametrize(("minimal", "accepted"), [(3, True), (4, False)])
def test_duration_boundary(minimal: int, accepted: bool) -> None:
    """최소 길이 경계입니다. / Minimal duration boundary is inclusive."""

    spec = ActivitySpecification(
        name="edge",
        minimal_duration_hours=minimal,
        wind_speed_kmh=RangeConstraint(min=19.0),
        tide_height_m=RangeConstraint(),
    )
    samples = [_daytime()[0], _daytime()[1].model_copy(update={"wind_speed_mps": 1.0})]
    windows = match_day([spec], samples, _tides())
    assert (len(windows) == 1) is accepted
    if accepted:
        assert windows[0].duration_hours == 3


def test_minimal_duration_applies_without_tide() -> None:
    """조석 없는 창에도 최소 길이를 적용합니다. / Untided windows honour duration."""

    short = ActivitySpecification(
        name="short", minimal_duration_hours=4, wind_speed_kmh=RangeConstraint(min=19.0)
    )
    samples = [_daytime()[0], _daytime()[1].model_copy(update={"wind_speed_mps": 1.0})]
    assert match_day([short], samples, []) == []
    relaxed = short.model_copy(update={"minimal_duration_hours": 3})
    windows = match_day([relaxed], samples, [])
    assert len(windows) == 1
    assert windows[0].tide is None


def test_missing_tides_skip_only_tide_specs() -> None:
    """조석 부재 시 해당 명세만 건너뜁니다. / Missing tides skip tide specs only."""

    breezy = ActivitySpecification(name="breezy", wind_speed_kmh=RangeConstraint(min=19.0))
    windows = match_day([BOAT_PIAF, breezy, CLAMS], _daytime(), [])
    assert [window.specification.name for window in windows] == ["breezy"]


class BrokenTideProvider:
    """특정 날짜만 실패하는 제공자입니다. / Provider failing on a single day."""

    def __init__(self, broken_day: date = DAY, error: Exception | None = None) -> None:
        self.broken_day = broken_day
        self.error = error or TideParseError("Invalid tide timestamp: '2025061'")
        self.fixture = FixtureTideProvider(_tides())

    async def day_tides(self, port_id: str, day: date) -> List[TideSample]:
        if day == self.broken_day:
            raise self.error
        return await self.fixture.day_tides(port_id, day)


class DownWeatherProvider:
    """장애 상태 날씨 제공자입니다. / Weather provider that is down."""

    name = "down"

    async def forecast_for_city(self, city_id: str) -> List[ForecastSample]:
        raise UpstreamUnavailableError("down: 503")


@pytest.mark.asyncio
async def test_parse_error_is_fail_soft() -> None:
    """파싱 오류는 해당 명세만 건너뜁니다. / Parse errors skip tide specs."""

    breezy = ActivitySpecification(name="breezy", wind_speed_kmh=RangeConstraint(min=19.0))
    matcher = _matcher([BOAT_PIAF, breezy], tides=BrokenTideProvider())
    windows = await matcher.compute_activities(DAY)
    assert [window.specification.name for window in windows] == ["breezy"]


@pytest.mark.asyncio
async def test_malformed_neighbour_day_is_dropped() -> None:
    """전일 파싱 오류는 그날만 제외합니다. / A malformed previous day is only omitted."""

    broken = BrokenTideProvider(broken_day=DAY - timedelta(days=1))
    windows = await _matcher([BOAT_PIAF], tides=broken).compute_activities(DAY)
    assert len(windows) == 1
    assert windows[0].start == _at(8)
    assert windows[0].end == _at(10, 40)


@pytest.mark.asyncio
async def test_neighbour_day_outage_propagates() -> None:
    """익일 제공자 장애는 전파됩니다. / Next-day upstream outage propagates."""

    broken = BrokenTideProvider(
        broken_day=DAY + timedelta(days=1),
        error=UpstreamUnavailableError("MF: 503"),
    )
    with pytest.raises(UpstreamUnavailableError):
        await _matcher([BOAT_PIAF], tides=broken).compute_activities(DAY)


@pytest.mark.asyncio
async def test_non_json_tide_body_skips_tide_specs() -> None:
    """JSON이 아닌 조석 응답은 조석 명세만 건너뜁니다. / Non-JSON tide body skips tide specs."""

    settings = ProviderSettings(
        name="MF",
        kind="tide",
        adapter="meteofrance",
        base_url="https://tides-maintenance.test",
        retries=0,
    )
    breezy = ActivitySpecification(name="breezy", wind_speed_kmh=RangeConstraint(min=19.0))
    matcher = _matcher([BOAT_PIAF, breezy], tides=MeteoFranceTideProvider(settings))
    with respx.mock() as mock:
        mock.get(url__regex=r"https://tides-maintenance\.test/la-rochelle-pallice/\d{8}/METROPOLE").respond(
            200, text="<html>maintenance</html>"
        )
        windows = await matcher.compute_activities(DAY)
    assert [window.specification.name for window in windows] == ["breezy"]


@pytest.mark.asyncio
async def test_upstream_failure_propagates() -> None:
    """제공자 장애는 전파됩니다. / Upstream failures propagate."""

    matcher = _matcher([BOAT_PIAF], weather=DownWeatherProvider())
    with pytest.raises(UpstreamUnavailableError):
        await matcher.compute_activities(DAY)


@pytest.mark.asyncio
async def test_compute_forecasts_summarizes_day() -> None:
    """예보 요약을 계산합니다. / Forecast summaries for the day."""

    summaries = await _matcher([BOAT_PIAF]).compute_forecasts("today")
    assert len(summaries) == 6
    windy = summaries[2]
    assert windy.wind_speed_kmh == pytest.approx(25.2)
    assert windy.beaufort == 4
    assert windy.beaufort_label == "Jolie brise"
    assert windy.end - windy.start == timedelta(hours=3)
    assert await _matcher([BOAT_PIAF]).compute_forecasts("today+1") == []


@pytest.mark.asyncio
async def test_water_height_and_day_tides() -> None:
    """수위와 조석표를 조회합니다. / Water height and day tides."""

    matcher = _matcher([CLAMS])
    assert await matcher.water_height_at(_at(9)) == pytest.approx(5.8)
    assert 1.2 < await matcher.water_height_at(_at(12)) < 5.8
    tides = await matcher.day_tides("today")
    assert [tide.timestamp for tide in tides] == [_at(2, 50), _at(9), _at(15), _at(21, 15)]
