"""조석 곡선 테스트입니다. / Tide curve model tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from tidewindow.errors import TideDataUnavailableError
from tidewindow.tides.curve import TideCurveModel
from tidewindow.tides.models import Interval, TideCurveContext, TideSample

T0 = datetime(2025, 6, 14, 6, 0, tzinfo=timezone.utc)
PORT = "la-rochelle-pallice"


def _tide(when: datetime, height: float, high: bool) -> TideSample:
    """조석 샘플을 만듭니다. / Build a tide sample."""

    return TideSample(
        port_id=PORT, timestamp=when, height_m=height, coefficient=80, is_high=high
    )


def test_quarter_cycle_height() -> None:
    """4분의 1 주기 수위를 확인합니다. / Mid-cycle height is exact."""

    model = TideCurveModel(
        [_tide(T0 + timedelta(hours=6), 2.0, False), _tide(T0, 6.0, True)]
    )
    assert model.height_at(T0 + timedelta(hours=3)) == pytest.approx(4.0, abs=1e-6)
    assert model.height_at(T0) == pytest.approx(6.0, abs=1e-6)
    context = model.context_at(T0 + timedelta(hours=1))
    assert context.amplitude == pytest.approx(4.0)
    assert context.half_period == timedelta(hours=6)


def test_rising_tide_uses_symmetric_formula() -> None:
    """상승 구간도 같은 공식을 씁니다. / Rising side uses the same formula."""

    model = TideCurveModel(
        [_tide(T0, 2.0, False), _tide(T0 + timedelta(hours=6), 6.0, True)]
    )
    assert model.height_at(T0 + timedelta(hours=3)) == pytest.approx(4.0, abs=1e-6)
    assert model.height_at(T0) == pytest.approx(2.0, abs=1e-6)


def test_nearest_enclosing_pair_is_selected() -> None:
    """가장 가까운 감싸는 쌍을 고릅니다. / Picks the tightest enclosing pair."""

    model = TideCurveModel(
        [
            _tide(T0 - timedelta(hours=3), 1.5, False),
            _tide(T0 + timedelta(hours=3), 5.8, True),
            _tide(T0 + timedelta(hours=9), 1.2, False),
            _tide(T0 + timedelta(hours=15), 5.6, True),
        ]
    )
    context = model.context_at(T0 + timedelta(hours=10))
    assert context.high_time == T0 + timedelta(hours=15)
    assert context.low_time == T0 + timedelta(hours=9)
    context = model.context_at(T0 + timedelta(hours=4))
    assert context.high_time == T0 + timedelta(hours=3)
    assert context.low_time == T0 + timedelta(hours=9)


def test_adjacent_day_extremum_bridges_morning() -> None:
    """전날 극값으로 아침을 계산합니다. / Previous day extremum bridges dawn."""

    previous_low = _tide(T0 - timedelta(hours=8), 1.4, False)
    first_high = _tide(T0 + timedelta(hours=3), 5.8, True)
    with pytest.raises(TideDataUnavailableError):
        TideCurveModel([first_high]).height_at(T0)
    height = TideCurveModel([previous_low, first_high]).height_at(T0)
    assert 1.4 < height < 5.8


def test_missing_pair_raises() -> None:
    """쌍이 없으면 실패합니다. / Fails without a high/low pair."""

    highs = [_tide(T0, 5.8, True), _tide(T0 + timedelta(hours=12), 5.6, True)]
    with pytest.raises(TideDataUnavailableError):
        TideCurveModel(highs).height_at(T0 + timedelta(hours=6))
    with pytest.raises(TideDataUnavailableError):
        TideCurveModel([]).height_at(T0)
    pair = [_tide(T0, 5.8, True), _tide(T0 + timedelta(hours=6), 1.2, False)]
    with pytest.raises(TideDataUnavailableError):
        TideCurveModel(pair).height_at(T0 + timedelta(hours=7))


def test_zero_half_period_is_rejected() -> None:
    """반주기 0은 거부됩니다. / Zero half period is a precondition failure."""

    with pytest.raises(ValidationError):
        TideCurveContext(
            port_id=PORT,
            high_time=T0,
            high_height_m=5.0,
            low_time=T0,
            low_height_m=1.0,
        )


@given(minutes=st.integers(min_value=0, max_value=359))
def test_height_stays_between_extrema(minutes: int) -> None:
    """수위는 극값 사이에 있습니다. / Height stays within the extrema."""

    model = TideCurveModel(
        [_tide(T0, 6.0, True), _tide(T0 + timedelta(hours=6), 2.0, False)]
    )
    height = model.height_at(T0 + timedelta(minutes=minutes))
    assert 2.0 - 1e-9 <= height <= 6.0 + 1e-9


def test_interval_duration_floors_hours() -> None:
    """구간 길이는 내림 시간입니다. / Interval duration floors to hours."""

    interval = Interval(start=T0, end=T0 + timedelta(hours=2, minutes=59))
    assert interval.duration_hours == 2
    with pytest.raises(ValidationError):
        Interval(start=T0, end=T0 - timedelta(minutes=1))
