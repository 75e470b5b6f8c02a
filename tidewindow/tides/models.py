"""조석 도메인 모델입니다. / Tide domain models."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from pydantic import Field, model_validator

from ..base import FrozenModel


class TideSample(FrozenModel):
    """조석표 극값 샘플입니다. / Tide-table extremum sample."""

    port_id: str
    timestamp: datetime
    height_m: float
    coefficient: Optional[int] = Field(default=None, ge=20, le=120)
    is_high: bool = Field(alias="high")


class TideCurveContext(FrozenModel):
    """만조/간조 쌍 문맥입니다. / High/low extrema pair context."""

    port_id: str
    high_time: datetime
    high_height_m: float
    low_time: datetime
    low_height_m: float
    coefficient: Optional[int] = None

    @model_validator(mode="after")
    def _check_half_period(self) -> "TideCurveContext":
        if self.high_time == self.low_time:
            raise ValueError("Tide half period must be strictly positive")
        return self

    @property
    def amplitude(self) -> float:
        """조차(marnage)입니다. / Tidal range between the extrema."""

        return abs(self.high_height_m - self.low_height_m)

    @property
    def half_period(self) -> timedelta:
        """반주기입니다. / Time between the extrema."""

        return abs(self.high_time - self.low_time)

    def height_at(self, when: datetime) -> float:
        """사인 근사 수위입니다. / Sinusoidal water height approximation.

        ``h(t) = high - amplitude * sin^2(90 deg * (t - high_time) / half_period)``
        """

        elapsed = (when - self.high_time).total_seconds()
        period = self.half_period.total_seconds()
        angle = math.radians(90.0 * elapsed / period)
        return self.high_height_m - self.amplitude * math.sin(angle) ** 2


class Interval(FrozenModel):
    """반개구간 시간 창입니다. / Half-open time interval."""

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_bounds(self) -> "Interval":
        if self.start > self.end:
            raise ValueError("Interval start must not follow its end")
        return self

    @property
    def duration(self) -> timedelta:
        """구간 길이입니다. / Interval length."""

        return self.end - self.start

    @property
    def duration_hours(self) -> int:
        """정수 시간 길이(내림)입니다. / Whole hours, floored."""

        return self.duration // timedelta(hours=1)
