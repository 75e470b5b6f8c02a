"""정규화된 날씨 모델입니다. / Normalized weather models."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import Field

from ..base import FrozenModel
from ..units import VelocityUnit, beaufort, beaufort_label, convert_velocity

FORECAST_VALIDITY = timedelta(hours=3)


class ForecastSample(FrozenModel):
    """3시간 예보 샘플입니다. / Three-hour forecast sample.

    The sample describes conditions over ``[timestamp, timestamp + 3h)``.
    """

    timestamp: datetime
    wind_speed_mps: float = Field(ge=0)
    wind_direction_deg: Optional[float] = Field(default=None, ge=0, le=360)
    temp_min_c: float
    temp_max_c: float
    precipitation_mm: float = Field(default=0.0, ge=0)
    cloud_cover_pct: Optional[float] = Field(default=None, ge=0, le=100)
    water_temperature_c: Optional[float] = None

    @property
    def end(self) -> datetime:
        """유효 구간 종료 시각입니다. / End of the validity span."""

        return self.timestamp + FORECAST_VALIDITY

    @property
    def wind_speed_kmh(self) -> float:
        """풍속(km/h)입니다. / Wind speed in km/h."""

        return convert_velocity(
            self.wind_speed_mps, VelocityUnit.MPS, VelocityUnit.KMPH
        )

    @property
    def is_rainy(self) -> bool:
        """강수 여부입니다. / Whether any precipitation is forecast."""

        return self.precipitation_mm > 0


class ForecastSummary(FrozenModel):
    """표시용 예보 요약입니다. / Display-oriented forecast summary."""

    start: datetime
    end: datetime
    temp_min_c: float
    temp_max_c: float
    precipitation_mm: float
    cloud_cover_pct: Optional[float] = None
    wind_direction_deg: Optional[float] = None
    wind_speed_kmh: float
    wind_speed_knots: float
    beaufort: int
    beaufort_label: str


def summarize_forecast(sample: ForecastSample) -> ForecastSummary:
    """예보 샘플을 요약합니다. / Summarize a forecast sample."""

    kmh = sample.wind_speed_kmh
    return ForecastSummary(
        start=sample.timestamp,
        end=sample.end,
        temp_min_c=sample.temp_min_c,
        temp_max_c=sample.temp_max_c,
        precipitation_mm=sample.precipitation_mm,
        cloud_cover_pct=sample.cloud_cover_pct,
        wind_direction_deg=sample.wind_direction_deg,
        wind_speed_kmh=kmh,
        wind_speed_knots=convert_velocity(
            sample.wind_speed_mps, VelocityUnit.MPS, VelocityUnit.KNOTS
        ),
        beaufort=beaufort(kmh),
        beaufort_label=beaufort_label(kmh),
    )
