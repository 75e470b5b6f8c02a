"""활동 제약 조건 평가입니다. / Activity constraint evaluation."""

from __future__ import annotations

from typing import Callable, Dict, Optional

from pydantic import Field, model_validator

from ..base import FrozenModel
from ..weather.models import ForecastSample


class RangeConstraint(FrozenModel):
    """닫힌 구간 제약입니다. / Closed interval constraint.

    ``None`` on either end means that end is unbounded.
    """

    min: Optional[float] = None
    max: Optional[float] = None

    @model_validator(mode="after")
    def _check_order(self) -> "RangeConstraint":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"Range min {self.min} exceeds max {self.max}")
        return self

    def is_satisfied(self, value: float | None) -> bool:
        """값이 구간에 속하는지 확인합니다. / Check value lies in range."""

        if value is None:
            return False
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    def describe(self) -> str:
        """구간을 문자열로 표현합니다. / Render the range as text."""

        low = "-inf" if self.min is None else f"{self.min:.2f}"
        high = "+inf" if self.max is None else f"{self.max:.2f}"
        return f"[{low}, {high}]"


class ActivitySpecification(FrozenModel):
    """활동 명세입니다. / Activity specification."""

    name: str = Field(min_length=1)
    minimal_duration_hours: int = Field(default=2, ge=0)
    wind_speed_kmh: Optional[RangeConstraint] = None
    wind_direction_deg: Optional[RangeConstraint] = None
    air_temperature_c: Optional[RangeConstraint] = None
    precipitation_mm: Optional[RangeConstraint] = None
    cloud_cover_pct: Optional[RangeConstraint] = None
    tide_height_m: Optional[RangeConstraint] = None
    water_temperature_c: Optional[RangeConstraint] = None

    @property
    def has_tide_constraint(self) -> bool:
        """조석 제약 여부입니다. / Whether a tide range is set."""

        return self.tide_height_m is not None


def _temperature_ok(constraint: RangeConstraint, sample: ForecastSample) -> bool:
    return constraint.is_satisfied(sample.temp_min_c) and constraint.is_satisfied(
        sample.temp_max_c
    )


_MEASUREMENTS: Dict[str, Callable[[ForecastSample], float | None]] = {
    "wind_speed_kmh": lambda sample: sample.wind_speed_kmh,
    "wind_direction_deg": lambda sample: sample.wind_direction_deg,
    "precipitation_mm": lambda sample: sample.precipitation_mm,
    "cloud_cover_pct": lambda sample: sample.cloud_cover_pct,
    "water_temperature_c": lambda sample: sample.water_temperature_c,
}


class ConstraintEvaluator(FrozenModel):
    """날씨 제약 평가기입니다. / Weather constraint evaluator.

    Every constrained attribute is checked independently; tide height is
    left to the tide window finder.
    """

    specification: ActivitySpecification

    def evaluate(self, sample: ForecastSample) -> Dict[str, bool]:
        """속성별 통과 여부를 계산합니다. / Evaluate each attribute."""

        spec = self.specification
        results: Dict[str, bool] = {}
        for key, measure in _MEASUREMENTS.items():
            constraint = getattr(spec, key)
            if constraint is not None:
                results[key] = constraint.is_satisfied(measure(sample))
        if spec.air_temperature_c is not None:
            results["air_temperature_c"] = _temperature_ok(
                spec.air_temperature_c, sample
            )
        return results

    def matches(self, sample: ForecastSample) -> bool:
        """모든 제약을 만족하는지 확인합니다. / Check all constraints pass."""

        return all(self.evaluate(sample).values())

    def reasons(self, sample: ForecastSample) -> Dict[str, str]:
        """판단 사유를 생성합니다. / Produce evaluation reasons."""

        spec = self.specification
        messages: Dict[str, str] = {}
        for key, passed in self.evaluate(sample).items():
            constraint: RangeConstraint = getattr(spec, key)
            if key == "air_temperature_c":
                actual = f"{sample.temp_min_c:.2f}..{sample.temp_max_c:.2f}"
            else:
                value = _MEASUREMENTS[key](sample)
                actual = "n/a" if value is None else f"{value:.2f}"
            comparator = "in" if passed else "!in"
            messages[key] = f"{actual} {comparator} {constraint.describe()}"
        return messages
