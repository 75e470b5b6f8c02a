"""예보 기반 후보 창 생성기입니다. / Forecast-driven candidate window builder."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import model_validator

from ..activity.constraints import ActivitySpecification, ConstraintEvaluator
from ..base import FrozenModel
from ..tides.models import Interval, TideCurveContext
from ..weather.models import ForecastSample

LOGGER = logging.getLogger("tidewindow.planner")


class ActivityWindow(FrozenModel):
    """활동 가능 시간 창입니다. / Activity time window."""

    specification: ActivitySpecification
    start: datetime
    end: datetime
    tide: Optional[TideCurveContext] = None
    forecast: Optional[ForecastSample] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "ActivityWindow":
        if self.start > self.end:
            raise ValueError("Window start must not follow its end")
        return self

    @property
    def interval(self) -> Interval:
        """구간 표현입니다. / Interval view."""

        return Interval(start=self.start, end=self.end)

    @property
    def duration_hours(self) -> int:
        """정수 시간 길이입니다. / Whole-hour duration."""

        return self.interval.duration_hours


def build_candidate_windows(
    samples: Sequence[ForecastSample],
    specification: ActivitySpecification,
) -> List[ActivityWindow]:
    """연속 만족 예보를 병합합니다. / Merge contiguous satisfying samples.

    ``samples`` must be time-ordered. A sample extends the current window
    only when it starts exactly where the window ends.
    """

    evaluator = ConstraintEvaluator(specification=specification)
    windows: List[ActivityWindow] = []
    current: Optional[ActivityWindow] = None
    for sample in samples:
        if not evaluator.matches(sample):
            LOGGER.debug(
                "forecast_mismatch",
                extra={
                    "activity": specification.name,
                    "timestamp": sample.timestamp.isoformat(),
                    "reasons": evaluator.reasons(sample),
                },
            )
            continue
        if current is not None and current.end == sample.timestamp:
            current = current.model_copy(update={"end": sample.end})
            windows[-1] = current
        else:
            current = ActivityWindow(
                specification=specification,
                start=sample.timestamp,
                end=sample.end,
            )
            windows.append(current)
    return windows


def nearest_sample(
    samples: Sequence[ForecastSample], when: datetime
) -> Optional[ForecastSample]:
    """가장 가까운 예보를 찾습니다. / Find the sample nearest to ``when``."""

    if not samples:
        return None
    return min(samples, key=lambda sample: abs(sample.timestamp - when))
