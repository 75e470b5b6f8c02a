"""조석 조건 구간 탐색기입니다. / Tide-constrained interval finder."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ..activity.constraints import RangeConstraint
from .curve import TideCurveModel
from .models import Interval

LOGGER = logging.getLogger("tidewindow.tides")

DEFAULT_STEP = timedelta(minutes=10)


class TideWindowFinder:
    """고정 간격으로 수위를 스캔합니다. / Scan water height at a fixed step."""

    def __init__(self, model: TideCurveModel, step: timedelta = DEFAULT_STEP) -> None:
        if step <= timedelta(0):
            raise ValueError("Scan step must be positive")
        self.model = model
        self.step = step

    def satisfying_runs(
        self,
        start: datetime,
        end: datetime,
        tide_range: RangeConstraint,
    ) -> List[Interval]:
        """조건을 만족하는 최대 연속 구간들입니다. / Maximal satisfying runs.

        A run closes at the first failing step, or at ``end`` when the scan
        runs out.
        """

        if start >= end:
            raise ValueError(
                f"Empty scan window: {start.isoformat()} >= {end.isoformat()}"
            )
        runs: List[Interval] = []
        run_start: Optional[datetime] = None
        current = start
        while current < end:
            height = self.model.height_at(current)
            if tide_range.is_satisfied(height):
                if run_start is None:
                    run_start = current
            elif run_start is not None:
                runs.append(Interval(start=run_start, end=current))
                run_start = None
            current += self.step
        if run_start is not None:
            runs.append(Interval(start=run_start, end=end))
        return runs

    def find_longest_satisfying(
        self,
        start: datetime,
        end: datetime,
        tide_range: RangeConstraint,
    ) -> Optional[Interval]:
        """가장 긴 만족 구간을 찾습니다. / Find the longest satisfying run.

        Runs are compared on whole hours; the earliest run wins a tie.
        """

        longest: Optional[Interval] = None
        for run in self.satisfying_runs(start, end, tide_range):
            if longest is None or run.duration_hours > longest.duration_hours:
                longest = run
        if longest is not None:
            LOGGER.debug(
                "tide_run_selected",
                extra={
                    "start": longest.start.isoformat(),
                    "end": longest.end.isoformat(),
                    "hours": longest.duration_hours,
                },
            )
        return longest
