"""조석 곡선 모델입니다. / Tide curve model.

Water height between two consecutive extrema is approximated by a
sinusoid (the "harmonic method" used for secondary ports when no
reference curve is published)::

    dH = amplitude * sin^2(90 * dt / Du)

where ``dt`` is the time elapsed since the high water and ``Du`` the time
between the high and the low water.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..errors import TideDataUnavailableError
from .models import TideCurveContext, TideSample

LOGGER = logging.getLogger("tidewindow.tides")

_Pair = Tuple[TideSample, TideSample]


class TideCurveModel:
    """조석표 기반 수위 모델입니다. / Water height model over tide tables."""

    def __init__(self, samples: Sequence[TideSample]) -> None:
        self.samples: List[TideSample] = sorted(samples, key=lambda s: s.timestamp)

    def _bracketing_pair(self, when: datetime) -> Optional[_Pair]:
        before = [s for s in self.samples if s.timestamp <= when]
        after = [s for s in self.samples if s.timestamp > when]
        candidates: List[_Pair] = []
        if before:
            earlier = before[-1]
            later = next((s for s in after if s.is_high != earlier.is_high), None)
            if later is not None:
                candidates.append((earlier, later))
        if after:
            later = after[0]
            earlier = next(
                (s for s in reversed(before) if s.is_high != later.is_high), None
            )
            if earlier is not None:
                candidates.append((earlier, later))
        if not candidates:
            return None
        return min(candidates, key=lambda pair: pair[1].timestamp - pair[0].timestamp)

    def context_at(self, when: datetime) -> TideCurveContext:
        """시각을 감싸는 극값 쌍을 찾습니다. / Find the extrema bracketing ``when``."""

        pair = self._bracketing_pair(when)
        if pair is None:
            LOGGER.debug(
                "tide_pair_missing",
                extra={"when": when.isoformat(), "samples": len(self.samples)},
            )
            raise TideDataUnavailableError(
                f"No high/low tide pair brackets {when.isoformat()}"
            )
        high, low = pair if pair[0].is_high else (pair[1], pair[0])
        return TideCurveContext(
            port_id=high.port_id,
            high_time=high.timestamp,
            high_height_m=high.height_m,
            low_time=low.timestamp,
            low_height_m=low.height_m,
            coefficient=high.coefficient,
        )

    def height_at(self, when: datetime) -> float:
        """근사 수위(m)입니다. / Approximate water height in meters."""

        return self.context_at(when).height_at(when)
