"""기본 활동 카탈로그입니다. / Built-in activity catalog.

Chatelaillon bathymetry: harbour 4.1m, Cornard 1.6m, beach 2.5m.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from .constraints import ActivitySpecification, RangeConstraint

DEFAULT_CATALOG: List[ActivitySpecification] = [
    ActivitySpecification(
        name="windsurf-neilpryde6_9-taboo115",
        minimal_duration_hours=1,
        wind_speed_kmh=RangeConstraint(min=19.0, max=31.0),
        tide_height_m=RangeConstraint(min=3.5, max=6.0),
    ),
    ActivitySpecification(
        name="windsurf-northsails5_7-taboo115",
        minimal_duration_hours=1,
        wind_speed_kmh=RangeConstraint(min=24.0, max=41.0),
        tide_height_m=RangeConstraint(min=3.5, max=6.0),
    ),
    ActivitySpecification(
        name="windsurf-neilpryde5_8-speedsail",
        wind_speed_kmh=RangeConstraint(min=24.0, max=41.0),
        tide_height_m=RangeConstraint(min=0.0, max=5.0),
    ),
    ActivitySpecification(
        name="boat-piaf",
        wind_speed_kmh=RangeConstraint(min=19.0, max=31.0),
        tide_height_m=RangeConstraint(min=5.0, max=6.0),
    ),
    ActivitySpecification(
        name="fishing-landingnet-clam",
        tide_height_m=RangeConstraint(min=0.0, max=3.0),
    ),
]


def index_catalog(
    specifications: Sequence[ActivitySpecification],
) -> Dict[str, ActivitySpecification]:
    """이름으로 카탈로그를 색인합니다. / Index catalog by unique name."""

    index: Dict[str, ActivitySpecification] = {}
    for spec in specifications:
        if spec.name in index:
            raise ValueError(f"Duplicate activity name: {spec.name}")
        index[spec.name] = spec
    return index
