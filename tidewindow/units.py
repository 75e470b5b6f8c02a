"""단위 변환과 보퍼트 등급입니다. / Unit conversion and Beaufort scale."""

from __future__ import annotations

from enum import Enum
from typing import Tuple


class VelocityUnit(str, Enum):
    """속도 단위입니다. / Velocity units."""

    MPS = "m/s"
    KMPH = "km/h"
    MPH = "mph"
    KNOTS = "knots"


class TemperatureUnit(str, Enum):
    """온도 단위입니다. / Temperature units."""

    CELSIUS = "Celsius"
    FAHRENHEIT = "Fahrenheit"


# m/s is the reference unit
VELOCITY_FACTORS = {
    VelocityUnit.MPS: 1.0,
    VelocityUnit.KMPH: 3.6,
    VelocityUnit.MPH: 2.2369,
    VelocityUnit.KNOTS: 1.9438,
}

BEAUFORT_LIMITS_KMH: Tuple[float, ...] = (
    1.0,
    5.5,
    11.0,
    19.0,
    28.0,
    38.0,
    49.0,
    61.0,
    74.0,
    88.0,
    102.0,
    117.0,
)

# Force 12 tops out at 132 km/h; anything beyond is off the table.
BEAUFORT_CEILING_KMH = 133.0

BEAUFORT_LABELS: Tuple[str, ...] = (
    "Calme",
    "Très légère brise",
    "légère brise",
    "Petite Brise",
    "Jolie brise",
    "Bonne brise",
    "Vent frais",
    "Grand frais",
    "Coup de vent",
    "Fort coup de vent",
    "Tempête",
    "Violente tempête",
    "Ouragan",
)


def convert_velocity(
    value: float,
    source: VelocityUnit | str,
    target: VelocityUnit | str,
) -> float:
    """속도를 변환합니다. / Convert a velocity between units."""

    source_unit = VelocityUnit(source)
    target_unit = VelocityUnit(target)
    return value / VELOCITY_FACTORS[source_unit] * VELOCITY_FACTORS[target_unit]


def convert_temperature(
    value: float,
    source: TemperatureUnit | str,
    target: TemperatureUnit | str,
) -> float:
    """온도를 변환합니다. / Convert a temperature between units."""

    source_unit = TemperatureUnit(source)
    target_unit = TemperatureUnit(target)
    if source_unit == target_unit:
        return value
    if target_unit == TemperatureUnit.FAHRENHEIT:
        return value * 9.0 / 5.0 + 32.0
    return (value - 32.0) * 5.0 / 9.0


def beaufort(kmh: float) -> int:
    """보퍼트 등급을 계산합니다. / Compute Beaufort force from km/h."""

    if kmh > BEAUFORT_CEILING_KMH:
        return len(BEAUFORT_LIMITS_KMH) + 1
    for index in range(len(BEAUFORT_LIMITS_KMH) - 1, -1, -1):
        if kmh > BEAUFORT_LIMITS_KMH[index]:
            return index + 1
    return 0


def beaufort_label(kmh: float) -> str:
    """보퍼트 설명을 반환합니다. / Return the Beaufort description."""

    value = beaufort(kmh)
    if 0 <= value < len(BEAUFORT_LABELS):
        return BEAUFORT_LABELS[value]
    return ""
