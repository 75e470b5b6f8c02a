"""날씨 제공자 어댑터입니다. / Weather provider adapters."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Protocol, Sequence, Tuple

from ..config import ProviderSettings
from ..errors import UpstreamUnavailableError
from ..sources import HttpJsonSource
from ..units import (
    TemperatureUnit,
    VelocityUnit,
    convert_temperature,
    convert_velocity,
)
from .models import ForecastSample

LOGGER = logging.getLogger("tidewindow.providers")

# OWM `units` parameter -> (wind speed unit, temperature unit) of the payload
OWM_UNITS: Dict[str, Tuple[VelocityUnit, TemperatureUnit]] = {
    "metric": (VelocityUnit.MPS, TemperatureUnit.CELSIUS),
    "imperial": (VelocityUnit.MPH, TemperatureUnit.FAHRENHEIT),
}


class WeatherProvider(Protocol):
    """날씨 제공자 인터페이스입니다. / Weather provider interface."""

    @property
    def name(self) -> str: ...

    async def forecast_for_city(self, city_id: str) -> List[ForecastSample]:
        """시간순 예보를 돌려줍니다. / Return forecasts ordered by time."""
        ...


class OpenWeatherMapProvider(HttpJsonSource[List[ForecastSample]]):
    """OpenWeatherMap 5일 예보 어댑터입니다. / OpenWeatherMap 5-day forecast adapter."""

    path: str = "/forecast"

    def __init__(self, settings: ProviderSettings) -> None:
        if settings.units not in OWM_UNITS:
            raise ValueError(
                f"Unsupported OpenWeatherMap units: {settings.units} "
                f"(expected one of {sorted(OWM_UNITS)})"
            )
        super().__init__(settings)
        self.velocity_unit, self.temperature_unit = OWM_UNITS[settings.units]

    def build_params(self, city_id: str) -> Dict[str, Any]:
        """요청 파라미터를 구성합니다. / Build request parameters."""

        params: Dict[str, Any] = {
            "q": city_id,
            "mode": "json",
            "units": self.settings.units,
        }
        if self.settings.api_key:
            params["APPID"] = self.settings.api_key
        return params

    async def forecast_for_city(self, city_id: str) -> List[ForecastSample]:
        """도시 예보를 조회합니다. / Fetch the city forecast."""

        return await self.fetch_cached(
            city_id, self.path, self.build_params(city_id), self.parse_payload
        )

    def parse_payload(self, payload: Dict[str, Any]) -> List[ForecastSample]:
        """응답 페이로드를 파싱합니다. / Parse response payload."""

        try:
            samples = [
                _build_owm_sample(item, self.velocity_unit, self.temperature_unit)
                for item in payload["list"]
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamUnavailableError(
                f"{self.name}: malformed forecast payload ({exc})"
            ) from exc
        return sorted(samples, key=lambda sample: sample.timestamp)


def _build_owm_sample(
    item: Dict[str, Any],
    velocity_unit: VelocityUnit = VelocityUnit.MPS,
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS,
) -> ForecastSample:
    """OWM 예보 항목을 변환합니다. / Build sample from an OWM list item.

    Wind speed is normalised to m/s and temperatures to Celsius.
    """

    main = item["main"]
    wind = item.get("wind") or {}
    rain = (item.get("rain") or {}).get("3h", 0.0)
    snow = (item.get("snow") or {}).get("3h", 0.0)
    clouds = (item.get("clouds") or {}).get("all")
    return ForecastSample(
        timestamp=datetime.fromtimestamp(int(item["dt"]), tz=timezone.utc),
        wind_speed_mps=convert_velocity(
            float(wind.get("speed", 0.0)), velocity_unit, VelocityUnit.MPS
        ),
        wind_direction_deg=_optional_float(wind.get("deg")),
        temp_min_c=convert_temperature(
            float(main["temp_min"]), temperature_unit, TemperatureUnit.CELSIUS
        ),
        temp_max_c=convert_temperature(
            float(main["temp_max"]), temperature_unit, TemperatureUnit.CELSIUS
        ),
        precipitation_mm=float(rain) + float(snow),
        cloud_cover_pct=_optional_float(clouds),
    )


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


class FixtureWeatherProvider:
    """고정 예보 제공자입니다. / Fixed in-memory forecast provider."""

    def __init__(self, samples: Sequence[ForecastSample], name: str = "fixture") -> None:
        self._samples = sorted(samples, key=lambda sample: sample.timestamp)
        self._name = name

    @property
    def name(self) -> str:
        """제공자 이름을 돌려줍니다. / Return provider name."""

        return self._name

    async def forecast_for_city(self, city_id: str) -> List[ForecastSample]:
        """고정 예보를 돌려줍니다. / Return the fixed forecast."""

        return list(self._samples)


ADAPTER_REGISTRY: Dict[str, type[OpenWeatherMapProvider]] = {
    "openweathermap": OpenWeatherMapProvider,
}


class WeatherService:
    """날씨 서비스 파사드입니다. / Weather service facade."""

    def __init__(self, providers: Sequence[WeatherProvider]) -> None:
        self.providers = list(providers)

    @property
    def name(self) -> str:
        """체인 이름입니다. / Chain name."""

        return "+".join(provider.name for provider in self.providers)

    async def forecast_for_city(self, city_id: str) -> List[ForecastSample]:
        """폴백 체인을 수행합니다. / Perform fallback chain."""

        errors: List[str] = []
        for provider in self.providers:
            try:
                LOGGER.info("provider_attempt", extra={"provider": provider.name})
                return await provider.forecast_for_city(city_id)
            except UpstreamUnavailableError as exc:
                LOGGER.warning(
                    "provider_failed",
                    extra={"provider": provider.name, "error": str(exc)},
                )
                errors.append(f"{provider.name}: {exc}")
                continue
        raise UpstreamUnavailableError("; ".join(errors) or "All providers failed")


def create_weather_provider(settings: ProviderSettings) -> OpenWeatherMapProvider:
    """설정으로 제공자를 만듭니다. / Build provider from settings."""

    try:
        adapter_cls = ADAPTER_REGISTRY[settings.adapter]
    except KeyError as exc:
        raise ValueError(f"Unknown weather adapter: {settings.adapter}") from exc
    return adapter_cls(settings)
