"""환경 및 설정 로더입니다. / Environment and configuration loader."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator

from .activity.catalog import DEFAULT_CATALOG, index_catalog
from .activity.constraints import ActivitySpecification
from .base import FrozenModel


class CacheSettings(FrozenModel):
    """캐시 관련 설정입니다. / Cache settings definition."""

    ttl_seconds: int = Field(default=300, ge=0)


class RateLimitSettings(FrozenModel):
    """레이트 리밋 설정입니다. / Rate limit settings definition."""

    requests_per_minute: int = Field(default=60, ge=1)


class ProviderSettings(FrozenModel):
    """개별 제공자 설정입니다. / Individual provider settings."""

    name: str
    kind: Literal["weather", "tide"] = "weather"
    base_url: str
    adapter: str
    timeout_seconds: float = Field(default=5.0, gt=0)
    retries: int = Field(default=3, ge=0)
    circuit_breaker_failures: int = Field(default=5, ge=1)
    circuit_reset_seconds: float = Field(default=60.0, gt=0)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    units: str = Field(default="metric")
    api_key: str | None = None
    secret_suffix: str | None = Field(default=None, exclude=True)


class LocationSettings(FrozenModel):
    """대상 해안 위치입니다. / Target coastal location."""

    city_id: str = "Chatelaillon-Plage"
    port_id: str = "la-rochelle-pallice"
    timezone: str = "Europe/Paris"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        """시간대 객체입니다. / Timezone object."""

        return ZoneInfo(self.timezone)


class DaytimeSettings(FrozenModel):
    """주간 시간대 범위입니다. / Daytime hour-of-day range."""

    start_hour: int = Field(default=8, ge=0, le=23)
    end_hour: int = Field(default=20, ge=1, le=24)

    @model_validator(mode="after")
    def _check_order(self) -> "DaytimeSettings":
        if self.start_hour >= self.end_hour:
            raise ValueError("Daytime start_hour must precede end_hour")
        return self

    def contains(self, hour: int) -> bool:
        """시각이 주간인지 확인합니다. / Check hour falls in daytime."""

        return self.start_hour <= hour < self.end_hour


class ScanSettings(FrozenModel):
    """조석 스캔 설정입니다. / Tide scan settings."""

    step_minutes: int = Field(default=10, ge=1, le=60)

    @property
    def step(self) -> timedelta:
        """스캔 간격입니다. / Scan step."""

        return timedelta(minutes=self.step_minutes)


class ProviderSecret(FrozenModel):
    """제공자 시크릿 래퍼입니다. / Provider secret wrapper."""

    api_key: SecretStr | None = None


class AppConfig(FrozenModel):
    """애플리케이션 전체 설정입니다. / Application wide configuration."""

    providers: List[ProviderSettings]
    provider_order: List[str]
    tide_provider: str | None = None
    location: LocationSettings = Field(default_factory=LocationSettings)
    daytime: DaytimeSettings = Field(default_factory=DaytimeSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    activities: List[ActivitySpecification] = Field(
        default_factory=lambda: list(DEFAULT_CATALOG)
    )

    @field_validator("activities")
    @classmethod
    def _unique_names(
        cls, value: List[ActivitySpecification]
    ) -> List[ActivitySpecification]:
        index_catalog(value)
        return value

    def provider_by_name(self, name: str) -> ProviderSettings:
        """이름으로 제공자를 찾습니다. / Find provider by name."""

        for provider in self.providers:
            if provider.name == name:
                return provider
        raise KeyError(f"Unknown provider: {name}")


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """YAML 설정을 읽습니다. / Load YAML configuration."""

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def load_secrets_from_env(suffixes: List[str]) -> Dict[str, ProviderSecret]:
    """환경 변수에서 시크릿을 적재합니다. / Load secrets from environment."""

    mapping: Dict[str, ProviderSecret] = {}
    for suffix in suffixes:
        env_key = f"WEATHER_API_KEY_{suffix}"
        raw_value = os.getenv(env_key)
        secret = SecretStr(raw_value) if raw_value else None
        mapping[suffix] = ProviderSecret(api_key=secret)
    return mapping


def merge_config(
    raw: Dict[str, Any], secrets: Dict[str, ProviderSecret]
) -> Dict[str, Any]:
    """환경과 파일 설정을 병합합니다. / Merge file config with secrets."""

    providers = raw.get("providers", [])
    for provider in providers:
        suffix = provider.get("secret_suffix")
        if suffix and suffix in secrets:
            secret_value = secrets[suffix].api_key
            if secret_value:
                provider["api_key"] = secret_value.get_secret_value()
    return raw


def load_app_config(path: Path | None = None) -> AppConfig:
    """최종 앱 설정을 반환합니다. / Return final app configuration."""

    config_path = path or Path(os.getenv("TIDEWINDOW_CONFIG", "config.yaml"))
    raw = load_yaml_config(config_path)
    suffixes = [
        provider["secret_suffix"]
        for provider in raw.get("providers", [])
        if provider.get("secret_suffix")
    ]
    secrets = load_secrets_from_env(suffixes)
    merged = merge_config(raw, secrets)
    try:
        return AppConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
