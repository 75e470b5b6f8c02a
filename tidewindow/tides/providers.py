"""조석표 제공자 어댑터입니다. / Tide-table provider adapters."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, List, Protocol, Sequence

from ..config import ProviderSettings
from ..errors import TideParseError
from ..sources import HttpJsonSource
from .models import TideSample

TIDE_TIME_FORMAT = "%Y%m%d%H%M"


class TideTableProvider(Protocol):
    """조석표 제공자 인터페이스입니다. / Tide-table provider interface."""

    async def day_tides(self, port_id: str, day: date) -> List[TideSample]:
        """하루치 극값을 돌려줍니다. / Return the extrema of one day."""
        ...


class MeteoFranceTideProvider(HttpJsonSource[List[TideSample]]):
    """Météo-France 조석 어댑터입니다. / Météo-France tide adapter.

    Upstream times are ``yyyyMMddHHmm`` wall-clock values in the port's
    timezone.
    """

    region: str = "METROPOLE"

    def __init__(
        self, settings: ProviderSettings, tz: tzinfo = timezone.utc
    ) -> None:
        super().__init__(settings)
        self.tz = tz

    def malformed_payload(self, detail: str) -> Exception:
        return TideParseError(f"{self.name}: {detail}")

    async def day_tides(self, port_id: str, day: date) -> List[TideSample]:
        """하루 조석표를 조회합니다. / Fetch one day of tides."""

        stamp = f"{day:%Y%m%d}"
        path = f"/{port_id}/{stamp}/{self.region}"
        return await self.fetch_cached(
            f"{port_id}:{stamp}",
            path,
            {},
            lambda payload: self.parse_payload(payload, port_id),
        )

    def parse_payload(self, payload: Any, port_id: str) -> List[TideSample]:
        """응답 페이로드를 파싱합니다. / Parse response payload."""

        if not isinstance(payload, list):
            raise TideParseError(f"{self.name}: expected a list of tides")
        try:
            return [self._build_sample(item, port_id) for item in payload]
        except (KeyError, TypeError, ValueError) as exc:
            raise TideParseError(f"{self.name}: malformed tide entry ({exc})") from exc

    def _build_sample(self, item: Dict[str, Any], port_id: str) -> TideSample:
        return TideSample(
            port_id=item.get("port") or port_id,
            timestamp=parse_tide_time(item["time"], self.tz),
            height_m=float(item["height"]),
            coefficient=item.get("coef"),
            is_high=item["high"],
        )


def parse_tide_time(value: str, tz: tzinfo) -> datetime:
    """조석 시각을 파싱합니다. / Parse an upstream tide timestamp."""

    try:
        naive = datetime.strptime(value, TIDE_TIME_FORMAT)
    except (TypeError, ValueError) as exc:
        raise TideParseError(f"Invalid tide timestamp: {value!r}") from exc
    return naive.replace(tzinfo=tz)


class FixtureTideProvider:
    """고정 조석 제공자입니다. / Fixed in-memory tide provider."""

    def __init__(self, samples: Sequence[TideSample], tz: tzinfo = timezone.utc) -> None:
        self._samples = list(samples)
        self.tz = tz

    async def day_tides(self, port_id: str, day: date) -> List[TideSample]:
        """해당 날짜 샘플을 돌려줍니다. / Return the samples of ``day``."""

        return [
            sample
            for sample in self._samples
            if sample.port_id == port_id
            and sample.timestamp.astimezone(self.tz).date() == day
        ]


ADAPTER_REGISTRY: Dict[str, type[MeteoFranceTideProvider]] = {
    "meteofrance": MeteoFranceTideProvider,
}


def create_tide_provider(
    settings: ProviderSettings, tz: tzinfo = timezone.utc
) -> MeteoFranceTideProvider:
    """설정으로 조석 제공자를 만듭니다. / Build tide provider from settings."""

    try:
        adapter_cls = ADAPTER_REGISTRY[settings.adapter]
    except KeyError as exc:
        raise ValueError(f"Unknown tide adapter: {settings.adapter}") from exc
    return adapter_cls(settings, tz)
