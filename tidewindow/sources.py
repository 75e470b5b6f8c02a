"""HTTP 데이터 소스 공통 기반입니다. / Shared HTTP data source plumbing."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Generic, Optional, TypeVar

import httpx
from pydantic import ConfigDict
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .base import FrozenModel
from .config import ProviderSettings
from .errors import (
    CircuitBreakerOpenError,
    RateLimitExceededError,
    UpstreamUnavailableError,
)

LOGGER = logging.getLogger("tidewindow.providers")

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """캐시 엔트리 구조입니다. / Cache entry structure."""

    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """파싱 결과용 TTL 캐시입니다. / TTL cache of parsed payloads."""

    def __init__(self, ttl_seconds: int) -> None:
        self.ttl_seconds = ttl_seconds
        self._store: Dict[str, CacheEntry[T]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[T]:
        """만료 전 값을 가져옵니다. / Return the value unless expired."""

        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if time.monotonic() > entry.expires_at:
                del self._store[key]
                return None
            return entry.value

    async def put(self, key: str, value: T) -> None:
        """값을 저장합니다. / Store a value for ``ttl_seconds``."""

        if self.ttl_seconds <= 0:
            return
        async with self._lock:
            self._store[key] = CacheEntry(
                value=value, expires_at=time.monotonic() + self.ttl_seconds
            )


class RateLimiter:
    """분당 요청 한도입니다. / Sliding one-minute request budget."""

    window_seconds = 60.0

    def __init__(self, requests_per_minute: int) -> None:
        self.requests_per_minute = requests_per_minute
        self._sent: Deque[float] = deque()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """요청 슬롯을 확보합니다. / Claim a request slot or refuse."""

        async with self._lock:
            now = time.monotonic()
            horizon = now - self.window_seconds
            while self._sent and self._sent[0] < horizon:
                self._sent.popleft()
            if len(self._sent) >= self.requests_per_minute:
                raise RateLimitExceededError(
                    f"More than {self.requests_per_minute} requests per minute"
                )
            self._sent.append(now)


class CircuitBreaker(FrozenModel):
    """제공자별 서킷 브레이커입니다. / Per-provider circuit breaker."""

    model_config = ConfigDict(
        frozen=False,
        populate_by_name=True,
        validate_assignment=True,
    )
    provider: str
    failure_threshold: int
    reset_seconds: float
    failure_count: int = 0
    opened_at: Optional[float] = None

    @property
    def is_open(self) -> bool:
        """열림 여부입니다. / Whether requests are currently refused."""

        if self.opened_at is None:
            return False
        if time.monotonic() - self.opened_at >= self.reset_seconds:
            # half-open: let the next request through
            self.failure_count = 0
            self.opened_at = None
            return False
        return True

    def ensure_closed(self) -> None:
        """열려 있으면 거부합니다. / Refuse while the breaker is open."""

        if self.is_open:
            raise CircuitBreakerOpenError(f"{self.provider}: circuit breaker is open")

    def record_failure(self) -> None:
        """실패를 기록합니다. / Record failure event."""

        self.failure_count += 1
        if self.opened_at is None and self.failure_count >= self.failure_threshold:
            self.opened_at = time.monotonic()
            LOGGER.warning(
                "circuit_opened",
                extra={"provider": self.provider, "failures": self.failure_count},
            )

    def record_success(self) -> None:
        """성공을 기록합니다. / Record success event."""

        self.failure_count = 0
        self.opened_at = None


class HttpJsonSource(Generic[T]):
    """캐시와 재시도를 갖춘 JSON 소스입니다. / JSON source with cache and retry."""

    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings
        self.cache: TTLCache[T] = TTLCache(settings.cache.ttl_seconds)
        self.rate_limiter = RateLimiter(settings.rate_limit.requests_per_minute)
        self.circuit_breaker = CircuitBreaker(
            provider=settings.name,
            failure_threshold=settings.circuit_breaker_failures,
            reset_seconds=settings.circuit_reset_seconds,
        )

    @property
    def name(self) -> str:
        """제공자 이름을 돌려줍니다. / Return provider name."""

        return self.settings.name

    def build_headers(self) -> Dict[str, str]:
        """요청 헤더를 작성합니다. / Build request headers."""

        return {"accept": "application/json"}

    def malformed_payload(self, detail: str) -> Exception:
        """해석 불가 응답의 예외입니다. / Error for an unusable response body.

        Subclasses return their own error type so callers can tell a bad
        payload apart from an unreachable upstream.
        """

        return UpstreamUnavailableError(f"{self.name}: {detail}")

    async def fetch_cached(
        self,
        cache_key: str,
        path: str,
        params: Dict[str, Any],
        parse: Callable[[Any], T],
    ) -> T:
        """캐시 우선으로 조회합니다. / Fetch, parse and cache a payload."""

        key = f"{self.name}:{cache_key}"
        cached = await self.cache.get(key)
        if cached is not None:
            return cached
        self.circuit_breaker.ensure_closed()
        await self.rate_limiter.acquire()
        try:
            payload = await self._request_with_retry(path, params)
        except httpx.HTTPError as exc:
            self.circuit_breaker.record_failure()
            LOGGER.exception(
                "provider_error",
                extra={"provider": self.name, "error": str(exc)},
            )
            raise UpstreamUnavailableError(f"{self.name}: {exc}") from exc
        self.circuit_breaker.record_success()
        result = parse(payload)
        await self.cache.put(key, result)
        return result

    async def _request_with_retry(self, path: str, params: Dict[str, Any]) -> Any:
        """리트라이 포함 요청입니다. / Perform request with retry."""

        retryer = AsyncRetrying(
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            stop=stop_after_attempt(max(self.settings.retries, 1)),
            retry=retry_if_exception_type(httpx.HTTPError),
            reraise=True,
        )
        payload: Any = None
        try:
            async for attempt in retryer:
                with attempt:
                    payload = await self._get_json(path, params)
                    break
        except RetryError as exc:
            raise UpstreamUnavailableError(str(exc)) from exc
        return payload

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        """HTTP GET을 실행합니다. / Execute HTTP GET and decode JSON."""

        timeout = httpx.Timeout(self.settings.timeout_seconds)
        async with httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=timeout,
        ) as client:
            response = await client.get(
                path,
                params=params,
                headers=self.build_headers(),
            )
            response.raise_for_status()
            try:
                return response.json()
            except ValueError as exc:
                LOGGER.warning(
                    "provider_payload_invalid",
                    extra={
                        "provider": self.name,
                        "content_type": response.headers.get("content-type"),
                    },
                )
                raise self.malformed_payload(f"response is not JSON ({exc})") from exc
