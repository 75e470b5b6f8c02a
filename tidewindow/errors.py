"""도메인 예외 계층입니다. / Domain exception hierarchy."""

from __future__ import annotations


class TidewindowError(Exception):
    """패키지 기본 예외입니다. / Base package error."""


class UpstreamUnavailableError(TidewindowError):
    """외부 제공자 장애입니다. / Upstream provider failure."""


class RateLimitExceededError(UpstreamUnavailableError):
    """레이트 리밋 초과 오류입니다. / Rate limit exceeded error."""


class CircuitBreakerOpenError(UpstreamUnavailableError):
    """서킷 브레이커 오픈 오류입니다. / Circuit breaker open error."""


class TideDataUnavailableError(TidewindowError):
    """조석 극값 쌍을 찾을 수 없습니다. / No bracketing tide extrema found."""


class TideParseError(TideDataUnavailableError):
    """조석 페이로드 파싱 오류입니다. / Malformed upstream tide payload."""
