from __future__ import annotations
"""Base generation service — optional retry, timeout and fallback, plus usage counters.

A vendor call goes through ``execute()``:

    attempt 1 .. max_retries+1   each bounded by ``timeout`` (None = unbounded)
    fallback                     only when ``fallback_enabled``
    raise                        the last attempt's exception

Counters are per service instance and reset on restart.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class GenResult(Generic[T]):
    data: T
    provider: str
    latency_ms: int
    retries_used: int
    fallback_used: bool = False


@dataclass
class GenServiceConfig:
    """Call policy. The defaults make exactly one unbounded attempt."""
    max_retries: int = 0
    retry_delay: float = 2.0
    timeout: float | None = None
    fallback_enabled: bool = False


@dataclass
class _Counters:
    calls: int = 0
    errors: int = 0
    failures: int = 0
    fallbacks: int = 0
    latency_ms: int = 0
    last_error: str | None = None


class BaseGenService(ABC, Generic[T]):
    """Wraps a subclass's ``_generate`` with the configured call policy."""

    service_name: str = "unknown"

    def __init__(self, config: GenServiceConfig | None = None):
        self.config = config or GenServiceConfig()
        self._stats = _Counters()

    async def execute(self, **kwargs: Any) -> GenResult[T]:
        self._stats.calls += 1
        started = time.monotonic()
        attempts = self.config.max_retries + 1
        error: Exception | None = None

        for attempt in range(attempts):
            try:
                data = await asyncio.wait_for(self._generate(**kwargs), timeout=self.config.timeout)
            except Exception as e:
                error = e
                self._stats.errors += 1
                self._stats.last_error = str(e)[:500]
                logger.warning("%s attempt %d/%d failed: %s", self.service_name, attempt + 1, attempts, e)
                if attempt + 1 < attempts:
                    # Linear backoff
                    await asyncio.sleep(self.config.retry_delay * (attempt + 1))
                continue
            return self._result(data, started, self.provider_name(), retries_used=attempt)

        if not self.config.fallback_enabled:
            self._stats.failures += 1
            raise error or RuntimeError(f"{self.service_name} made no attempt")

        logger.info("%s: all attempts failed, using fallback", self.service_name)
        try:
            data = await self._fallback(**kwargs)
        except Exception:
            self._stats.failures += 1
            raise
        self._stats.fallbacks += 1
        return self._result(
            data, started, f"{self.service_name}_fallback",
            retries_used=self.config.max_retries, fallback_used=True,
        )

    def _result(self, data: T, started: float, provider: str, **flags: Any) -> GenResult[T]:
        latency = int((time.monotonic() - started) * 1000)
        self._stats.latency_ms += latency
        return GenResult(data=data, provider=provider, latency_ms=latency, **flags)

    @abstractmethod
    async def _generate(self, **kwargs: Any) -> T:
        ...

    async def _fallback(self, **kwargs: Any) -> T:
        raise NotImplementedError(f"{self.service_name} has no fallback")

    def provider_name(self) -> str:
        return self.service_name

    def get_metrics(self) -> dict[str, Any]:
        """Usage statistics for the metrics endpoint."""
        s = self._stats
        succeeded = s.calls - s.failures
        return {
            "service": self.service_name,
            "provider": self.provider_name(),
            "total_calls": s.calls,
            "total_failures": s.failures,
            "total_errors": s.errors,
            "total_fallbacks": s.fallbacks,
            "error_rate": round(s.failures / max(s.calls, 1), 3),
            "avg_latency_ms": round(s.latency_ms / succeeded) if succeeded > 0 else 0,
            "last_error": s.last_error,
        }
