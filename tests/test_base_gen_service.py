"""Tests for the retry / timeout / fallback wrapper and its counters."""

import asyncio

import pytest

from storyforge.services.base_gen_service import BaseGenService, GenServiceConfig


class FlakyService(BaseGenService[str]):
    service_name = "flaky"

    def __init__(self, failures: int, config: GenServiceConfig | None = None, delay: float = 0.0):
        super().__init__(config)
        self.failures = failures
        self.delay = delay
        self.attempts = 0

    async def _generate(self, **kwargs) -> str:
        self.attempts += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.attempts <= self.failures:
            raise RuntimeError(f"boom {self.attempts}")
        return f"ok:{kwargs.get('prompt')}"

    async def _fallback(self, **kwargs) -> str:
        return "placeholder"


async def test_single_attempt_by_default():
    service = FlakyService(failures=1)
    with pytest.raises(RuntimeError, match="boom 1"):
        await service.execute(prompt="x")
    assert service.attempts == 1

    metrics = service.get_metrics()
    assert metrics["total_calls"] == 1
    assert metrics["total_failures"] == 1
    assert metrics["error_rate"] == 1.0
    assert metrics["last_error"] == "boom 1"


async def test_retries_until_success():
    service = FlakyService(failures=2, config=GenServiceConfig(max_retries=2, retry_delay=0))
    result = await service.execute(prompt="harbor")
    assert result.data == "ok:harbor"
    assert result.retries_used == 2
    assert result.fallback_used is False

    metrics = service.get_metrics()
    assert metrics["total_errors"] == 2
    assert metrics["total_failures"] == 0


async def test_fallback_after_exhausting_attempts():
    service = FlakyService(failures=5, config=GenServiceConfig(fallback_enabled=True))
    result = await service.execute(prompt="harbor")
    assert result.data == "placeholder"
    assert result.fallback_used is True
    assert result.provider == "flaky_fallback"
    assert service.get_metrics()["total_fallbacks"] == 1


async def test_timeout_counts_as_failure():
    service = FlakyService(failures=0, config=GenServiceConfig(timeout=0.01), delay=0.5)
    with pytest.raises(asyncio.TimeoutError):
        await service.execute(prompt="slow")
    assert service.get_metrics()["total_failures"] == 1
