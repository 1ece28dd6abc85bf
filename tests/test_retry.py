import pytest

from core.retry import retry, linear_backoff


class Flaky:
    """Fails ``failures`` times, then returns ``value``."""

    def __init__(self, failures: int, value="ok"):
        self.failures = failures
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"attempt {self.calls} failed")
        return self.value


@pytest.fixture
def delays():
    return []


@pytest.fixture
def sleep(delays):
    async def fake_sleep(delay):
        delays.append(delay)
    return fake_sleep


class TestRetry:
    """
    Tests for the retry combinator.
    """

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self, sleep, delays):
        operation = Flaky(failures=0)
        result = await retry(operation, 3, linear_backoff(1.0), sleep=sleep)

        assert result.ok
        assert result.value == "ok"
        assert result.attempts == 1
        assert delays == []

    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self, sleep, delays):
        operation = Flaky(failures=2, value=[1, 2])
        result = await retry(operation, 3, linear_backoff(1.0), sleep=sleep)

        assert result.ok
        assert result.value == [1, 2]
        assert result.attempts == 3
        assert delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_returns_failure(self, sleep, delays):
        operation = Flaky(failures=10)
        result = await retry(operation, 3, linear_backoff(0.5), sleep=sleep)

        assert not result.ok
        assert result.value is None
        assert isinstance(result.error, ConnectionError)
        assert str(result.error) == "attempt 3 failed"
        assert result.attempts == 3
        assert operation.calls == 3
        # no wait after the last attempt
        assert delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_value_or_default(self, sleep):
        failed = await retry(Flaky(failures=5), 2, linear_backoff(0), sleep=sleep)
        succeeded = await retry(Flaky(failures=0, value=[]), 2, linear_backoff(0), sleep=sleep)

        assert failed.value_or(["default"]) == ["default"]
        # falsy successful values are kept
        assert succeeded.value_or(["default"]) == []

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self, sleep):
        with pytest.raises(ValueError):
            await retry(Flaky(failures=0), 0, linear_backoff(1.0), sleep=sleep)

    def test_linear_backoff_increases(self):
        backoff = linear_backoff(1.0)
        assert [backoff(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]
