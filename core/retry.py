import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryResult(Generic[T]):
    """
    Outcome of a retried operation.

    Attributes
    ----------
    ok : bool
        True if one of the attempts succeeded
    value : T | None
        Value returned by the successful attempt
    error : BaseException | None
        Exception raised by the last failed attempt
    attempts : int
        Number of attempts made
    """
    ok: bool
    value: T | None = None
    error: BaseException | None = None
    attempts: int = 0

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default


def linear_backoff(base_delay: float) -> Callable[[int], float]:
    """
    Build a backoff function waiting ``base_delay * attempt`` seconds.

    Parameters
    ----------
    base_delay : float
        Delay unit in seconds

    Returns
    -------
    Callable[[int], float]
        Maps the number of the failed attempt (1-based) to a delay
    """
    def backoff(attempt: int) -> float:
        return base_delay * attempt
    return backoff


async def retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    backoff: Callable[[int], float],
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
) -> RetryResult[T]:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    Failures of the operation never propagate, the caller decides what to
    substitute when the result is not ok. Cancellation is not swallowed.

    Parameters
    ----------
    operation : Callable[[], Awaitable[T]]
        Zero-argument coroutine factory, called once per attempt
    max_attempts : int
        Total number of attempts, at least 1
    backoff : Callable[[int], float]
        Delay before the next attempt, given the failed attempt number
    sleep : Callable[[float], Awaitable]
        Sleep function, ``asyncio.sleep`` by default

    Returns
    -------
    RetryResult[T]
        Tagged success or failure
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: BaseException | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            value = await operation()
        except Exception as e:
            last_error = e
            if attempt < max_attempts:
                await sleep(backoff(attempt))
            continue
        return RetryResult(ok=True, value=value, attempts=attempt)

    return RetryResult(ok=False, error=last_error, attempts=max_attempts)
