import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from shared.logging import get_logger

T = TypeVar("T")

logger = get_logger("retry")

RETRYABLE_STATUS_CODES = frozenset({403, 429})


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 4
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0
    jitter_ratio: float = 0.25


def compute_sleep_seconds(attempt: int, config: RetryConfig) -> float:
    exponential = min(config.base_delay_seconds * (2 ** (attempt - 1)), config.max_delay_seconds)
    return exponential * (1 + random.uniform(0, config.jitter_ratio))


def is_retryable_status(status_code: int) -> bool:
    """GitHub signals secondary rate limits with 403 as well as 429."""
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


def call_with_retry(
    operation_name: str,
    fn: Callable[[], T],
    is_retryable_exception: Callable[[Exception], bool],
    is_retryable_result: Optional[Callable[[T], bool]] = None,
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    cfg = config or RetryConfig()

    for attempt in range(1, cfg.max_attempts + 1):
        last_attempt = attempt == cfg.max_attempts
        try:
            result = fn()
        except Exception as exc:  # noqa: BLE001
            if last_attempt or not is_retryable_exception(exc):
                raise
            logger.warning(
                "retrying_after_exception",
                extra={"extra": {"operation": operation_name, "attempt": attempt, "error": str(exc)}},
            )
            sleep(compute_sleep_seconds(attempt, cfg))
            continue

        if is_retryable_result and is_retryable_result(result) and not last_attempt:
            logger.warning(
                "retrying_after_result",
                extra={"extra": {"operation": operation_name, "attempt": attempt}},
            )
            sleep(compute_sleep_seconds(attempt, cfg))
            continue
        return result

    raise RuntimeError(f"Retry loop exhausted unexpectedly for {operation_name}")
