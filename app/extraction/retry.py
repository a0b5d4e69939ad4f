import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from app.extraction.exceptions import ExternalServiceError
from app.logging.logger import Log

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry rule for one type of external call.

    ``max_attempts`` counts the first call, so ``max_attempts=2`` is one retry.
    """

    name: str
    max_attempts: int = 1
    backoff_seconds: float = 0.0
    retry_on: tuple[type[Exception], ...] = field(default=(ExternalServiceError,))

    def call(self, operation: Callable[[], T]) -> T:
        attempts = max(1, self.max_attempts)
        attempt = 1
        while True:
            try:
                return operation()
            except self.retry_on as exc:
                if attempt >= attempts:
                    raise
                Log.warning(
                    f"{self.name} call failed, retrying ({attempt}/{attempts - 1}): {exc}"
                )
                if self.backoff_seconds > 0:
                    time.sleep(self.backoff_seconds * attempt)
                attempt += 1
