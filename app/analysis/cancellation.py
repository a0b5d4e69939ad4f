import threading
import time

from app.analysis.exceptions import AnalysisCancelledError


class CancellationToken:
    """Cooperative cancellation checked at every suspension point of a batch.

    A token is cancelled either explicitly via ``cancel()`` or implicitly once
    its optional deadline (monotonic clock) has passed.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def raise_if_cancelled(self, where: str) -> None:
        if self.cancelled:
            raise AnalysisCancelledError(f"Analysis cancelled before {where}")
