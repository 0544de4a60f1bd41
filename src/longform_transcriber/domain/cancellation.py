import threading

from longform_transcriber.exceptions import CancelledError


class CancellationToken:
    """Thread-safe flag a task checks before entering each stage."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, task_id: str, stage: str) -> None:
        if self._event.is_set():
            raise CancelledError(task_id, stage)
