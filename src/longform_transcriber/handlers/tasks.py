"""Task closures in the shape a job runner expects."""

from collections.abc import Callable, Sequence

from longform_transcriber.domain import CancellationToken, Task

from .transcription_handler import TranscriptionTaskHandler

TaskFunction = Callable[[str], None]
FailureFunction = Callable[[str, str], None]


def make_transcription_task(
    handler: TranscriptionTaskHandler,
    audio_url: str,
    recipient_emails: Sequence[str],
    keywords: Sequence[str],
    cancel_token: CancellationToken | None = None,
) -> tuple[TaskFunction, FailureFunction]:
    """
    Builds the work and failure-report functions for one transcription.

    Args:
        handler: Pipeline that runs the task.
        audio_url: Location of the source audio.
        recipient_emails: Who is told about the outcome.
        keywords: Words or phrases to spot in the transcript.
        cancel_token: Optional token that aborts the task between stages.

    Returns:
        ``(run, on_failure)``. ``run(task_id)`` raises TaskFailedError if any
        stage fails; the runner then calls ``on_failure(task_id, message)``,
        which never raises.
    """
    recipients = tuple(recipient_emails)

    def run(task_id: str) -> None:
        task = Task(
            id=task_id,
            audio_url=audio_url,
            recipient_emails=recipients,
            keywords=tuple(keywords),
        )
        handler.process(task, cancel_token)

    def on_failure(task_id: str, message: str) -> None:
        handler.notify_failure(task_id, recipients, message)

    return run, on_failure
