"""Custom exceptions for the transcription pipeline."""

from pathlib import Path


def _with_cause(message: str, cause: Exception | None) -> str:
    if cause is None:
        return message
    return f"{message}: {cause}"


class PipelineError(Exception):
    """Base class for every failure raised while running a transcription task."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(_with_cause(message, cause))


class DownloadError(PipelineError):
    """Raised when the source audio cannot be fetched."""

    def __init__(self, url: str, cause: Exception | None = None):
        self.url = url
        super().__init__(f"Failed to download '{url}'", cause)


class TranscodeError(PipelineError):
    """Raised when the external transcoder rejects a file."""

    def __init__(self, path: Path | str, cause: Exception | None = None):
        self.path = Path(path)
        self.diagnostic = str(cause) if cause is not None else ""
        super().__init__(f"Failed to transcode '{self.path.name}'", cause)


class ExtractionError(PipelineError):
    """Raised when a segment cannot be cut out of the resampled audio."""

    def __init__(
        self,
        segment_index: int,
        diagnostic: str = "",
        cause: Exception | None = None,
    ):
        self.segment_index = segment_index
        self.diagnostic = diagnostic
        super().__init__(f"Failed to extract segment {segment_index}", cause)


class TranscriptionError(PipelineError):
    """Raised when the transcription service fails on a segment."""

    def __init__(self, file_name: str, cause: Exception | None = None):
        self.file_name = file_name
        super().__init__(f"Failed to transcribe audio file '{file_name}'", cause)


class ArchiveError(PipelineError):
    """Raised when uploading the source audio to object storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        super().__init__(f"Failed to archive '{object_name}'", cause)


class PersistenceError(PipelineError):
    """Raised when saving a transcription to the database fails."""

    def __init__(self, task_id: str, cause: Exception | None = None):
        self.task_id = task_id
        super().__init__(f"Failed to persist transcription for task '{task_id}'", cause)


class NotificationError(PipelineError):
    """Raised when an email cannot be sent."""

    def __init__(self, recipients: list[str], cause: Exception | None = None):
        self.recipients = list(recipients)
        super().__init__(f"Failed to send email to {', '.join(recipients)}", cause)


class CancelledError(PipelineError):
    """Raised at a stage boundary once the task's cancellation token is set."""

    def __init__(self, task_id: str, stage: str):
        self.task_id = task_id
        self.stage = stage
        super().__init__(f"Task '{task_id}' was cancelled before {stage}")


class EventPublishError(PipelineError):
    """Raised when publishing an event to the message broker fails."""

    def __init__(self, routing_key: str, cause: Exception | None = None):
        self.routing_key = routing_key
        super().__init__(
            f"Failed to publish event with routing key '{routing_key}'", cause
        )


class TaskFailedError(Exception):
    """Wraps the failure that ended a task with the task id and stage."""

    def __init__(self, task_id: str, stage: str, cause: Exception):
        self.task_id = task_id
        self.stage = stage
        self.cause = cause
        super().__init__(f"Transcription task '{task_id}' failed during {stage}: {cause}")
