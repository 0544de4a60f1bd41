"""Subjects and bodies of the emails sent when a task ends."""

from pydantic import BaseModel

from .models import AggregatedTranscription


class EmailContent(BaseModel, frozen=True):
    subject: str
    body: str


def completion_email(task_id: str, transcription: AggregatedTranscription) -> EmailContent:
    body = "The transcript is below. It can also be found in the database.\n\n"
    if transcription.audio_url:
        body += f"Audio: {transcription.audio_url}\n\n"
    return EmailContent(
        subject=f"Transcription {task_id} Complete",
        body=body + transcription.transcript,
    )


def failure_email(task_id: str, message: str) -> EmailContent:
    return EmailContent(subject=f"Transcription {task_id} Failed", body=message)
