"""Handler that runs one transcription task from URL to notification."""

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from longform_transcriber.config import PipelineConfig
from longform_transcriber.domain import (
    AggregatedTranscription,
    ArtifactScope,
    AudioAsset,
    CancellationToken,
    Chunker,
    Segment,
    SegmentExtractor,
    SegmentResult,
    Task,
    TaskStage,
    TranscriptAggregator,
)
from longform_transcriber.domain.notifications import completion_email, failure_email
from longform_transcriber.exceptions import NotificationError, TaskFailedError
from longform_transcriber.infrastructure.interfaces import (
    ArchiveStorage,
    Downloader,
    MailTransport,
    Transcoder,
    TranscriptionService,
    TranscriptionStore,
)

logger = logging.getLogger(__name__)


class _TaskProgress:
    """
    Tracks the stage of one task and stops it when cancelled or failed.

    Segment threads also keep their own stage, so a failing segment is
    reported at the stage it was in rather than whatever stage another
    segment entered last.
    """

    def __init__(self, task_id: str, token: CancellationToken):
        self.task_id = task_id
        self.stage = TaskStage.PENDING
        self._token = token
        self._lock = threading.Lock()
        self._segment_failed = threading.Event()
        self._segment_stage = threading.local()
        self._failed_segment_stage: TaskStage | None = None

    def enter(self, stage: TaskStage, segment_index: int | None = None) -> None:
        self._token.raise_if_cancelled(self.task_id, stage.value)
        with self._lock:
            self.stage = stage
        extra = {"task_id": self.task_id, "stage": stage.value}
        if segment_index is not None:
            self._segment_stage.value = stage
            extra["segment_index"] = segment_index
        logger.info("Entering stage", extra=extra)

    def start_segment(self) -> None:
        """Resets the calling thread's segment stage to the task's stage."""
        with self._lock:
            self._segment_stage.value = self.stage

    def finish(self, stage: TaskStage) -> TaskStage:
        """Moves to a terminal stage and returns the stage it left."""
        with self._lock:
            failed_during = self._failed_segment_stage or self.stage
            self.stage = stage
        return failed_during

    def mark_segment_failed(self) -> None:
        """Records the calling segment thread's stage if it failed first."""
        stage = getattr(self._segment_stage, "value", None)
        with self._lock:
            if stage is not None and self._failed_segment_stage is None:
                self._failed_segment_stage = stage
        self._segment_failed.set()

    @property
    def segment_failed(self) -> bool:
        return self._segment_failed.is_set()


class TranscriptionTaskHandler:
    """
    Orchestrates audio-to-transcription operations.

    A task downloads the source, resamples it, plans segments, transcribes
    each segment, merges the results, then archives, persists and emails
    them when those collaborators are configured. Every file created along
    the way is owned by an ArtifactScope and removed before ``process``
    returns or raises.
    """

    def __init__(
        self,
        downloader: Downloader,
        transcoder: Transcoder,
        transcription_service: TranscriptionService,
        config: PipelineConfig,
        chunker: Chunker | None = None,
        aggregator: TranscriptAggregator | None = None,
        archive: ArchiveStorage | None = None,
        store: TranscriptionStore | None = None,
        mailer: MailTransport | None = None,
    ):
        self._downloader = downloader
        self._transcoder = transcoder
        self._transcription_service = transcription_service
        self._config = config
        self._chunker = chunker or Chunker()
        self._aggregator = aggregator or TranscriptAggregator()
        self._extractor = SegmentExtractor(transcoder)
        self._archive = archive
        self._store = store
        self._mailer = mailer

    def process(
        self, task: Task, cancel_token: CancellationToken | None = None
    ) -> AggregatedTranscription:
        """
        Runs every stage of ``task``.

        Args:
            task: The transcription request.
            cancel_token: Checked before each stage; once set the task fails
                with CancelledError at the next boundary.

        Returns:
            The aggregated transcription, with ``audio_url`` set if archived.

        Raises:
            TaskFailedError: Wrapping the first stage failure. Temporary files
                are already removed when it is raised.
        """
        progress = _TaskProgress(task.id, cancel_token or CancellationToken())
        logger.info(
            "Processing transcription task",
            extra={"task_id": task.id, "audio_url": task.audio_url},
        )

        try:
            with ArtifactScope() as artifacts:
                workspace = artifacts.directory(
                    prefix=f"task-{task.id}-", parent=self._config.work_dir
                )

                progress.enter(TaskStage.DOWNLOADING)
                source = artifacts.track(
                    self._downloader.fetch(task.audio_url, workspace)
                )

                progress.enter(TaskStage.RESAMPLING)
                resampled = AudioAsset.from_path(
                    artifacts.track(self._transcoder.resample(source))
                )

                progress.enter(TaskStage.CHUNKING)
                segments = self._chunker.plan(resampled.byte_size)
                logger.info(
                    "Planned segments",
                    extra={
                        "task_id": task.id,
                        "byte_size": resampled.byte_size,
                        "segment_count": len(segments),
                    },
                )

                results = self._transcribe_segments(task, resampled, segments, progress)

                progress.enter(TaskStage.AGGREGATING)
                transcription = self._aggregator.merge(results)

                if self._archive is not None:
                    progress.enter(TaskStage.ARCHIVING)
                    audio_url = self._archive.upload(source, task.id)
                    transcription = transcription.model_copy(
                        update={"audio_url": audio_url}
                    )

                if self._store is not None:
                    progress.enter(TaskStage.PERSISTING)
                    self._store.persist(task.id, transcription)

                progress.enter(TaskStage.NOTIFYING)
                self._notify_success(task, transcription)

        except Exception as e:
            failed_during = progress.finish(TaskStage.FAILED)
            logger.exception(
                "Transcription task failed",
                extra={"task_id": task.id, "stage": failed_during.value},
            )
            raise TaskFailedError(task.id, failed_during.value, e) from e

        progress.finish(TaskStage.COMPLETED)
        logger.info(
            "Transcription task completed",
            extra={"task_id": task.id, "segment_count": len(results)},
        )
        return transcription

    def notify_failure(
        self, task_id: str, recipients: Sequence[str], message: str
    ) -> None:
        """
        Emails ``message`` to ``recipients`` on a best-effort basis.

        Never raises: when mail is not configured, or delivery fails, the
        failure is logged instead.
        """
        if self._mailer is None or not recipients:
            logger.error(
                "Transcription failed, no failure email sent",
                extra={"task_id": task_id, "error": message},
            )
            return

        try:
            email = failure_email(task_id, message)
            self._mailer.send(recipients, email.subject, email.body)
        except Exception as e:
            logger.warning(
                "Could not send failure email",
                extra={"task_id": task_id, "recipients": list(recipients), "error": str(e)},
                exc_info=not isinstance(e, NotificationError),
            )
            return

        logger.info(
            "Failure email sent",
            extra={"task_id": task_id, "recipients": list(recipients)},
        )

    def _transcribe_segments(
        self,
        task: Task,
        resampled: AudioAsset,
        segments: list[Segment],
        progress: _TaskProgress,
    ) -> list[SegmentResult]:
        """
        Transcribes every segment on a bounded thread pool.

        Results are returned in completion order; the aggregator orders them.
        After the first failure no further segment is started and the error
        is re-raised once in-flight segments have cleaned up.
        """
        results = []
        with ThreadPoolExecutor(
            max_workers=self._config.max_concurrent_segments,
            thread_name_prefix=f"task-{task.id}",
        ) as pool:
            futures = [
                pool.submit(self._run_segment, task, resampled, segment, progress)
                for segment in segments
            ]
            try:
                for future in as_completed(futures):
                    result = future.result()
                    if result is not None:
                        results.append(result)
            except BaseException:
                progress.mark_segment_failed()
                for future in futures:
                    future.cancel()
                raise
        return results

    def _run_segment(
        self,
        task: Task,
        resampled: AudioAsset,
        segment: Segment,
        progress: _TaskProgress,
    ) -> SegmentResult | None:
        if progress.segment_failed:
            return None
        progress.start_segment()
        try:
            return self._process_segment(task, resampled, segment, progress)
        except BaseException:
            progress.mark_segment_failed()
            raise

    def _process_segment(
        self,
        task: Task,
        resampled: AudioAsset,
        segment: Segment,
        progress: _TaskProgress,
    ) -> SegmentResult:
        with ArtifactScope() as artifacts:
            if not segment.spans_whole_asset:
                progress.enter(TaskStage.EXTRACTING_SEGMENT, segment.index)
            materialized = self._extractor.materialize(resampled, segment)
            if not segment.spans_whole_asset:
                artifacts.track(materialized.path)

            progress.enter(TaskStage.TRANSCRIBING, segment.index)
            upload = artifacts.track(
                self._transcoder.convert(materialized.path, self._config.upload_format)
            )
            result = self._transcription_service.transcribe(upload, task.keywords)

        return result.model_copy(update={"index": segment.index})

    def _notify_success(self, task: Task, transcription: AggregatedTranscription) -> None:
        if self._mailer is None or not task.recipient_emails:
            logger.info(
                "Completion email skipped",
                extra={"task_id": task.id, "mail_configured": self._mailer is not None},
            )
            return

        email = completion_email(task.id, transcription)
        self._mailer.send(task.recipient_emails, email.subject, email.body)
        logger.info(
            "Completion email sent",
            extra={"task_id": task.id, "recipients": list(task.recipient_emails)},
        )
