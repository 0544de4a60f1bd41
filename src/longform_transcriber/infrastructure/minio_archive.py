"""MinIO implementation of the ArchiveStorage interface."""

import logging
import mimetypes
from datetime import timedelta
from pathlib import Path

from minio import Minio

from longform_transcriber.exceptions import ArchiveError

from .interfaces import ArchiveStorage

logger = logging.getLogger(__name__)


class MinioArchiveStorage(ArchiveStorage):
    """Keeps the original audio of finished tasks in a MinIO bucket."""

    def __init__(self, client: Minio, bucket_name: str, url_expiry: timedelta):
        self._client = client
        self._bucket_name = bucket_name
        self._url_expiry = url_expiry

    def upload(self, path: Path, task_id: str) -> str:
        object_name = f"{task_id}/{path.name}"
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        try:
            self._client.fput_object(
                bucket_name=self._bucket_name,
                object_name=object_name,
                file_path=str(path),
                content_type=content_type,
            )
            url = self._client.presigned_get_object(
                self._bucket_name, object_name, expires=self._url_expiry
            )
        except Exception as e:
            logger.exception(
                "MinIO upload failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise ArchiveError(object_name, e) from e

        logger.info(
            "Audio archived to MinIO",
            extra={"bucket_name": self._bucket_name, "object_name": object_name},
        )
        return url

    def ensure_bucket_exists(self) -> None:
        if not self._client.bucket_exists(self._bucket_name):
            self._client.make_bucket(self._bucket_name)
            logger.info("Bucket created", extra={"bucket_name": self._bucket_name})
        else:
            logger.info(
                "Bucket already exists", extra={"bucket_name": self._bucket_name}
            )
