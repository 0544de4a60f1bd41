"""httpx implementation of the Downloader interface."""

import logging
import time
from pathlib import Path, PurePosixPath

import httpx

from longform_transcriber.exceptions import DownloadError

from .interfaces import Downloader

logger = logging.getLogger(__name__)


def file_name_from_url(url: str) -> str:
    """
    Derives a unique local file name from the last path segment of ``url``.

    The query string is dropped and a nanosecond timestamp is prepended so
    concurrent tasks fetching the same URL never collide.
    """
    name = PurePosixPath(httpx.URL(url).path).name or "audio"
    return f"{time.time_ns()}-{name}"


class HttpDownloader(Downloader):
    """Streams remote audio to disk over HTTP(S)."""

    def __init__(self, client: httpx.Client, chunk_size: int = 1024 * 1024):
        self._client = client
        self._chunk_size = chunk_size

    def fetch(self, url: str, directory: Path) -> Path:
        path = directory / file_name_from_url(url)
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with open(path, "wb") as f:
                    for chunk in response.iter_bytes(self._chunk_size):
                        f.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            logger.exception("Audio download failed", extra={"url": url})
            path.unlink(missing_ok=True)
            raise DownloadError(url, e) from e

        logger.info(
            "Audio downloaded",
            extra={"url": url, "path": str(path), "byte_size": path.stat().st_size},
        )
        return path
