"""Scoped ownership of the temporary files a task creates."""

import logging
import shutil
import tempfile
from contextlib import ExitStack
from pathlib import Path

logger = logging.getLogger(__name__)


def _remove_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove temporary file", extra={"path": str(path)})


def _remove_directory(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning(
            "Could not remove temporary directory", extra={"path": str(path)}
        )


class ArtifactScope:
    """
    Owns temporary files and directories until the scope exits.

    Paths are registered the moment they are created and released in reverse
    order when the ``with`` block ends, whether it ends normally or by an
    exception. Release problems are logged and never replace the exception
    that ended the block.

    Example::

        with ArtifactScope() as artifacts:
            wav = artifacts.track(transcoder.resample(source))
            ...
    """

    def __init__(self):
        self._stack = ExitStack()

    def __enter__(self) -> "ArtifactScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._stack.close()
        return False

    def track(self, path: Path | str) -> Path:
        """Registers an existing file for removal and returns it as a Path."""
        path = Path(path)
        self._stack.callback(_remove_file, path)
        return path

    def directory(self, prefix: str, parent: Path | None = None) -> Path:
        """Creates a fresh directory that is removed with everything inside it."""
        if parent is not None:
            parent.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))
        self._stack.callback(_remove_directory, path)
        return path
