"""Safety mechanisms for writing a buffer back to its file."""
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from filelock import FileLock

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 30


class SafeFileWrite:
    """Context manager holding an inter-process lock around a file write.

    The lock lives in a sibling ``<name>.lock`` file. Inside the context,
    ``write_in_place`` truncates and rewrites the target, while
    ``write_atomic`` goes through a temporary file in the same directory
    that is renamed over the target.
    """

    def __init__(
        self, file_path: Union[str, Path], timeout: Optional[float] = DEFAULT_LOCK_TIMEOUT
    ):
        """Initialize safe file write.

        Args:
            file_path: Path of the file to write
            timeout: Lock timeout in seconds (None disables locking)
        """
        self.file_path = Path(file_path)
        self.timeout = timeout
        self.lock_path = Path(f"{self.file_path}.lock")
        self.temp_path: Optional[Path] = None
        self.lock: Optional[FileLock] = None

    def __enter__(self):
        """Enter context manager."""
        if self.timeout is not None:
            self.lock = FileLock(self.lock_path, timeout=self.timeout)
            self.lock.acquire()
            logger.info(f"Acquired lock for {self.file_path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager."""
        try:
            if exc_type is not None:
                logger.error(f"Write to {self.file_path} failed: {exc_val}")
        finally:
            if self.temp_path and self.temp_path.exists():
                os.remove(self.temp_path)
                self.temp_path = None

            if self.lock:
                self.lock.release()
                logger.info(f"Released lock for {self.file_path}")

    def get_temp_file(self) -> Path:
        """Get a temporary file in the same directory as the target."""
        if self.temp_path is None:
            with tempfile.NamedTemporaryFile(
                dir=self.file_path.parent,
                prefix=f".{self.file_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                self.temp_path = Path(tmp.name)

        return self.temp_path

    def write_in_place(self, data: bytes) -> int:
        """Truncate the target and write data into it.

        Returns:
            Number of bytes written
        """
        with open(self.file_path, "wb") as f:
            return f.write(data)

    def write_atomic(self, data: bytes) -> int:
        """Write data to a temporary file, then rename it over the target.

        The target keeps its permission bits.

        Returns:
            Number of bytes written
        """
        temp_file = self.get_temp_file()
        if self.file_path.exists():
            shutil.copymode(self.file_path, temp_file)
        with open(temp_file, "wb") as f:
            written = f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_file, self.file_path)
        self.temp_path = None
        logger.info(f"Atomically replaced {self.file_path}")
        return written


@contextmanager
def safe_write_context(file_path: Union[str, Path], timeout: Optional[float] = DEFAULT_LOCK_TIMEOUT):
    """Context manager for locked writes to a file.

    Args:
        file_path: Path to file to write
        timeout: Lock timeout in seconds (None disables locking)

    Yields:
        SafeFileWrite instance
    """
    with SafeFileWrite(file_path, timeout) as safe_write:
        yield safe_write


def write_bytes_safely(
    file_path: Union[str, Path],
    data: bytes,
    atomic: bool = False,
    timeout: Optional[float] = DEFAULT_LOCK_TIMEOUT,
) -> int:
    """Write data to a file under the file lock.

    Args:
        file_path: Target file
        data: Bytes replacing the whole file content
        atomic: Write through a temporary file and rename
        timeout: Lock timeout in seconds (None disables locking)

    Returns:
        Number of bytes written
    """
    with safe_write_context(file_path, timeout) as safe_write:
        if atomic:
            return safe_write.write_atomic(data)
        return safe_write.write_in_place(data)
