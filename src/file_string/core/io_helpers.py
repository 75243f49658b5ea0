"""Small byte-source helpers used by the text buffer."""
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024


def close_quietly(closeable) -> None:
    """Close a resource, ignoring any error raised while closing.

    Args:
        closeable: Object with a ``close()`` method, or None
    """
    if closeable is None:
        return
    try:
        closeable.close()
    except Exception as e:
        logger.debug(f"Ignored error while closing {closeable!r}: {e}")


def check_file_exists(path: Optional[Union[str, Path]]) -> None:
    """Raise FileNotFoundError unless the given path exists.

    Args:
        path: Path to check

    Raises:
        FileNotFoundError: If path is None or missing
    """
    if path is None:
        raise FileNotFoundError()
    if not os.path.exists(path):
        raise FileNotFoundError(f"The file {Path(path).name} does not exist.")


def read_stream_as_string(stream: BinaryIO, encoding: Optional[str] = None) -> str:
    """Read a binary stream to its end and decode it.

    The stream is left open.

    Args:
        stream: Binary stream to read
        encoding: Encoding used to decode the bytes (UTF-8 if None)

    Returns:
        Decoded content
    """
    chunks = []
    while True:
        chunk = stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks).decode(encoding or "utf-8")
