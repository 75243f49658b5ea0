"""In-memory, mutable character buffer over the content of a file or byte stream."""

from .core import (
    BufferLoader,
    FileString,
    LoadState,
    SafeFileWrite,
    check_file_exists,
    close_quietly,
    read_stream_as_string,
    safe_write_context,
)

__version__ = "0.1.0"

__all__ = [
    # Text buffer
    "FileString",
    "LoadState",
    "BufferLoader",
    # Flush safety
    "SafeFileWrite",
    "safe_write_context",
    # Byte-source helpers
    "close_quietly",
    "check_file_exists",
    "read_stream_as_string",
]
