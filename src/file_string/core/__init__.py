"""Core text buffer modules."""

from .buffer import (
    DEFAULT_ENCODING,
    DEFAULT_STREAM_CAPACITY,
    LOAD_FACTOR,
    MAX_CAPACITY,
    MIN_CAPACITY,
    NOT_LOADED,
    FileString,
)
from .io_helpers import check_file_exists, close_quietly, read_stream_as_string
from .loader import CHUNK_SIZE, BufferLoader, LoadState
from .safety import DEFAULT_LOCK_TIMEOUT, SafeFileWrite, safe_write_context, write_bytes_safely

__all__ = [
    # Text buffer
    'FileString',
    'DEFAULT_ENCODING',
    'DEFAULT_STREAM_CAPACITY',
    'MIN_CAPACITY',
    'MAX_CAPACITY',
    'LOAD_FACTOR',
    'NOT_LOADED',

    # Loading
    'BufferLoader',
    'LoadState',
    'CHUNK_SIZE',

    # Flush safety
    'SafeFileWrite',
    'safe_write_context',
    'write_bytes_safely',
    'DEFAULT_LOCK_TIMEOUT',

    # Byte-source helpers
    'close_quietly',
    'check_file_exists',
    'read_stream_as_string',
]
