"""Mutable, lazily loaded character buffer backed by a file or byte stream."""
import codecs
import io
import logging
import os
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .io_helpers import check_file_exists
from .loader import CHUNK_SIZE, BufferLoader, LoadState
from .safety import DEFAULT_LOCK_TIMEOUT, write_bytes_safely

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"
DEFAULT_STREAM_CAPACITY = 1024
MIN_CAPACITY = 50
MAX_CAPACITY = 2**31 - 1
LOAD_FACTOR = 0.75

NUL = "\0"
NOT_LOADED = "FILE-STRING NOT LOADED"


class FileString(Sequence):
    """Character sequence holding the decoded content of a file or stream.

    The content is loaded once, at construction, and can then be read by
    index or range and spliced with ``replace``. A buffer built from a file
    can write its current content back with ``flush``.

    If loading fails the buffer stays usable but empty: it reports a length
    of 0, never compares equal to anything, hashes to 0 and ignores
    ``replace`` and ``flush``. Load errors are logged, not raised.

    Every operation touching the content runs under a per-instance lock;
    ``length()`` reads the size without it.
    """

    def __init__(
        self,
        source: Union[str, Path, BinaryIO],
        encoding: str = DEFAULT_ENCODING,
        *,
        chunk_size: int = CHUNK_SIZE,
        lock_timeout: Optional[float] = DEFAULT_LOCK_TIMEOUT,
    ):
        """Initialize and load the buffer.

        Args:
            source: Path of a regular file, or a readable binary stream.
                A stream is closed once it has been read.
            encoding: Encoding used to decode on load and encode on flush
            chunk_size: Number of bytes read per chunk while loading
            lock_timeout: File lock timeout used by flush (None disables it)

        Raises:
            ValueError: If source or encoding is None, or the path is not
                a regular file
            FileNotFoundError: If the path does not exist
            LookupError: If the encoding is unknown or not a text encoding
            TypeError: If source is neither a path nor a binary stream
        """
        if source is None:
            raise ValueError("The source cannot be None.")
        if encoding is None:
            raise ValueError("The encoding cannot be None.")
        codec = codecs.lookup(encoding)
        if not getattr(codec, "_is_text_encoding", True):
            raise LookupError(f"{encoding!r} is not a text encoding")
        self._encoding = codec.name

        self._path: Optional[Path] = None
        self._stream: Optional[BinaryIO] = None
        if isinstance(source, (str, os.PathLike)):
            path = Path(source)
            check_file_exists(path)
            if not path.is_file():
                raise ValueError(f"The given file is not a regular file: {path}")
            self._path = path
        elif hasattr(source, "read"):
            self._stream = source
        else:
            raise TypeError(f"Unsupported source type: {type(source).__name__}")

        self.lock_timeout = lock_timeout
        self._lock = threading.RLock()
        self._content: list[str] = []
        self._size = 0
        self._hash: Optional[int] = None

        self._loader = BufferLoader(
            self._open_source, self._encoding, self._append, chunk_size
        )
        with self._lock:
            if not self._loader.run():
                # Partially decoded content is never exposed
                self._content = []
                self._size = 0

    @classmethod
    def from_bytes(cls, data: bytes, encoding: str = DEFAULT_ENCODING) -> "FileString":
        """Build a buffer from in-memory bytes."""
        return cls(io.BytesIO(data), encoding)

    # Loading

    def _initial_capacity(self) -> int:
        if self._path is None:
            return DEFAULT_STREAM_CAPACITY

        length = self._path.stat().st_size
        if length > MAX_CAPACITY:
            return MAX_CAPACITY // 2
        if length < MIN_CAPACITY:
            return MIN_CAPACITY
        return length // 2

    def _open_source(self) -> BinaryIO:
        self._content = [NUL] * self._initial_capacity()
        if self._path is not None:
            return open(self._path, "rb")
        return self._stream

    def _append(self, text: str) -> None:
        length = len(text)
        self._ensure_capacity(self._size + length)
        self._content[self._size:self._size + length] = text
        self._size += length

    def _ensure_capacity(self, minimum: int) -> None:
        """Grow the backing list to hold at least ``minimum`` characters."""
        capacity = len(self._content)
        if capacity >= minimum:
            return

        new_capacity = int(capacity * (1 + LOAD_FACTOR))
        if new_capacity < minimum:
            new_capacity = minimum
        new_content = [NUL] * new_capacity
        new_content[:self._size] = self._content[:self._size]
        self._content = new_content

    def ready(self) -> bool:
        """Wait for the load to finish and report whether it succeeded."""
        return self._loader.ready()

    # Properties

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def state(self) -> LoadState:
        return self._loader.state

    @property
    def capacity(self) -> int:
        """Current length of the backing storage."""
        return len(self._content)

    # Reading

    def length(self) -> int:
        """Number of characters, or 0 if the buffer failed to load."""
        if not self.ready():
            return 0
        return self._size

    def char_at(self, index: int) -> str:
        """Get the character at ``index``.

        Raises:
            IndexError: If index is outside ``[0, length())``
        """
        if index < 0 or index >= self._size:
            raise IndexError(f"Index {index} out of range")
        if not self.ready():
            return NUL

        with self._lock:
            if index >= self._size:
                raise IndexError(f"Index {index} out of range")
            return self._content[index]

    def sub_sequence(self, start: int, end: int) -> Optional[str]:
        """Copy the characters in ``[start, end)``.

        Args:
            start: First index, inclusive
            end: Last index, exclusive

        Returns:
            The substring, or None if the buffer failed to load

        Raises:
            ValueError: If end is lower than start
            IndexError: If the range exceeds the content
        """
        if end < start:
            raise ValueError("The given end value cannot be lower than the start index.")
        if not self.ready():
            return None

        with self._lock:
            if start < 0 or end > self._size:
                raise IndexError(f"Range [{start}, {end}) out of bounds for length {self._size}")
            return "".join(self._content[start:end])

    # Writing

    def replace(self, start: int, end: int, replacement: str) -> None:
        """Replace the characters in ``[start, end)`` with ``replacement``.

        Does nothing if the buffer failed to load.

        Raises:
            ValueError: If end is lower than start
            IndexError: If the range exceeds the content
        """
        if not self.ready():
            return

        with self._lock:
            if end < start:
                raise ValueError("The given end value cannot be lower than the start index.")
            if start < 0 or end > self._size:
                raise IndexError(f"Range [{start}, {end}) out of bounds for length {self._size}")

            inserted = len(replacement)
            offset = inserted - (end - start)
            if offset != 0:
                new_content = [NUL] * (self._size + offset)
                new_content[:start] = self._content[:start]
                new_content[start + inserted:] = self._content[end:self._size]
                self._content = new_content
            self._content[start:start + inserted] = replacement
            self._size += offset
            self._hash = None

    def flush(self, atomic: bool = False) -> None:
        """Write the current content back to the source file.

        Does nothing for stream-backed buffers or buffers that failed to
        load. Characters the encoding cannot represent are replaced.

        Args:
            atomic: Write a temporary file and rename it over the original

        Raises:
            OSError: If the file cannot be written or locked
        """
        if self._path is None or not self.ready():
            return

        with self._lock:
            data = "".join(self._content[:self._size]).encode(self._encoding, errors="replace")
            written = write_bytes_safely(
                self._path, data, atomic=atomic, timeout=self.lock_timeout
            )
        logger.info(f"Flushed {written} bytes to {self._path}")

    # Comparison

    def hash_code(self) -> int:
        """Polynomial hash (31 * h + c) of the content, as a signed 32-bit int."""
        if not self.ready():
            return 0

        with self._lock:
            if self._hash is None:
                h = 0
                for i in range(self._size):
                    h = (31 * h + ord(self._content[i])) & 0xFFFFFFFF
                if h >= 0x80000000:
                    h -= 0x100000000
                self._hash = h
            return self._hash

    def equals(self, other) -> bool:
        """Compare the content with another character sequence.

        A buffer that failed to load is never equal to anything.
        """
        if not self.ready():
            return False
        if other is self:
            return True
        if isinstance(other, FileString):
            if not other.ready():
                return False
            other = str(other)
        elif isinstance(other, (bytes, bytearray)) or not isinstance(other, Sequence):
            return False

        with self._lock:
            if len(other) != self._size:
                return False
            for i in range(self._size):
                if self._content[i] != other[i]:
                    return False
            return True

    # Python protocol

    def __len__(self) -> int:
        return self.length()

    def __getitem__(self, key):
        if isinstance(key, slice):
            start, stop, step = key.indices(self.length())
            if step != 1:
                raise ValueError("Extended slices are not supported")
            if stop <= start:
                return ""
            return self.sub_sequence(start, stop) or ""
        if key < 0:
            key += self.length()
        return self.char_at(key)

    def __eq__(self, other) -> bool:
        return self.equals(other)

    def __ne__(self, other) -> bool:
        return not self.equals(other)

    def __hash__(self) -> int:
        return self.hash_code()

    def __str__(self) -> str:
        if not self.ready():
            return NOT_LOADED
        with self._lock:
            return "".join(self._content[:self._size])

    def __repr__(self) -> str:
        source = str(self._path) if self._path is not None else "<stream>"
        return f"FileString({source!r}, encoding={self._encoding!r}, state={self.state.value})"
