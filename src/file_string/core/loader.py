"""One-shot loader that decodes a byte source into a text buffer."""
import codecs
import logging
import time
from collections.abc import Callable
from concurrent.futures import Future
from enum import Enum
from typing import BinaryIO

from .io_helpers import close_quietly

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024


class LoadState(Enum):
    """Lifecycle of a load. Leaves PENDING exactly once."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BufferLoader:
    """Run a chunked, decode-as-you-stream load exactly once.

    The outcome is memoized in a future created before the load starts, so
    any caller of ``ready()`` that arrives while the load is in flight
    blocks until it finishes and every caller sees the same result.
    Malformed byte sequences are replaced with U+FFFD rather than failing
    the load.
    """

    def __init__(
        self,
        open_source: Callable[[], BinaryIO],
        encoding: str,
        sink: Callable[[str], None],
        chunk_size: int = CHUNK_SIZE,
    ):
        """Initialize loader.

        Args:
            open_source: Callable returning the binary handle to read from
            encoding: Codec name used to decode the bytes
            sink: Callback receiving each decoded piece of text
            chunk_size: Number of bytes read per chunk
        """
        self.open_source = open_source
        self.encoding = encoding
        self.sink = sink
        self.chunk_size = chunk_size
        self._future: Future = Future()
        self._started = False

    @property
    def state(self) -> LoadState:
        if not self._future.done():
            return LoadState.PENDING
        return LoadState.SUCCEEDED if self._future.result() else LoadState.FAILED

    def run(self) -> bool:
        """Execute the load in the calling thread.

        Returns:
            True if the whole source was read and decoded

        Raises:
            RuntimeError: If the loader already ran
        """
        if self._started:
            raise RuntimeError("Loader has already run")
        self._started = True
        self._future.set_running_or_notify_cancel()

        start_time = time.perf_counter()
        decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")
        source = None
        total = 0
        try:
            source = self.open_source()
            while True:
                chunk = source.read(self.chunk_size)
                if not chunk:
                    break
                text = decoder.decode(chunk)
                if text:
                    self.sink(text)
                    total += len(text)
            tail = decoder.decode(b"", final=True)
            if tail:
                self.sink(tail)
                total += len(tail)
            succeeded = True
        except Exception as e:
            logger.error(f"Failed to load text buffer: {e}")
            succeeded = False
        finally:
            close_quietly(source)

        duration = time.perf_counter() - start_time
        logger.debug(f"Loaded {total} characters in {duration:.4f}s (ok={succeeded})")
        self._future.set_result(succeeded)
        return succeeded

    def ready(self) -> bool:
        """Block until the load finished and report whether it succeeded."""
        return self._future.result()
