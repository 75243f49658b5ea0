"""Tests for the one-shot buffer loader and its readiness gate."""
import io
import threading
import time

import pytest
from file_string.core.loader import BufferLoader, LoadState


class SlowStream(io.BytesIO):
    """BytesIO that sleeps on every read."""

    def __init__(self, data: bytes, delay: float) -> None:
        super().__init__(data)
        self.delay = delay

    def read(self, size: int = -1) -> bytes:
        time.sleep(self.delay)
        return super().read(size)


class TestBufferLoader:
    """Test loader execution and memoization."""

    def setup_method(self) -> None:
        """Collect decoded pieces."""
        self.pieces: list[str] = []

    def test_successful_load(self) -> None:
        """Test that decoded text reaches the sink."""
        loader = BufferLoader(lambda: io.BytesIO(b"hello"), "utf-8", self.pieces.append)

        assert loader.state == LoadState.PENDING
        assert loader.run() is True
        assert loader.state == LoadState.SUCCEEDED
        assert "".join(self.pieces) == "hello"

    def test_chunked_decode(self) -> None:
        """Test that multi-byte characters survive tiny chunks."""
        data = "日本語テキスト".encode("utf-8")
        loader = BufferLoader(lambda: io.BytesIO(data), "utf-8", self.pieces.append, chunk_size=1)

        loader.run()
        assert "".join(self.pieces) == "日本語テキスト"

    def test_malformed_bytes_replaced(self) -> None:
        """Test decode substitution."""
        loader = BufferLoader(lambda: io.BytesIO(b"a\xffb"), "utf-8", self.pieces.append)

        assert loader.run() is True
        assert "".join(self.pieces) == "a\ufffdb"

    def test_open_failure(self) -> None:
        """Test that failing to open the source fails the load."""

        def open_source():
            raise OSError("cannot open")

        loader = BufferLoader(open_source, "utf-8", self.pieces.append)

        assert loader.run() is False
        assert loader.state == LoadState.FAILED
        assert loader.ready() is False

    def test_source_closed_on_success(self) -> None:
        """Test that the handle is released after reading."""
        stream = io.BytesIO(b"data")
        BufferLoader(lambda: stream, "utf-8", self.pieces.append).run()
        assert stream.closed

    def test_run_only_once(self) -> None:
        """Test that a loader cannot run twice."""
        loader = BufferLoader(lambda: io.BytesIO(b""), "utf-8", self.pieces.append)
        loader.run()

        with pytest.raises(RuntimeError):
            loader.run()

    def test_ready_is_memoized(self) -> None:
        """Test that repeated ready calls do not re-run the load."""
        opened = []

        def open_source():
            opened.append(True)
            return io.BytesIO(b"abc")

        loader = BufferLoader(open_source, "utf-8", self.pieces.append)
        loader.run()

        assert all(loader.ready() for _ in range(5))
        assert len(opened) == 1

    def test_readers_block_until_loaded(self) -> None:
        """Test that concurrent readers wait for an in-flight load."""
        loader = BufferLoader(
            lambda: SlowStream(b"x" * 10, delay=0.05), "utf-8", self.pieces.append, chunk_size=2
        )
        results = []

        def reader() -> None:
            results.append((loader.ready(), loader.state))

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for thread in readers:
            thread.start()

        loader.run()

        for thread in readers:
            thread.join()

        assert results == [(True, LoadState.SUCCEEDED)] * 4
        assert "".join(self.pieces) == "x" * 10
