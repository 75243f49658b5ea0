"""Tests for byte-source helpers."""
import io
import tempfile
from pathlib import Path

import pytest
from file_string.core.io_helpers import (
    check_file_exists,
    close_quietly,
    read_stream_as_string,
)


class ExplodingCloseable:
    """Object whose close always fails."""

    def __init__(self) -> None:
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        raise OSError("close failed")


class TestCloseQuietly:
    """Test best-effort resource release."""

    def test_closes_resource(self) -> None:
        """Test that the resource is closed."""
        stream = io.BytesIO(b"abc")
        close_quietly(stream)
        assert stream.closed

    def test_none_is_ignored(self) -> None:
        """Test that None is accepted."""
        close_quietly(None)

    def test_close_errors_are_swallowed(self) -> None:
        """Test that errors raised by close never propagate."""
        closeable = ExplodingCloseable()
        close_quietly(closeable)
        assert closeable.close_calls == 1


class TestCheckFileExists:
    """Test the existence precondition."""

    def setup_method(self) -> None:
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self) -> None:
        """Clean up test environment."""
        import shutil

        shutil.rmtree(self.temp_dir)

    def test_existing_file(self) -> None:
        """Test that an existing file passes."""
        test_file = Path(self.temp_dir) / "present.txt"
        test_file.write_text("x")
        check_file_exists(test_file)
        check_file_exists(str(test_file))

    def test_missing_file(self) -> None:
        """Test that the error names the missing file."""
        with pytest.raises(FileNotFoundError, match="missing.txt"):
            check_file_exists(Path(self.temp_dir) / "missing.txt")

    def test_none_path(self) -> None:
        """Test that None is reported as missing."""
        with pytest.raises(FileNotFoundError):
            check_file_exists(None)


class TestReadStreamAsString:
    """Test whole-stream decoding."""

    def test_default_utf8(self) -> None:
        """Test the default encoding."""
        assert read_stream_as_string(io.BytesIO("héllo".encode("utf-8"))) == "héllo"

    def test_explicit_encoding(self) -> None:
        """Test decoding with a given encoding."""
        data = "grüße".encode("cp1252")
        assert read_stream_as_string(io.BytesIO(data), "cp1252") == "grüße"

    def test_larger_than_chunk(self) -> None:
        """Test streams spanning several chunks."""
        text = "0123456789" * 500
        assert read_stream_as_string(io.BytesIO(text.encode("ascii"))) == text

    def test_stream_left_open(self) -> None:
        """Test that the caller keeps ownership of the stream."""
        stream = io.BytesIO(b"abc")
        read_stream_as_string(stream)
        assert not stream.closed

    def test_invalid_bytes_raise(self) -> None:
        """Test that decoding is strict."""
        with pytest.raises(UnicodeDecodeError):
            read_stream_as_string(io.BytesIO(b"\xff"))
