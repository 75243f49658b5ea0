#!/usr/bin/env python3
"""Basic usage examples for the file-string library."""

import io
import logging
import os
import tempfile

from file_string import FileString


def file_buffer_example():
    """Demonstrate editing a file through a buffer."""
    print("=== File Buffer Example ===")

    with tempfile.NamedTemporaryFile(mode="wb", suffix=".txt", delete=False) as tmp:
        tmp.write(b"hello world")
        tmp_path = tmp.name

    try:
        buffer = FileString(tmp_path)
        print(f"Loaded {buffer.length()} characters: {buffer}")
        print(f"First character: {buffer.char_at(0)!r}")
        print(f"Characters 6-11: {buffer.sub_sequence(6, 11)!r}")

        buffer.replace(6, 11, "there!!")
        print(f"After replace: {buffer} ({len(buffer)} characters)")

        buffer.flush()
        with open(tmp_path, "rb") as f:
            print(f"File now contains: {f.read()!r}")

        reloaded = FileString(tmp_path)
        print(f"Reloaded buffer equal to edited one: {reloaded == buffer}")

    finally:
        os.unlink(tmp_path)
        if os.path.exists(f"{tmp_path}.lock"):
            os.unlink(f"{tmp_path}.lock")


def stream_buffer_example():
    """Demonstrate a read-only buffer over a byte stream."""
    print("\n=== Stream Buffer Example ===")

    buffer = FileString(io.BytesIO(b"caf\xc3\xa9 \xff"), "utf-8")
    print(f"Decoded with substitution: {str(buffer)!r}")
    print(f"Hash code: {buffer.hash_code()}")

    buffer.replace(0, 4, "tea")
    print(f"Edited in memory: {str(buffer)!r}")

    # Stream-backed buffers have nowhere to write to
    buffer.flush()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    file_buffer_example()
    stream_buffer_example()

    print("\n=== All examples completed successfully! ===")
