"""Stream sources: zero-argument callables that open a fresh stream on every call.

Nothing here holds a file handle between calls. The caller of a source owns
and closes the stream it gets back.
"""

import io
from typing import BinaryIO, Callable

StreamSource = Callable[[], BinaryIO]


def file_source(path: str) -> StreamSource:
    """Open the file at path for binary reading on every call."""
    if not path:
        raise ValueError("Path cannot be empty")

    def open_file() -> BinaryIO:
        return open(path, "rb")
    return open_file


def bytes_source(data: bytes) -> StreamSource:
    """Wrap the same bytes in a new BytesIO on every call."""
    if data is None:
        raise ValueError("Data cannot be None")
    return lambda: io.BytesIO(data)


def stream_source(stream: BinaryIO) -> StreamSource:
    """Read an open stream to the end once, close it, and serve copies of its content."""
    if stream is None:
        raise ValueError("Stream cannot be None")
    try:
        data = stream.read()
    finally:
        stream.close()
    return bytes_source(data)
