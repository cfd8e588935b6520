"""Plain binary files used as the backing store of checkpointed buffers."""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

_log = logging.getLogger(__name__)

DEFAULT_PATH = "./"

BytesLike = Union[bytes, bytearray, memoryview]


class StdFileAccessor:
    """Reads and writes one buffer's contents to a single binary file.

    A ``path`` that starts with ``/`` or ``./`` is used as given; any other
    path is taken relative to ``default_path``.
    """

    def __init__(self, size: int, path: str, default_path: str = DEFAULT_PATH) -> None:
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        self.size = size
        self.path = path
        self.default_path = default_path
        self.file_offset = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self.size!r}, path={self.path!r}, "
            f"default_path={self.default_path!r})"
        )

    def full_path(self) -> str:
        """The location of the backing file."""
        if self.path.startswith("/") or self.path.startswith("./"):
            return self.path
        return os.path.join(self.default_path, self.path)

    def read_file(self, size: Optional[int] = None) -> bytes:
        """Read up to ``size`` bytes (the buffer size by default) from the file.

        A file that cannot be opened yields no data; a file holding less
        than requested yields what it holds. Both cases are logged.
        """
        wanted = self.size if size is None else size
        if wanted < 0:
            raise ValueError(f"size must be non-negative, got {wanted}")
        chunks = []
        read = 0
        try:
            with open(self.full_path(), "rb") as stream:
                while read < wanted:
                    chunk = stream.read(wanted - read)
                    if not chunk:
                        break
                    chunks.append(chunk)
                    read += len(chunk)
        except OSError:
            _log.warning("cannot open file for reading: %s", self.path)
        data = b"".join(chunks)
        if len(data) < wanted:
            _log.warning("less data available than requested from %s", self.path)
        return data

    def write_file(self, data: BytesLike) -> int:
        """Replace the file's contents with ``data``; return the bytes written.

        Raises OSError when the file cannot be created or written.
        """
        view = memoryview(data).cast("B")
        with open(self.full_path(), "wb") as stream:
            written = stream.write(view)
        if written != view.nbytes:
            raise OSError(
                f"write to {self.full_path()!r} stored {written} of {view.nbytes} bytes"
            )
        return written

    def create_empty(self) -> None:
        """Create the file, or truncate it if it exists."""
        with open(self.full_path(), "wb"):
            pass