"""A checkpoint space whose buffers are mirrored to plain binary files.

Host buffers are registered under a label together with the file
accessor that backs them. Checkpointing writes every host buffer to its
file and restoring reads the files back into the host buffers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Union

from reskernels.stdfile_accessor import DEFAULT_PATH, StdFileAccessor

_log = logging.getLogger(__name__)

WritableBuffer = Union[bytearray, memoryview, "object"]


@dataclass
class _Mirror:
    host: WritableBuffer
    accessor: StdFileAccessor


def _host_bytes(host: WritableBuffer) -> memoryview:
    return memoryview(host).cast("B")


class StdFileSpace:
    """Allocates file accessors and moves registered buffers to and from them."""

    NAME = "StdFile"

    def __init__(self, default_path: str = DEFAULT_PATH) -> None:
        self.default_path = default_path
        self.mirrors: Dict[str, _Mirror] = {}

    def allocate(self, size: int, path: str) -> StdFileAccessor:
        """Return an accessor for a ``size`` byte buffer stored at ``path``."""
        return StdFileAccessor(size, path, self.default_path)

    def deallocate(self, accessor: StdFileAccessor) -> None:
        """Release ``accessor`` and forget every mirror that uses it."""
        for label in [k for k, m in self.mirrors.items() if m.accessor is accessor]:
            del self.mirrors[label]

    def register_mirror(
        self, label: str, host: WritableBuffer, accessor: StdFileAccessor
    ) -> None:
        """Pair the host buffer ``host`` with the file behind ``accessor``."""
        _host_bytes(host)
        self.mirrors[label] = _Mirror(host, accessor)

    def _warn_if_empty(self) -> bool:
        if not self.mirrors:
            _log.warning(
                "memspace %s returned empty list of checkpoint views", self.NAME
            )
            return True
        return False

    def checkpoint_views(self) -> int:
        """Write every registered host buffer to its file; return how many."""
        self._warn_if_empty()
        for mirror in self.mirrors.values():
            mirror.accessor.write_file(_host_bytes(mirror.host))
        return len(self.mirrors)

    @staticmethod
    def _restore(mirror: _Mirror) -> None:
        target = _host_bytes(mirror.host)
        data = mirror.accessor.read_file(target.nbytes)
        target[: len(data)] = data

    def restore_all_views(self) -> int:
        """Read every file back into its host buffer; return how many."""
        if not self.mirrors:
            _log.warning("%s::restore views mirror list returned empty list", self.NAME)
        for mirror in self.mirrors.values():
            self._restore(mirror)
        return len(self.mirrors)

    def restore_view(self, label: str) -> bool:
        """Restore the buffer registered as ``label``; False if there is none."""
        mirror = self.mirrors.get(label)
        if mirror is None:
            return False
        self._restore(mirror)
        return True

    def checkpoint_create_view_targets(self) -> int:
        """Create an empty file for every registered buffer; return how many."""
        self._warn_if_empty()
        for mirror in self.mirrors.values():
            mirror.accessor.create_empty()
        return len(self.mirrors)