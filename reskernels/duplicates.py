"""Duplicated arrays for modular-redundant kernels and the vote that merges them.

While a resilient loop is set up, every writable array handed to
:meth:`DuplicatesRegistry.duplicate` is swapped for a duplicate holding a
copy of its data. The kernel then runs once on each array. Afterwards
:meth:`DuplicatesRegistry.combine` compares each original with its
duplicates element by element. With triple redundancy a majority vote
repairs a single bad value. With double redundancy a mismatch is reported
so that the caller can fall back to a third run.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from reskernels.injector import ErrorInjectionTracker

FLOAT_TOLERANCE = 0.00000001


class Redundancy(enum.Enum):
    """How many times a resilient kernel is executed."""

    DOUBLE = 2
    TRIPLE = 3


def values_equal(a, b):
    """Compare values as the duplicate vote does.

    Floating-point values match when they differ by less than 1e-8. Any
    other values must be exactly equal. Arrays are compared element by
    element and give a boolean array.
    """
    left = np.asarray(a)
    right = np.asarray(b)
    if np.issubdtype(left.dtype, np.floating) or np.issubdtype(right.dtype, np.floating):
        result = np.abs(left - right) < FLOAT_TOLERANCE
    else:
        result = left == right
    result = np.asarray(result)
    return bool(result) if result.ndim == 0 else result


def _data_key(array: np.ndarray) -> int:
    return array.__array_interface__["data"][0]


@dataclass(eq=False)
class CombineDuplicates:
    """An original array, its two duplicate slots and how many are in use."""

    original: Optional[np.ndarray] = None
    copies: List[Optional[np.ndarray]] = field(default_factory=lambda: [None, None])
    duplicate_count: int = 0

    def _copy(self, index: int) -> np.ndarray:
        copy = self.copies[index]
        if copy is None or self.original is None or copy.shape != self.original.shape:
            raise RuntimeError(f"duplicate {index} is missing or has the wrong shape")
        return copy

    def execute(self, redundancy: Redundancy) -> bool:
        """Vote on the original and its duplicates; return True if all agree.

        Triple voting overwrites an original value when both duplicates
        agree on a different one. Raises RuntimeError when too few
        duplicates were made.
        """
        if self.original is None:
            raise RuntimeError("combiner has no original array")
        if redundancy is Redundancy.DOUBLE:
            if self.duplicate_count < 1:
                raise RuntimeError("Aborted in CombineDuplicates, no duplicate created")
            if self.duplicate_count != 2:
                return bool(np.all(values_equal(self._copy(0), self.original)))
        elif self.duplicate_count < 2:
            raise RuntimeError("Aborted in CombineDuplicates, duplicate_count < 2")
        return self._majority_vote()

    def _majority_vote(self) -> bool:
        original = self.original
        copy0, copy1 = self._copy(0), self._copy(1)
        matched = np.asarray(values_equal(copy0, original)) | np.asarray(
            values_equal(copy1, original)
        )
        repairable = ~matched & np.asarray(values_equal(copy0, copy1))
        if np.any(repairable):
            original[repairable] = copy0[repairable].astype(original.dtype)
        return bool(np.all(matched | repairable))

    def clear(self) -> None:
        """Release both duplicates."""
        self.copies = [None, None]

    def inject_error(self, tracker: ErrorInjectionTracker) -> None:
        """Inject faults into the original and its duplicates.

        A duplicate that does not exist yet receives its faults in a
        scratch array, so the injection pattern stays the same.
        """
        if self.original is None:
            raise RuntimeError("combiner has no original array")
        targets = [
            copy
            if copy is not None and copy.shape == self.original.shape
            else np.zeros_like(self.original)
            for copy in self.copies
        ]
        tracker.inject(self.original, targets[0], targets[1])


class DuplicatesRegistry:
    """Tracks the duplicates of the current kernel and those kept between kernels.

    ``in_resilient_parallel_loop`` turns duplication on.
    ``dmr_failover_to_tmr`` makes double redundancy create the second
    duplicate.
    """

    def __init__(self, redundancy: Redundancy = Redundancy.TRIPLE) -> None:
        self.redundancy = redundancy
        self.in_resilient_parallel_loop = False
        self.dmr_failover_to_tmr = False
        self.duplicates_map: Dict[int, CombineDuplicates] = {}
        self.duplicates_cache: Dict[int, CombineDuplicates] = {}

    def get_duplicate_for(self, original: np.ndarray) -> CombineDuplicates:
        """Return the cached combiner for ``original``; create or resize its duplicates."""
        key = _data_key(original)
        combiner = self.duplicates_cache.get(key)
        inserted = combiner is None
        if combiner is None:
            combiner = CombineDuplicates()
            self.duplicates_cache[key] = combiner

        def needs_copy(index: int) -> bool:
            copy = combiner.copies[index]
            return inserted or copy is None or copy.shape != original.shape

        if self.redundancy is Redundancy.DOUBLE:
            index = 1 if self.dmr_failover_to_tmr else 0
            if needs_copy(index):
                combiner.original = original
                combiner.copies[index] = np.zeros_like(original)
        elif needs_copy(0) or needs_copy(1):
            combiner.original = original
            combiner.copies = [np.zeros_like(original), np.zeros_like(original)]
        if combiner.original is None:
            combiner.original = original
        return combiner

    def duplicate(self, view: np.ndarray) -> np.ndarray:
        """Return the array a kernel run should use in place of ``view``.

        Inside a resilient loop a writable array is replaced by its next
        duplicate, filled with a copy of its data. Otherwise ``view`` is
        returned unchanged.
        """
        if not self.in_resilient_parallel_loop or not view.flags.writeable:
            return view
        key = _data_key(view)
        combiner = self.get_duplicate_for(view)
        if key not in self.duplicates_map:
            self.duplicates_map[key] = combiner
            combiner.duplicate_count = 0
        combiner = self.duplicates_map[key]
        if combiner.duplicate_count >= len(combiner.copies):
            raise RuntimeError("more duplicates requested than copies available")
        target = combiner.copies[combiner.duplicate_count]
        if target is None or target.shape != view.shape:
            raise RuntimeError(
                f"duplicate {combiner.duplicate_count} has not been created"
            )
        combiner.duplicate_count += 1
        np.copyto(target, view)
        return target

    def combine(self) -> bool:
        """Vote on every duplicated array of the current kernel; stop at the first failure."""
        for combiner in self.duplicates_map.values():
            if not combiner.execute(self.redundancy):
                return False
        return True

    def inject_errors(self, tracker: ErrorInjectionTracker) -> None:
        """Seed a new injection position and inject faults into every duplicated array."""
        if tracker.settings is None:
            return
        tracker.global_next_inject = tracker.settings.geometric(tracker.rng)
        for combiner in self.duplicates_map.values():
            combiner.inject_error(tracker)

    def clear_map(self) -> None:
        """Forget the duplicates of the current kernel; the cache keeps them."""
        self.duplicates_map.clear()

    def clear_cache(self) -> None:
        """Release every cached duplicate."""
        for combiner in self.duplicates_cache.values():
            combiner.clear()
        self.duplicates_cache.clear()