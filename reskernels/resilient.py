"""Range loops executed with modular redundancy.

A loop body is run on the original arrays and on duplicates of every
writable array. Afterwards the results are combined by vote. If the
duplicates cannot agree, :class:`DataCorruptionError` is raised.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence

import numpy as np

from reskernels.duplicates import DuplicatesRegistry, Redundancy
from reskernels.injector import ErrorInjectionTracker, ErrorSettings

Functor = Callable[..., None]


class DataCorruptionError(RuntimeError):
    """Raised when redundant executions of a kernel cannot be reconciled."""


class ResilientExecutor:
    """Runs ``functor(i, *views)`` over a range with double or triple redundancy.

    With ``fused`` set, the three triple-redundant runs are interleaved in
    one loop over three times the range.
    """

    def __init__(
        self,
        redundancy: Redundancy = Redundancy.TRIPLE,
        registry: Optional[DuplicatesRegistry] = None,
        error_settings: Optional[ErrorSettings] = None,
        tracker: Optional[ErrorInjectionTracker] = None,
        fused: bool = False,
    ) -> None:
        self.registry = registry if registry is not None else DuplicatesRegistry(redundancy)
        if self.registry.redundancy is not redundancy:
            raise ValueError("registry redundancy does not match the executor's")
        if fused and redundancy is not Redundancy.TRIPLE:
            raise ValueError("kernel fusing requires triple redundancy")
        self.redundancy = redundancy
        self.tracker = tracker if tracker is not None else ErrorInjectionTracker()
        if error_settings is not None:
            self.tracker.settings = error_settings
        self.fused = fused

    def _duplicate_all(self, views: Sequence[np.ndarray]) -> List[np.ndarray]:
        self.registry.in_resilient_parallel_loop = True
        try:
            return [self.registry.duplicate(view) for view in views]
        finally:
            self.registry.in_resilient_parallel_loop = False

    @staticmethod
    def _run(begin: int, end: int, functor: Functor, views: Sequence[np.ndarray]) -> None:
        for i in range(begin, end):
            functor(i, *views)

    def _inject(self) -> None:
        start = time.perf_counter_ns()
        self.registry.inject_errors(self.tracker)
        elapsed = time.perf_counter_ns() - start
        self.tracker.elapsed_ns = elapsed
        self.tracker.total_error_time_ns += elapsed

    def _triple(self, begin, end, functor, views, copy0, copy1) -> bool:
        if self.fused:
            work = end - begin
            for i in range(3 * work):
                if i < work:
                    functor(i + begin, *views)
                elif i < 2 * work:
                    functor(i + begin - work, *copy0)
                else:
                    functor(i + begin - 2 * work, *copy1)
        else:
            self._run(begin, end, functor, views)
            self._run(begin, end, functor, copy0)
            self._run(begin, end, functor, copy1)
        self._inject()
        success = self.registry.combine()
        self.registry.clear_map()
        return success

    def _double(self, begin, end, functor, views) -> bool:
        copy0 = self._duplicate_all(views)
        self._run(begin, end, functor, views)
        self._run(begin, end, functor, copy0)
        self._inject()
        success = self.registry.combine()
        if not success:
            # The third copy is taken from the original after its run.
            self.registry.dmr_failover_to_tmr = True
            try:
                self._duplicate_all(views)
                self._inject()
                success = self.registry.combine()
                self.registry.clear_map()
            finally:
                self.registry.dmr_failover_to_tmr = False
        self.registry.clear_map()
        return success

    def parallel_for(
        self,
        begin: int,
        end: int,
        functor: Functor,
        views: Sequence[np.ndarray] = (),
    ) -> None:
        """Run ``functor(i, *views)`` for ``begin <= i < end`` redundantly.

        Raises DataCorruptionError when the redundant results disagree.
        """
        if end < begin:
            raise ValueError(f"range end {end} precedes begin {begin}")
        views = list(views)
        if self.redundancy is Redundancy.TRIPLE:
            copy0 = self._duplicate_all(views)
            copy1 = self._duplicate_all(views)
            success = self._triple(begin, end, functor, views, copy0, copy1)
        else:
            success = self._double(begin, end, functor, views)
        if not success:
            raise DataCorruptionError("redundant executions failed to reach agreement")