"""Geometrically distributed fault injection into triplicated arrays."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class ErrorSettings:
    """Per-element error rate driving the gaps between injected faults."""

    error_rate: float

    def __post_init__(self) -> None:
        if not 0.0 < self.error_rate <= 1.0:
            raise ValueError(f"error rate must be in (0, 1], got {self.error_rate}")

    def geometric(self, rng: np.random.Generator) -> int:
        """Number of failures before the first success, drawn from ``rng``."""
        return int(rng.geometric(self.error_rate)) - 1


def inject_indices(shape: Sequence[int], linear: int) -> Tuple[int, ...]:
    """Decode a linear position into indices, first dimension varying fastest."""
    if linear < 0:
        raise ValueError("linear index must be non-negative")
    indices = []
    for extent in shape:
        indices.append(linear % extent)
        linear //= extent
    return tuple(indices)


@dataclass
class ErrorInjectionTracker:
    """Random state, counters and timings shared by all error injections."""

    settings: Optional[ErrorSettings] = None
    seed: int = 0
    error_counter: int = 0
    global_next_inject: int = 0
    elapsed_ns: int = 0
    total_error_time_ns: int = 0
    rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.rng = np.random.default_rng(self.seed)

    def _noise(self, dtype: np.dtype) -> np.ndarray:
        raw = self.rng.integers(0, 1 << 32)
        return np.asarray(raw, dtype=np.uint32).astype(dtype)

    def inject(self, original: np.ndarray, copy0: np.ndarray, copy1: np.ndarray) -> None:
        """Overwrite geometrically spaced elements of the three arrays with noise."""
        if self.settings is None:
            raise ValueError("error injection requires error settings")
        targets = (original, copy0, copy1)
        if any(t.shape != original.shape for t in targets):
            raise ValueError("original and duplicates must have the same shape")

        total = original.size
        if total > 1 and self.global_next_inject > total:
            self.global_next_inject = (self.global_next_inject - 1) % total + 1

        next_inject = self.global_next_inject
        for target in targets:
            while next_inject < total:
                target[inject_indices(original.shape, next_inject)] = self._noise(
                    target.dtype
                )
                self.error_counter += 1
                next_inject += self.settings.geometric(self.rng) + 1
            if total != 1:
                next_inject -= total

    def report(self) -> str:
        """Summary of time spent injecting and the number of injected errors."""
        return (
            f"Total error injection time is {self.total_error_time_ns} nanoseconds.\n"
            f"The total number of errors inserted is {self.error_counter} errors."
        )