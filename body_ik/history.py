# body_ik/history.py
"""
Per-iteration snapshots of a body-frame IK solve.

The recorder only observes values produced by the solver. Records are kept in
iteration order, starting with iteration 0 (the initial guess, before any
correction is applied).
"""

from dataclasses import dataclass
from typing import Iterator, List

import numpy as np


def _frozen_copy(a) -> np.ndarray:
    a = np.array(a, dtype=float)
    a.setflags(write=False)
    return a


@dataclass(frozen=True)
class IterationRecord:
    index: int
    thetalist: np.ndarray
    Tsb: np.ndarray
    Vb: np.ndarray
    angular_error: float
    linear_error: float

    def __post_init__(self):
        # Snapshots must not alias the solver's working arrays
        object.__setattr__(self, 'thetalist', _frozen_copy(self.thetalist))
        object.__setattr__(self, 'Tsb', _frozen_copy(self.Tsb))
        object.__setattr__(self, 'Vb', _frozen_copy(self.Vb))
        object.__setattr__(self, 'angular_error', float(self.angular_error))
        object.__setattr__(self, 'linear_error', float(self.linear_error))


class IterationHistory:
    """Append-only, 0-indexed sequence of iteration records."""

    def __init__(self):
        self._records: List[IterationRecord] = []

    def append(self, record: IterationRecord):
        if record.index != len(self._records):
            raise ValueError(
                f"Expected record for iteration {len(self._records)}, got {record.index}")
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IterationRecord]:
        return iter(self._records)

    def __getitem__(self, index):
        return self._records[index]

    @property
    def last(self) -> IterationRecord:
        if not self._records:
            raise IndexError("History is empty")
        return self._records[-1]

    def joint_matrix(self) -> np.ndarray:
        """Joint-angle history, rows = iterations, columns = joints."""
        if not self._records:
            return np.empty((0, 0))
        return np.vstack([r.thetalist for r in self._records])

    def angular_errors(self) -> np.ndarray:
        return np.array([r.angular_error for r in self._records])

    def linear_errors(self) -> np.ndarray:
        return np.array([r.linear_error for r in self._records])

    def __repr__(self):
        return f"<IterationHistory: {len(self._records)} iterations>"
