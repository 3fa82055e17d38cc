from __future__ import annotations
from dataclasses import dataclass

"""Measurement containers shared by the timer, the estimator and the CLI.

Samples live only for the duration of one fit; the estimate is the single
number handed on to the projector (plus the fit diagnostics for reporting).
"""

@dataclass(frozen=True)
class HashSample:
    block_count: int
    elapsed_micros: int

@dataclass(frozen=True)
class ThroughputEstimate:
    hashes_per_second: float
    micros_per_block: float | None = None  # fitted slope
    overhead_micros: float | None = None  # fitted intercept, per-call cost
    samples_per_size: int | None = None
