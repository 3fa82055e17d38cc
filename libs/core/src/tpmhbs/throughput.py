"""Steady-state hash throughput of a device.

Each block count from 0 to ``MAX_BLOCKS`` is hashed ``samples_per_size``
times and the mean elapsed time per size is fitted with an ordinary least
squares line. The intercept absorbs the fixed per-call cost (command dispatch,
framing, transport) and the slope is the marginal cost of one 64-byte block,
which is what the projector needs. A single large-buffer timing would mix the
two together.
"""

from __future__ import annotations

import logging
import math
import statistics
from typing import List, Optional, Sequence, Tuple

from .errors import ConfigurationError, EstimationError
from .interfaces import HashDevice, ProgressCallback
from .metrics import HashSample, ThroughputEstimate
from .timing import MAX_BLOCKS, time_hash

DEFAULT_SAMPLES_PER_SIZE = 10

log = logging.getLogger(__name__)


def total_progress_units(samples_per_size: int) -> int:
    """Block-iterations in a full run: sum(0..16) * samples."""
    return sum(range(MAX_BLOCKS + 1)) * samples_per_size


def fit_line(points: Sequence[Tuple[float, float]]) -> Tuple[float, float]:
    """Least-squares ``(slope, intercept)`` for ``(x, y)`` points."""
    if len(points) < 2:
        raise EstimationError(f"need at least two points to fit a line, got {len(points)}")
    xs = [float(x) for x, _ in points]
    ys = [float(y) for _, y in points]
    try:
        slope, intercept = statistics.linear_regression(xs, ys)
    except statistics.StatisticsError as exc:
        raise EstimationError(f"could not fit timing data: {exc}") from exc
    return slope, intercept


def mean_elapsed(samples: Sequence[HashSample]) -> float:
    return sum(s.elapsed_micros for s in samples) / len(samples)


def estimate_from_means(
    means: Sequence[float],
    *,
    samples_per_size: int | None = None,
) -> ThroughputEstimate:
    """Turn per-block-count mean timings (microseconds) into an estimate.

    ``means[n]`` is the mean elapsed time for hashing ``n`` blocks.
    """
    slope, intercept = fit_line(list(enumerate(means)))
    log.info("fitted hash timing: %.3f us/block + %.3f us/call", slope, intercept)
    if not math.isfinite(slope) or slope <= 0.0:
        raise EstimationError(
            f"fitted per-block time is {slope:.6g} us; timings did not grow with input size "
            "(too noisy to estimate throughput)"
        )
    slope_ns = slope * 1000.0
    hps = 1_000_000_000 / slope_ns
    if not math.isfinite(hps) or hps <= 0.0:
        raise EstimationError(f"derived throughput is not a positive rate: {hps!r}")
    return ThroughputEstimate(
        hashes_per_second=hps,
        micros_per_block=slope,
        overhead_micros=intercept,
        samples_per_size=samples_per_size,
    )


def measure_throughput(
    device: HashDevice,
    samples_per_size: int = DEFAULT_SAMPLES_PER_SIZE,
    *,
    progress_cb: Optional[ProgressCallback] = None,
) -> ThroughputEstimate:
    """Measure the device's SHA-256 block rate.

    Issues ``17 * samples_per_size`` strictly sequential hash calls. Any
    device failure aborts the whole measurement; there are no retries since
    a partial calibration is meaningless. ``progress_cb(completed, total)``
    is called after every sample, counting hashed blocks.
    """
    if samples_per_size < 1:
        raise ConfigurationError(f"samples per size must be at least 1, got {samples_per_size}")
    total = total_progress_units(samples_per_size)
    completed = 0
    means: List[float] = []
    for blocks in range(MAX_BLOCKS + 1):
        samples: List[HashSample] = []
        for _ in range(samples_per_size):
            samples.append(time_hash(device, blocks))
            completed += blocks
            if progress_cb is not None:
                try:
                    progress_cb(completed, total)
                except Exception as exc:
                    # Never let progress reporting break measurements
                    log.debug("progress callback failed: %s", exc)
        means.append(mean_elapsed(samples))
        log.debug("%2d blocks: mean %.1f us over %d samples", blocks, means[-1], len(samples))
    return estimate_from_means(means, samples_per_size=samples_per_size)
