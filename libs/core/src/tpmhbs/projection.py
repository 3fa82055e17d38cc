"""Project measured throughput onto the scheme catalog."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Tuple

from .errors import ConfigurationError, EstimationError
from .metrics import ThroughputEstimate
from .params import SCHEMES, HBSSchemeParams

DEFAULT_SORT_KEY = "keygen"


@dataclass
class EstimateRow:
    friendly_name: str
    W: int
    num_signatures: int
    sig_size: int
    keygen_seconds: float
    signing_seconds: float
    keygen_work: int
    sig_work: int


Ordering = Callable[[EstimateRow], Any]

# Python's sort is stable, so rows with equal keys keep catalog order.
_ORDERINGS: Dict[str, Ordering] = {
    "name": lambda row: (row.friendly_name, row.W),
    "size": lambda row: row.sig_size,
    "signing": lambda row: row.sig_work,
    "keygen": lambda row: row.keygen_work,
}

SORT_KEYS: Tuple[str, ...] = tuple(_ORDERINGS)


def resolve_ordering(sort_key: str) -> Ordering:
    """Return the key function for ``sort_key`` or raise ConfigurationError."""
    try:
        return _ORDERINGS[sort_key]
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"unknown sort_by value: '{sort_key}' (options are {', '.join(SORT_KEYS)})"
        ) from None


def project_row(scheme: HBSSchemeParams, hashes_per_second: float) -> EstimateRow:
    return EstimateRow(
        friendly_name=scheme.friendly_name,
        W=scheme.W,
        num_signatures=scheme.num_signatures,
        sig_size=scheme.sig_size,
        keygen_seconds=scheme.keygen_work / hashes_per_second,
        signing_seconds=scheme.sig_work / hashes_per_second,
        keygen_work=scheme.keygen_work,
        sig_work=scheme.sig_work,
    )


def project_estimates(
    estimate: ThroughputEstimate,
    sort_key: str = DEFAULT_SORT_KEY,
    *,
    schemes: Iterable[HBSSchemeParams] = SCHEMES,
) -> List[EstimateRow]:
    """One row per scheme, ordered by ``sort_key``.

    Durations are point estimates: ``work / hashes_per_second`` seconds.
    """
    ordering = resolve_ordering(sort_key)
    hps = estimate.hashes_per_second
    if not math.isfinite(hps) or hps <= 0.0:
        raise EstimationError(f"hashes per second must be a positive rate, got {hps!r}")
    rows = [project_row(scheme, hps) for scheme in schemes]
    rows.sort(key=ordering)
    return rows
