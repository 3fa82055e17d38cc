
from .errors import TPMHBSError, DeviceError, EstimationError, ConfigurationError
from .interfaces import HashDevice, ProgressCallback
from .registry import registry
from .metrics import HashSample, ThroughputEstimate
from .timing import BLOCK_SIZE, MAX_BLOCKS, time_hash
from .throughput import DEFAULT_SAMPLES_PER_SIZE, measure_throughput
from .params import SCHEMES, HBSSchemeParams
from .projection import SORT_KEYS, EstimateRow, project_estimates, resolve_ordering
from .identity import TPMProperty, TpmInfo, read_tpm_info

__version__ = "1.0"

__all__ = [
    "TPMHBSError",
    "DeviceError",
    "EstimationError",
    "ConfigurationError",
    "HashDevice",
    "ProgressCallback",
    "registry",
    "HashSample",
    "ThroughputEstimate",
    "BLOCK_SIZE",
    "MAX_BLOCKS",
    "time_hash",
    "DEFAULT_SAMPLES_PER_SIZE",
    "measure_throughput",
    "SCHEMES",
    "HBSSchemeParams",
    "SORT_KEYS",
    "EstimateRow",
    "project_estimates",
    "resolve_ordering",
    "TPMProperty",
    "TpmInfo",
    "read_tpm_info",
]
