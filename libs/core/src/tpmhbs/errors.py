from __future__ import annotations


class TPMHBSError(RuntimeError):
    """Base class for every error that aborts an estimation run."""


class DeviceError(TPMHBSError):
    pass


class EstimationError(TPMHBSError):
    pass


class ConfigurationError(TPMHBSError):
    pass
