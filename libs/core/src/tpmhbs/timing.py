"""Single timed hash call against a device."""

from __future__ import annotations

from .errors import DeviceError, TPMHBSError
from .interfaces import HashDevice
from .metrics import HashSample

BLOCK_SIZE = 64  # SHA-256 compression block
MAX_BLOCKS = 16  # TPM2B_MAX_BUFFER holds 1024 bytes


def time_hash(device: HashDevice, block_count: int) -> HashSample:
    """Hash ``block_count`` zero-filled 64-byte blocks once and time it."""
    if block_count < 0 or block_count > MAX_BLOCKS:
        raise DeviceError(f"invalid count: {block_count} (must be between 0 and {MAX_BLOCKS})")
    data = bytes(BLOCK_SIZE * block_count)
    try:
        elapsed = float(device.execute_hash(data))
    except TPMHBSError:
        raise
    except Exception as exc:
        raise DeviceError(f"could not hash {len(data)} bytes: {exc}") from exc
    micros = int(round(elapsed * 1_000_000))
    if micros < 0:
        raise DeviceError(f"device reported negative elapsed time: {elapsed!r}")
    return HashSample(block_count=block_count, elapsed_micros=micros)
