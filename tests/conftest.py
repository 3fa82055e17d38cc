from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
for rel in (
    Path("libs/core/src"),
    Path("libs/adapters/tpm2/src"),
    Path("apps/cli/src"),
):
    candidate_str = str(ROOT / rel)
    if candidate_str not in sys.path:
        sys.path.insert(0, candidate_str)

from tpmhbs.identity import TPMProperty  # noqa: E402
from tpmhbs.timing import BLOCK_SIZE  # noqa: E402


def tpm_properties(
    manufacturer: bytes = b"IFX\x00",
    model: bytes = b"SLB9670\x00",
    revision: int = 138,
    fw1: int = 0x00070055,
    fw2: int = 0x00110800,
) -> Dict[int, bytes]:
    vendor = model.ljust(16, b"\x00")[:16]
    return {
        TPMProperty.MANUFACTURER: manufacturer,
        TPMProperty.VENDOR_STRING_1: vendor[0:4],
        TPMProperty.VENDOR_STRING_2: vendor[4:8],
        TPMProperty.VENDOR_STRING_3: vendor[8:12],
        TPMProperty.VENDOR_STRING_4: vendor[12:16],
        TPMProperty.FIRMWARE_VERSION_1: fw1.to_bytes(4, "big"),
        TPMProperty.FIRMWARE_VERSION_2: fw2.to_bytes(4, "big"),
        TPMProperty.REVISION: revision.to_bytes(4, "big"),
    }


class LinearDevice:
    """Synthetic device whose hash of n blocks takes ``a + b*n`` microseconds."""
    name = "linear"

    def __init__(
        self,
        a: float = 200.0,
        b: float = 15.0,
        *,
        jitter: float = 0.0,
        fail_after: Optional[int] = None,
        props: Optional[Dict[int, bytes]] = None,
    ) -> None:
        self.a = a
        self.b = b
        self.jitter = jitter
        self.fail_after = fail_after
        self.props = tpm_properties() if props is None else props
        self.lengths: List[int] = []
        self.closed = False

    def execute_hash(self, data: bytes) -> float:
        if self.fail_after is not None and len(self.lengths) >= self.fail_after:
            raise RuntimeError("TPM_RC_FAILURE")
        # Alternate +/- jitter so that an even number of samples averages out
        sign = 1 if len(self.lengths) % 2 == 0 else -1
        self.lengths.append(len(data))
        micros = self.a + self.b * (len(data) // BLOCK_SIZE) + sign * self.jitter
        return micros / 1_000_000

    def read_identity_property(self, prop: int) -> bytes:
        return self.props[prop]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "LinearDevice":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@pytest.fixture
def linear_device() -> Callable[..., LinearDevice]:
    return LinearDevice


@pytest.fixture
def make_props() -> Callable[..., Dict[int, bytes]]:
    return tpm_properties
