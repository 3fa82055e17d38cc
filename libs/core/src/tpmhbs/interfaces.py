from __future__ import annotations
from typing import Callable, Protocol

"""Device interface used by the estimation core.

Device backends implement this Protocol and register themselves into the
global registry. The estimator and the CLI interact only with this
interface, never with tpm2-pytss or hashlib directly.
"""

ProgressCallback = Callable[[int, int], None]


class HashDevice(Protocol):
    """Anything that can hash a buffer once and say how long it took."""
    name: str
    def execute_hash(self, data: bytes) -> float: ...
    def read_identity_property(self, prop: int) -> bytes: ...
    def close(self) -> None: ...
    def __enter__(self) -> "HashDevice": ...
    def __exit__(self, *exc_info: object) -> None: ...
