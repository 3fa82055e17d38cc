from __future__ import annotations
"""Hash-based signature parameter sets and their SHA-256 work factors.

Covers the LMS parameter sets approved in NIST SP 800-208 over SHA-256
(full 32-byte and truncated 24-byte outputs), one record per combination of
tree height and LM-OTS Winternitz width. Work is counted in 64-byte SHA-256
compression blocks, the same unit the throughput estimator measures.

Every chain step, secret derivation and leaf hash fits in one block; the
interior node hash (I || r || D_INTR || left || right) needs two. The one-time
public key compression hashes all ``p`` chain ends at once.

Signing assumes the device keeps no tree cache, so besides the worst-case
one-time signature each signature regenerates one leaf per tree level to
maintain the authentication path.

New parameter sets only need another ``_add_lms`` call (or a hand-built
``HBSSchemeParams``); nothing outside this module depends on the list.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterator, List, Optional, Tuple

_LMS_I_LEN = 16
_MSG_HASH_BLOCKS = 2
_INTERIOR_NODE_BLOCKS = 2
# RFC 8554 q + LM-OTS type + LMS type, all u32
_LMS_SIG_OVERHEAD = 12

# (n bytes, w bits) -> p, per RFC 8554 section 4.1 and SP 800-208 section 4.2
_LMOTS_P: Dict[Tuple[int, int], int] = {
    (32, 1): 265,
    (32, 2): 133,
    (32, 4): 67,
    (32, 8): 34,
    (24, 1): 200,
    (24, 2): 101,
    (24, 4): 51,
    (24, 8): 26,
}


@dataclass(frozen=True)
class HBSSchemeParams:
    friendly_name: str
    W: int             # Winternitz width in bits
    H: int             # tree height; 2**H one-time signatures
    sig_size: int      # bytes
    keygen_work: int   # SHA-256 blocks to generate a keypair
    sig_work: int      # SHA-256 blocks to produce one signature
    n: Optional[int] = None
    p: Optional[int] = None

    def __post_init__(self) -> None:
        for field_name in ("sig_size", "keygen_work", "sig_work"):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{self.friendly_name}: {field_name} must be positive")
        if not 0 <= self.H < 64:
            raise ValueError(f"{self.friendly_name}: tree height {self.H} out of range")

    @property
    def num_signatures(self) -> int:
        return 1 << self.H

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["num_signatures"] = self.num_signatures
        return d


def _sha256_blocks(message_len: int) -> int:
    # 0x80 terminator plus 64-bit length
    return (message_len + 9 + 63) // 64


def lmots_leaf_work(n: int, w: int, p: int) -> int:
    """Blocks to derive one LM-OTS key pair and hash it into an LMS leaf."""
    chains = p * (1 << w)  # one PRF call plus 2**w - 1 steps per chain
    compress = _sha256_blocks(_LMS_I_LEN + 4 + 2 + p * n)
    return chains + compress + 1


def lms_keygen_work(n: int, w: int, p: int, h: int) -> int:
    leaves = 1 << h
    return leaves * lmots_leaf_work(n, w, p) + _INTERIOR_NODE_BLOCKS * (leaves - 1)


def lms_sig_work(n: int, w: int, p: int, h: int) -> int:
    ots_sign = p * (1 << w)
    auth_path = h * lmots_leaf_work(n, w, p) + _INTERIOR_NODE_BLOCKS * h
    return ots_sign + _MSG_HASH_BLOCKS + auth_path


def lms_sig_size(n: int, p: int, h: int) -> int:
    return _LMS_SIG_OVERHEAD + n * (p + 1 + h)


_SCHEMES: List[HBSSchemeParams] = []


def _add_lms(n: int, heights, widths=(1, 2, 4, 8)) -> None:
    for h in heights:
        for w in widths:
            p = _LMOTS_P[(n, w)]
            _SCHEMES.append(HBSSchemeParams(
                friendly_name=f"LMS_SHA256_M{n}_H{h}",
                W=w,
                H=h,
                sig_size=lms_sig_size(n, p, h),
                keygen_work=lms_keygen_work(n, w, p, h),
                sig_work=lms_sig_work(n, w, p, h),
                n=n,
                p=p,
            ))


# SHA-256 (32-byte output)
_add_lms(32, heights=(5, 10, 15, 20, 25))
# SHA-256/192 (24-byte truncated output)
_add_lms(24, heights=(5, 10, 15, 20, 25))

SCHEMES: Tuple[HBSSchemeParams, ...] = tuple(_SCHEMES)
del _SCHEMES


def iter_schemes() -> Iterator[HBSSchemeParams]:
    return iter(SCHEMES)


def get_scheme(friendly_name: str, w: int) -> Optional[HBSSchemeParams]:
    for scheme in SCHEMES:
        if scheme.friendly_name == friendly_name and scheme.W == w:
            return scheme
    return None
