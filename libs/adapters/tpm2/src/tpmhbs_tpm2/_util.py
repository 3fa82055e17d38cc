from __future__ import annotations
import os
from typing import Optional

# TCTI strings understood by tpm2-tss
SIMULATOR_TCTI = "mssim:host=localhost,port=2321"


def try_import_tpm2():
    try:
        import tpm2_pytss  # type: ignore
        return tpm2_pytss
    except Exception:
        return None


def resolve_tcti(tcti: Optional[str], *, simulator: bool = False) -> Optional[str]:
    """
    Pick the TCTI configuration string. An explicit value wins, then the
    simulator flag, then TPMHBS_TCTI. None lets tpm2-tss choose its default
    (tabrmd, then /dev/tpmrm0, then /dev/tpm0).
    """
    if tcti:
        return tcti
    if simulator:
        return SIMULATOR_TCTI
    return os.getenv("TPMHBS_TCTI") or None
