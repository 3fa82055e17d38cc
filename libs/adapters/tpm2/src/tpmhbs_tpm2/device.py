from __future__ import annotations

import logging
import time
from typing import Any, Optional

from tpmhbs import registry
from tpmhbs.errors import DeviceError

from ._util import resolve_tcti, try_import_tpm2

_tss = try_import_tpm2()

log = logging.getLogger(__name__)


@registry.register("tpm2")
class TPM2Device:
    """TPM 2.0 reached through tpm2-pytss ESAPI.

    Only two commands are issued: TPM2_Hash (SHA-256, owner hierarchy) for
    timing and TPM2_GetCapability(TPM_PROPERTIES) for identity.
    """
    name = "tpm2"

    def __init__(
        self,
        tcti: Optional[str] = None,
        *,
        simulator: bool = False,
        esapi: Any = None,
    ) -> None:
        if _tss is None:
            raise DeviceError(
                "could not open TPM: tpm2-pytss is not installed "
                "(pip install 'tpmhbs[tpm2]')"
            )
        if esapi is None:
            conf = resolve_tcti(tcti, simulator=simulator)
            log.info("opening TPM via TCTI %s", conf or "<default>")
            try:
                esapi = _tss.ESAPI(conf)
            except Exception as exc:
                raise DeviceError(f"could not open TPM: {exc}") from exc
        self._esapi = esapi

    def execute_hash(self, data: bytes) -> float:
        start = time.perf_counter()
        try:
            self._esapi.hash(data, _tss.TPM2_ALG.SHA256)
        except Exception as exc:
            raise DeviceError(f"could not call TPM2_Hash: {exc}") from exc
        return time.perf_counter() - start

    def read_identity_property(self, prop: int) -> bytes:
        try:
            _more, cap = self._esapi.get_capability(_tss.TPM2_CAP.TPM_PROPERTIES, prop, 1)
        except Exception as exc:
            raise DeviceError(f"could not call TPM2_GetCapability: {exc}") from exc
        props = cap.data.tpmProperties
        # GetCapability returns the next property at or after the one asked for
        if props.count != 1 or int(props.tpmProperty[0].property) != prop:
            raise DeviceError(f"TPM did not have property {prop:#x}")
        return int(props.tpmProperty[0].value).to_bytes(4, "big")

    def close(self) -> None:
        esapi, self._esapi = self._esapi, None
        if esapi is not None:
            esapi.close()

    def __enter__(self) -> "TPM2Device":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
