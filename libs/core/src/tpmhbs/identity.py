"""TPM identity (manufacturer, model, firmware, spec revision)."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .errors import DeviceError, TPMHBSError
from .interfaces import HashDevice


class TPMProperty(enum.IntEnum):
    """TPM_PT fixed property ids (TPM 2.0 Part 2, table 23)."""
    REVISION = 0x102
    MANUFACTURER = 0x105
    VENDOR_STRING_1 = 0x106
    VENDOR_STRING_2 = 0x107
    VENDOR_STRING_3 = 0x108
    VENDOR_STRING_4 = 0x109
    FIRMWARE_VERSION_1 = 0x10B
    FIRMWARE_VERSION_2 = 0x10C


_VENDOR_STRINGS = (
    TPMProperty.VENDOR_STRING_1,
    TPMProperty.VENDOR_STRING_2,
    TPMProperty.VENDOR_STRING_3,
    TPMProperty.VENDOR_STRING_4,
)


@dataclass(frozen=True)
class TpmInfo:
    manufacturer: str
    model: str
    fw_version: str
    spec_version: str

    def __str__(self) -> str:
        return f"{self.manufacturer} {self.model}: TPM 2.0 rev {self.spec_version} (firmware {self.fw_version})"


def _ascii(raw: bytes) -> str:
    return raw.replace(b"\x00", b"").decode("ascii", errors="replace").strip()


def _read(device: HashDevice, prop: TPMProperty) -> bytes:
    try:
        value = device.read_identity_property(int(prop))
    except TPMHBSError:
        raise
    except Exception as exc:
        raise DeviceError(f"could not read TPM property {prop.name}: {exc}") from exc
    if len(value) != 4:
        raise DeviceError(f"TPM property {prop.name} is {len(value)} bytes, expected 4")
    return bytes(value)


def read_tpm_info(device: HashDevice) -> TpmInfo:
    mfr = _read(device, TPMProperty.MANUFACTURER)
    fw1 = _read(device, TPMProperty.FIRMWARE_VERSION_1)
    fw2 = _read(device, TPMProperty.FIRMWARE_VERSION_2)
    revision = int.from_bytes(_read(device, TPMProperty.REVISION), "big")
    model = b"".join(_read(device, prop) for prop in _VENDOR_STRINGS)
    return TpmInfo(
        manufacturer=_ascii(mfr),
        model=_ascii(model),
        fw_version=f"{fw1.hex()}{fw2.hex()}",
        spec_version=f"{revision // 100}.{revision % 100}",
    )
