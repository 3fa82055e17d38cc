from __future__ import annotations

from types import SimpleNamespace
from typing import Any, List

import pytest

import tpmhbs_tpm2.device as tpm2_device
from tpmhbs import registry
from tpmhbs.errors import DeviceError
from tpmhbs.identity import TPMProperty, read_tpm_info
from tpmhbs_tpm2._util import SIMULATOR_TCTI, resolve_tcti
from tpmhbs_tpm2.device import TPM2Device


# TPM 2.0 Part 2 constants the device reads from tpm2_pytss
FAKE_TSS = SimpleNamespace(
    TPM2_ALG=SimpleNamespace(SHA256=0x000B),
    TPM2_CAP=SimpleNamespace(TPM_PROPERTIES=0x00000006),
)


@pytest.fixture(autouse=True)
def fake_tss(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(tpm2_device, "_tss", FAKE_TSS)


class FakeESAPI:
    """Stands in for tpm2_pytss.ESAPI with canned capability data."""

    def __init__(self, props: dict[int, bytes] | None = None, fail: bool = False) -> None:
        self.props = props or {}
        self.fail = fail
        self.hashed: List[Any] = []
        self.close_calls = 0

    def hash(self, data, hash_alg):
        if self.fail:
            raise RuntimeError("TSS2_RC 0x101")
        self.hashed.append((data, hash_alg))
        return b"\x00" * 32, None

    def get_capability(self, capability, prop, count):
        assert capability == 0x00000006
        # Like a real TPM, answer with the first property at or after the requested one
        following = sorted(p for p in self.props if p >= prop)[:count]
        tagged = [SimpleNamespace(property=p, value=int.from_bytes(self.props[p], "big")) for p in following]
        data = SimpleNamespace(tpmProperties=SimpleNamespace(count=len(tagged), tpmProperty=tagged))
        return False, SimpleNamespace(data=data)

    def close(self) -> None:
        self.close_calls += 1


def test_registered_as_tpm2() -> None:
    assert registry.get("tpm2") is TPM2Device


def test_execute_hash_times_one_call() -> None:
    esapi = FakeESAPI()
    device = TPM2Device(esapi=esapi)
    elapsed = device.execute_hash(bytes(128))
    assert elapsed >= 0.0
    assert len(esapi.hashed) == 1
    data, alg = esapi.hashed[0]
    assert data == bytes(128)
    assert int(alg) == 0x000B


def test_hash_failure_is_device_error() -> None:
    device = TPM2Device(esapi=FakeESAPI(fail=True))
    with pytest.raises(DeviceError, match="TPM2_Hash"):
        device.execute_hash(b"")


def test_identity_through_capabilities(make_props) -> None:
    device = TPM2Device(esapi=FakeESAPI(make_props()))
    assert device.read_identity_property(0x105) == b"IFX\x00"
    info = read_tpm_info(device)
    assert info.manufacturer == "IFX"
    assert info.spec_version == "1.38"


def test_missing_capability_is_device_error() -> None:
    device = TPM2Device(esapi=FakeESAPI({}))
    with pytest.raises(DeviceError, match="did not have property 0x105"):
        device.read_identity_property(0x105)


def test_context_manager_closes_once() -> None:
    esapi = FakeESAPI()
    with TPM2Device(esapi=esapi) as device:
        device.execute_hash(b"")
    device.close()
    assert esapi.close_calls == 1


def test_closes_on_error_path() -> None:
    esapi = FakeESAPI(fail=True)
    with pytest.raises(DeviceError):
        with TPM2Device(esapi=esapi) as device:
            device.execute_hash(b"")
    assert esapi.close_calls == 1


def test_missing_tpm2_pytss(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(tpm2_device, "_tss", None)
    with pytest.raises(DeviceError, match="tpm2-pytss is not installed"):
        TPM2Device()


def test_open_failure_is_device_error(monkeypatch: pytest.MonkeyPatch) -> None:
    opened: list[Any] = []

    def _esapi(conf):
        opened.append(conf)
        raise RuntimeError("Could not connect to TPM")

    monkeypatch.setattr(tpm2_device, "_tss", SimpleNamespace(ESAPI=_esapi))
    with pytest.raises(DeviceError, match="could not open TPM"):
        TPM2Device(simulator=True)
    assert opened == [SIMULATOR_TCTI]


def test_resolve_tcti(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TPMHBS_TCTI", raising=False)
    assert resolve_tcti(None) is None
    assert resolve_tcti(None, simulator=True) == SIMULATOR_TCTI
    assert resolve_tcti("device:/dev/tpm0", simulator=True) == "device:/dev/tpm0"
    monkeypatch.setenv("TPMHBS_TCTI", "swtpm:port=2321")
    assert resolve_tcti(None) == "swtpm:port=2321"


def test_next_property_is_not_taken_for_a_missing_one(make_props) -> None:
    props = make_props()
    del props[TPMProperty.VENDOR_STRING_3]
    device = TPM2Device(esapi=FakeESAPI(props))
    with pytest.raises(DeviceError, match="did not have property 0x108"):
        device.read_identity_property(TPMProperty.VENDOR_STRING_3)
    with pytest.raises(DeviceError, match="did not have property 0x108"):
        read_tpm_info(device)
