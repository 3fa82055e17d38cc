"""TPM 2.0 device backend (tpm2-pytss).

Importing the package registers the ``tpm2`` device. Registration happens
even without tpm2-pytss so that selecting the device reports the missing
dependency instead of an unknown device name.
"""

from . import device as _device  # noqa: F401

__all__: list[str] = []
