"""OpenPGP key loading and inspection backed by the gpg executable."""

from keyverify.services.gpg.errors import KeyLoadError, KeyParseError
from keyverify.services.gpg.inspector import GpgKeyInspector
from keyverify.services.gpg.models import KeyIdentity, KeyMaterial, SigningKey

__all__ = [
    "GpgKeyInspector",
    "KeyIdentity",
    "KeyLoadError",
    "KeyMaterial",
    "KeyParseError",
    "SigningKey",
]
