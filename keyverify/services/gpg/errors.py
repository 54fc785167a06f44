"""Errors raised while loading and inspecting key material."""

from __future__ import annotations

from keyverify.services.verification.errors import VerificationError


class KeyLoadError(VerificationError):
    """The key file could not be read."""


class KeyParseError(VerificationError):
    """The bytes are not a single, structurally valid OpenPGP public key."""
