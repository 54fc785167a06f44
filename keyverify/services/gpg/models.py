"""Parsed OpenPGP key material as reported by gpg."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

REVOKED_VALIDITY = "r"
EXPIRED_VALIDITY = "e"
SIGN_CAPABILITY = "s"


@dataclass(frozen=True, slots=True)
class KeyIdentity:
    """A self-asserted user id bound to the key.

    ``name`` is the user id string exactly as declared on the key
    (``"Alice (work) <alice@example.com>"``). ``revoked`` mirrors the uid
    record's validity, which gpg also sets when the whole key is revoked.
    """

    name: str
    revoked: bool = False


@dataclass(frozen=True, slots=True)
class KeyMaterial:
    """Fields shared by a primary key and its subkeys."""

    key_id: str
    algorithm: int
    created_at: datetime | None
    expires_at: datetime | None
    validity: str
    capabilities: str
    fingerprint: str = ""

    def is_revoked(self) -> bool:
        return self.validity == REVOKED_VALIDITY

    def is_expired(self, now: datetime) -> bool:
        if self.validity == EXPIRED_VALIDITY:
            return True
        if self.created_at is not None and self.created_at > now:
            return True
        return self.expires_at is not None and self.expires_at <= now

    def has_sign_capability(self) -> bool:
        # Lowercase letters are this key's own usages; uppercase ones summarize the whole certificate.
        return SIGN_CAPABILITY in self.capabilities

    def usable_for_signing(self, now: datetime) -> bool:
        return self.has_sign_capability() and not self.is_revoked() and not self.is_expired(now)


@dataclass(frozen=True, slots=True)
class SigningKey:
    """A single OpenPGP certificate: primary key, subkeys and user ids."""

    primary: KeyMaterial
    subkeys: tuple[KeyMaterial, ...] = ()
    identities: tuple[KeyIdentity, ...] = ()
    revoked_identities: tuple[KeyIdentity, ...] = ()

    @property
    def fingerprint(self) -> str:
        return self.primary.fingerprint

    @property
    def key_id(self) -> str:
        return self.primary.key_id

    def is_expired(self, now: datetime) -> bool:
        return self.primary.is_expired(now)

    def is_revoked(self) -> bool:
        return self.primary.is_revoked()

    def can_sign(self, now: datetime) -> bool:
        """True when the primary key or any live subkey can produce signatures."""
        if self.primary.usable_for_signing(now):
            return True
        if self.primary.is_revoked() or self.primary.is_expired(now):
            return False
        return any(subkey.usable_for_signing(now) for subkey in self.subkeys)
