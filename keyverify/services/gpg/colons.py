"""Parser for gpg's machine-readable ``--with-colons`` key listing.

Only the records needed to judge a signing key are read: ``pub``/``sec``
(primary key), ``sub``/``ssb`` (subkeys), ``fpr`` (fingerprint of the preceding
key) and ``uid`` (user ids). Field positions follow gpg's DETAILS document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from keyverify.services.gpg.models import (
    REVOKED_VALIDITY,
    KeyIdentity,
    KeyMaterial,
    SigningKey,
)

PRIMARY_RECORDS = frozenset({"pub", "sec"})
SUBKEY_RECORDS = frozenset({"sub", "ssb"})

_FIELD_VALIDITY = 1
_FIELD_ALGORITHM = 3
_FIELD_KEY_ID = 4
_FIELD_CREATED = 5
_FIELD_EXPIRES = 6
_FIELD_USER_ID = 9
_FIELD_CAPABILITIES = 11

_ESCAPE_RE = re.compile(rb"\\x([0-9a-fA-F]{2})")
_ISO_DATE_FORMAT = "%Y%m%dT%H%M%S"


def _field(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def parse_timestamp(raw: str) -> datetime | None:
    """Parse a colon-listing date: epoch seconds or ``yyyymmddThhmmss``."""
    value = raw.strip()
    if not value:
        return None
    if value.isdigit():
        return datetime.fromtimestamp(int(value), tz=UTC)
    return datetime.strptime(value, _ISO_DATE_FORMAT).replace(tzinfo=UTC)


def unescape_user_id(raw: str) -> str:
    """Decode gpg's ``\\xHH`` escaping used for colons and control bytes."""
    decoded = _ESCAPE_RE.sub(lambda match: bytes([int(match.group(1), 16)]), raw.encode("utf-8"))
    return decoded.decode("utf-8", errors="replace")


def _key_material(fields: list[str]) -> KeyMaterial:
    algorithm = _field(fields, _FIELD_ALGORITHM)
    return KeyMaterial(
        key_id=_field(fields, _FIELD_KEY_ID),
        algorithm=int(algorithm) if algorithm.isdigit() else 0,
        created_at=parse_timestamp(_field(fields, _FIELD_CREATED)),
        expires_at=parse_timestamp(_field(fields, _FIELD_EXPIRES)),
        validity=_field(fields, _FIELD_VALIDITY),
        capabilities=_field(fields, _FIELD_CAPABILITIES),
    )


@dataclass(slots=True)
class _KeyBuilder:
    primary: KeyMaterial
    subkeys: list[KeyMaterial] = field(default_factory=list)
    identities: list[KeyIdentity] = field(default_factory=list)
    revoked_identities: list[KeyIdentity] = field(default_factory=list)

    def set_fingerprint(self, fingerprint: str) -> None:
        # An fpr record belongs to the key record right before it.
        if self.subkeys:
            last = self.subkeys[-1]
            if not last.fingerprint:
                self.subkeys[-1] = replace(last, fingerprint=fingerprint)
            return
        if not self.primary.fingerprint:
            self.primary = replace(self.primary, fingerprint=fingerprint)

    def build(self) -> SigningKey:
        return SigningKey(
            primary=self.primary,
            subkeys=tuple(self.subkeys),
            identities=tuple(self.identities),
            revoked_identities=tuple(self.revoked_identities),
        )


def parse_colon_listing(text: str) -> list[SigningKey]:
    """Parse a colon listing into keys, preserving gpg's record order."""
    keys: list[SigningKey] = []
    current: _KeyBuilder | None = None
    for line in text.splitlines():
        fields = line.rstrip("\r").split(":")
        record = fields[0]
        if record in PRIMARY_RECORDS:
            if current is not None:
                keys.append(current.build())
            current = _KeyBuilder(primary=_key_material(fields))
            continue
        if current is None:
            continue
        if record in SUBKEY_RECORDS:
            current.subkeys.append(_key_material(fields))
        elif record == "fpr":
            current.set_fingerprint(_field(fields, _FIELD_USER_ID))
        elif record == "uid":
            user_id = unescape_user_id(_field(fields, _FIELD_USER_ID))
            # gpg marks every uid "r" once the primary key itself is revoked.
            revoked = _field(fields, _FIELD_VALIDITY) == REVOKED_VALIDITY
            identity = KeyIdentity(name=user_id, revoked=revoked)
            if revoked and not current.primary.is_revoked():
                current.revoked_identities.append(identity)
            else:
                current.identities.append(identity)
    if current is not None:
        keys.append(current.build())
    return keys
