# ruff: noqa: S101
from __future__ import annotations

from datetime import UTC, datetime

from keyverify.services.gpg.colons import (
    parse_colon_listing,
    parse_timestamp,
    unescape_user_id,
)

LISTING = "\n".join(
    [
        "pub:-:4096:1:AAAABBBBCCCCDDDD:1700000000:1893456000::-:::scESC::::::23::0:",
        "fpr:::::::::0123456789ABCDEF0123AAAABBBBCCCCDDDD:",
        "uid:-::::1700000000::HASH1::Alice (work) <alice@example.com>::::::::::0:",
        "uid:r::::1700000000::HASH2::Alice Old <old\\x3aalice@example.com>::::::::::0:",
        "uid:-::::1700000000::HASH3::Alice Nomail::::::::::0:",
        "sub:-:4096:1:1111222233334444:1700000000:::::e::::::23:",
        "fpr:::::::::FEDCBA98765432101111222233334444:",
        "sub:-:255:22:5555666677778888:1700000000:1710000000::::s::::::23:",
        "fpr:::::::::FEDCBA98765432105555666677778888:",
    ],
)


def test_parse_colon_listing_builds_primary_subkeys_and_identities() -> None:
    keys = parse_colon_listing(LISTING)

    assert len(keys) == 1
    key = keys[0]
    assert key.fingerprint == "0123456789ABCDEF0123AAAABBBBCCCCDDDD"
    assert key.key_id == "AAAABBBBCCCCDDDD"
    assert key.primary.algorithm == 1
    assert key.primary.created_at == datetime.fromtimestamp(1700000000, tz=UTC)
    assert key.primary.expires_at == datetime.fromtimestamp(1893456000, tz=UTC)
    assert key.primary.capabilities == "scESC"
    assert [subkey.fingerprint for subkey in key.subkeys] == [
        "FEDCBA98765432101111222233334444",
        "FEDCBA98765432105555666677778888",
    ]
    assert [identity.name for identity in key.identities] == [
        "Alice (work) <alice@example.com>",
        "Alice Nomail",
    ]
    assert [identity.name for identity in key.revoked_identities] == [
        "Alice Old <old:alice@example.com>",
    ]


def test_parse_colon_listing_splits_multiple_keys() -> None:
    listing = "\n".join(
        [
            "pub:-:255:22:AAAA:1700000000:::-:::scSC::::::23::0:",
            "fpr:::::::::FPR-A:",
            "pub:-:255:22:BBBB:1700000000:::-:::scSC::::::23::0:",
            "fpr:::::::::FPR-B:",
        ],
    )
    keys = parse_colon_listing(listing)
    assert [key.fingerprint for key in keys] == ["FPR-A", "FPR-B"]


def test_parse_colon_listing_ignores_records_before_first_key() -> None:
    assert parse_colon_listing("tru::1:1700000000:0:3:1:5\n") == []


def test_parse_timestamp_accepts_epoch_and_iso_forms() -> None:
    assert parse_timestamp("") is None
    assert parse_timestamp("0") == datetime(1970, 1, 1, tzinfo=UTC)
    assert parse_timestamp("20260102T030405") == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_unescape_user_id_decodes_hex_escapes() -> None:
    assert unescape_user_id("a\\x3ab") == "a:b"
    assert unescape_user_id("J\\xc3\\xbcrgen") == "Jürgen"



def test_parse_colon_listing_keeps_identities_of_a_revoked_key() -> None:
    listing = "\n".join(
        [
            "pub:r:255:22:9F1E2D3C4B5A6978:1760000000:::-:::sc::::::23::0:",
            "fpr:::::::::0A1B2C3D4E5F60718293A4B59F1E2D3C4B5A6978:",
            "uid:r::::1760000000::HASH1::Rev Key <rev@example.com>::::::::::0:",
            "sub:r:255:18:1122334455667788:1760000000::::::e::::::23:",
            "fpr:::::::::FFEEDDCCBBAA998877665544332211001122334455667788:",
        ],
    )
    key = parse_colon_listing(listing)[0]

    assert key.is_revoked()
    assert [identity.name for identity in key.identities] == ["Rev Key <rev@example.com>"]
    assert key.identities[0].revoked
    assert key.revoked_identities == ()
