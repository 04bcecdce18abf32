"""Tests for key derivation and the AES-256-GCM primitives."""

import pytest

from recordguard.core.crypto import (
    AUTH_TAG_SIZE,
    IV_SIZE,
    KEY_SIZE,
    SALT_SIZE,
    derive_key,
    generate_salt,
    open_sealed,
    seal,
)
from recordguard.core.exceptions import AuthenticationError, DecryptionError


# ── Key derivation ────────────────────────────────────────────────────────────

def test_derive_key_length(master_key) -> None:
    assert len(derive_key(master_key, generate_salt(), "medical")) == KEY_SIZE


def test_salt_length() -> None:
    assert len(generate_salt()) == SALT_SIZE


def test_derive_key_deterministic(master_key) -> None:
    salt = generate_salt()
    assert derive_key(master_key, salt, "salary") == derive_key(master_key, salt, "salary")


def test_derive_key_purpose_isolation(master_key) -> None:
    """Same salt, different purposes: unrelated keys"""
    salt = generate_salt()
    assert derive_key(master_key, salt, "medical") != derive_key(master_key, salt, "government")


def test_derive_key_different_salts(master_key) -> None:
    assert derive_key(master_key, generate_salt()) != derive_key(master_key, generate_salt())


def test_derive_key_different_master_keys() -> None:
    salt = generate_salt()
    assert derive_key(b"a" * 32, salt) != derive_key(b"b" * 32, salt)


# ── AES-256-GCM ───────────────────────────────────────────────────────────────

def test_seal_open_roundtrip(master_key) -> None:
    key = derive_key(master_key, generate_salt(), "default")
    iv, tag, ciphertext = seal(b"Hello, records!", key)
    assert len(iv) == IV_SIZE
    assert len(tag) == AUTH_TAG_SIZE
    assert open_sealed(ciphertext, key, iv, tag) == b"Hello, records!"


def test_seal_uses_fresh_iv(master_key) -> None:
    key = derive_key(master_key, generate_salt())
    first = seal(b"same", key)
    second = seal(b"same", key)
    assert first[0] != second[0]
    assert first[2] != second[2]


def test_open_with_wrong_key_raises(master_key) -> None:
    salt = generate_salt()
    iv, tag, ciphertext = seal(b"secret", derive_key(master_key, salt, "medical"))
    with pytest.raises(AuthenticationError):
        open_sealed(ciphertext, derive_key(master_key, salt, "salary"), iv, tag)


def test_open_tampered_ciphertext_raises(master_key) -> None:
    key = derive_key(master_key, generate_salt())
    iv, tag, ciphertext = seal(b"secret", key)
    tampered = bytes([ciphertext[0] ^ 0x01]) + ciphertext[1:]
    with pytest.raises(AuthenticationError):
        open_sealed(tampered, key, iv, tag)


def test_open_tampered_tag_raises(master_key) -> None:
    key = derive_key(master_key, generate_salt())
    iv, tag, ciphertext = seal(b"secret", key)
    with pytest.raises(DecryptionError):
        open_sealed(ciphertext, key, iv, bytes(AUTH_TAG_SIZE))
