# recordguard/core/crypto.py
"""
Key derivation and AES-256-GCM primitives.

Derives a purpose-specific key from the master key and a per-message
salt, and seals/opens single values with an explicit IV and auth tag.
"""

import secrets
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from recordguard.core.exceptions import AuthenticationError

KEY_SIZE = 32           # AES-256
SALT_SIZE = 32          # 256-bit salt, fresh per encryption
IV_SIZE = 16            # 128-bit IV
AUTH_TAG_SIZE = 16      # 128-bit GCM tag
PBKDF2_ITERATIONS = 100_000

DEFAULT_PURPOSE = "default"


def generate_salt() -> bytes:
    return secrets.token_bytes(SALT_SIZE)


def generate_iv() -> bytes:
    return secrets.token_bytes(IV_SIZE)


def derive_key(master_key: bytes, salt: bytes, purpose: str = DEFAULT_PURPOSE) -> bytes:
    """
    Derive a 256-bit key for ``purpose`` using PBKDF2-HMAC-SHA256.

    The purpose is appended to the random salt, so two purposes sharing
    one salt still get unrelated keys.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt + purpose.encode("utf-8"),
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(master_key)


def seal(plaintext: bytes, key: bytes) -> Tuple[bytes, bytes, bytes]:
    """
    Encrypt ``plaintext`` with AES-256-GCM under a fresh random IV.

    Returns:
        ``(iv, auth_tag, ciphertext)``
    """
    iv = generate_iv()
    encryptor = Cipher(algorithms.AES(key), modes.GCM(iv)).encryptor()
    ciphertext = encryptor.update(plaintext) + encryptor.finalize()
    return iv, encryptor.tag, ciphertext


def open_sealed(ciphertext: bytes, key: bytes, iv: bytes, auth_tag: bytes) -> bytes:
    """
    Decrypt and authenticate a value produced by :func:`seal`.

    Raises:
        AuthenticationError: the tag does not verify. No plaintext is
            returned in that case, not even partially.
    """
    decryptor = Cipher(algorithms.AES(key), modes.GCM(iv, auth_tag)).decryptor()
    try:
        return decryptor.update(ciphertext) + decryptor.finalize()
    except InvalidTag as exc:
        raise AuthenticationError(
            "Authentication tag mismatch: data corrupted or encrypted with a different key or purpose"
        ) from exc
