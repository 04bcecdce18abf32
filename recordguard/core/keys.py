# recordguard/core/keys.py
"""
Master key resolution.

The master key comes from ``ENCRYPTION_KEY``. It is decoded as base64,
then hex, then taken as raw UTF-8, first success wins. Outside production
a well-known placeholder keeps local workflows unblocked.
"""

import base64
import binascii
import secrets
from typing import Optional

from recordguard.core.config import Settings, settings as default_settings
from recordguard.core.exceptions import EncryptionConfigurationError
from recordguard.core.logging import logger

MASTER_KEY_SIZE = 32

# Publicly known. Never acceptable outside development and tests.
DEV_FALLBACK_KEY = b"default-dev-key-32-bytes-long!!"


def decode_master_key(key_string: str) -> bytes:
    """Decode a configured key string: base64, then hex, then raw bytes"""
    value = key_string.strip()

    try:
        decoded = base64.b64decode(value, validate=True)
        if decoded:
            return decoded
    except (binascii.Error, ValueError):
        pass

    try:
        decoded = bytes.fromhex(value)
        if decoded:
            return decoded
    except ValueError:
        pass

    return value.encode("utf-8")


def get_master_key(config: Optional[Settings] = None) -> bytes:
    """Resolve the master key from configuration.

    Raises:
        EncryptionConfigurationError: no key configured in production.
    """
    config = config or default_settings
    key_string = config.ENCRYPTION_KEY

    if key_string and key_string.strip():
        key = decode_master_key(key_string)
        if len(key) < MASTER_KEY_SIZE:
            logger.warning(
                f"ENCRYPTION_KEY decodes to {len(key)} bytes; "
                f"at least {MASTER_KEY_SIZE} bytes are expected"
            )
        return key

    if config.is_production:
        raise EncryptionConfigurationError(
            "ENCRYPTION_KEY environment variable is required in production"
        )

    logger.warning(
        "ENCRYPTION_KEY is not set, using the default development key. "
        "This key is public and must never be used in production!"
    )
    return DEV_FALLBACK_KEY


def generate_encryption_key() -> str:
    """Return a fresh base64-encoded 32-byte key for ENCRYPTION_KEY"""
    return base64.b64encode(secrets.token_bytes(MASTER_KEY_SIZE)).decode("ascii")
