# recordguard/core/encryption.py
"""
Database field-level encryption for sensitive data
Implements AES-256-GCM encryption with per-purpose key derivation
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable, List, Optional, Union

from sqlalchemy import inspect as sa_inspect

from recordguard.core import crypto
from recordguard.core.constants import Purpose
from recordguard.core.envelope import (
    EncryptedEnvelope,
    classify,
    encode_envelope,
    looks_encrypted,
)
from recordguard.core.exceptions import (
    DecryptionError,
    EncryptionConfigurationError,
    EncryptionError,
)
from recordguard.core.keys import get_master_key
from recordguard.core.logging import logger

PurposeLike = Union[str, Purpose]


def _purpose_name(purpose: PurposeLike) -> str:
    return purpose.value if isinstance(purpose, Purpose) else purpose


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


class FieldStatus(str, Enum):
    DECRYPTED = "decrypted"
    PLAINTEXT = "plaintext"  # left as-is, not envelope-shaped
    EMPTY = "empty"          # absent or None
    FAILED = "failed"        # envelope-shaped but did not decrypt; original kept


@dataclass(frozen=True)
class FieldOutcome:
    field: str
    status: FieldStatus
    error: Optional[str] = None


@dataclass
class RecordDecryption:
    """Decrypted copy of a record plus what happened to each field"""
    record: Any
    outcomes: List[FieldOutcome] = field(default_factory=list)

    @property
    def failed_fields(self) -> List[str]:
        return [o.field for o in self.outcomes if o.status == FieldStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed_fields


def _copy_record(record: Any) -> Any:
    if isinstance(record, dict):
        return dict(record)
    state = sa_inspect(record, raiseerr=False)
    if state is not None:
        # ORM rows become a dict of their loaded columns; a shallow copy would
        # share the instance state with the session-tracked original
        return {
            prop.key: state.dict[prop.key]
            for prop in state.mapper.column_attrs
            if prop.key in state.dict
        }
    return copy.copy(record)


def _get_field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _has_field(record: Any, name: str) -> bool:
    if isinstance(record, dict):
        return name in record
    return hasattr(record, name)


def _set_field(record: Any, name: str, value: Any) -> None:
    if isinstance(record, dict):
        record[name] = value
    else:
        setattr(record, name, value)


class EncryptionService:
    """Encrypt and decrypt sensitive record fields.

    The master key is injected once and never changes for the lifetime of
    the service. Every call draws its own salt and IV, so one instance is
    safe to share between threads and tasks.
    """

    def __init__(self, master_key: bytes):
        if not master_key:
            raise EncryptionConfigurationError("Master key must not be empty")
        self._master_key = bytes(master_key)

    def __repr__(self) -> str:
        return "EncryptionService(master_key=<redacted>)"

    def encrypt(self, plaintext: Optional[str], purpose: PurposeLike = Purpose.DEFAULT) -> Optional[str]:
        """Encrypt a value into an envelope string.

        ``None``, empty and whitespace-only values encrypt to ``None``.
        """
        if _is_blank(plaintext):
            return None

        purpose = _purpose_name(purpose)
        try:
            salt = crypto.generate_salt()
            key = crypto.derive_key(self._master_key, salt, purpose)
            iv, auth_tag, ciphertext = crypto.seal(plaintext.encode("utf-8"), key)
        except Exception as exc:
            logger.error(f"Encryption failed: {type(exc).__name__}", extra={"purpose": purpose})
            raise EncryptionError("Failed to encrypt data") from exc
        return encode_envelope(salt, iv, auth_tag, ciphertext)

    def decrypt(self, value: Optional[str], purpose: PurposeLike = Purpose.DEFAULT) -> Optional[str]:
        """Decrypt an envelope string.

        Values without the envelope shape are legacy plaintext and are
        returned unchanged.

        Raises:
            DecryptionError: the envelope does not decode or authenticate.
        """
        if _is_blank(value):
            return None

        stored = classify(value)
        if not isinstance(stored, EncryptedEnvelope):
            logger.debug("Value is not in envelope format, returning it as plaintext")
            return stored.value
        return self._open(stored, _purpose_name(purpose))

    def _open(self, stored: EncryptedEnvelope, purpose: str) -> str:
        envelope = stored.decode()
        key = crypto.derive_key(self._master_key, envelope.salt, purpose)
        plaintext = crypto.open_sealed(envelope.ciphertext, key, envelope.iv, envelope.auth_tag)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError("Decrypted data is not valid UTF-8") from exc

    @staticmethod
    def is_encrypted(value: Optional[str]) -> bool:
        return looks_encrypted(value)

    def encrypt_fields(self, record: Any, fields: Iterable[str], purpose: PurposeLike = Purpose.DEFAULT) -> Any:
        """Return a copy of ``record`` with the named fields encrypted.

        Absent and ``None`` fields are left untouched. Dicts and ORM rows
        come back as dicts; other objects are shallow-copied.
        """
        encrypted = _copy_record(record)
        for name in fields:
            if not _has_field(encrypted, name):
                continue
            value = _get_field(encrypted, name)
            if value is None:
                continue
            _set_field(encrypted, name, self.encrypt(str(value), purpose))
        return encrypted

    def decrypt_record(self, record: Any, fields: Iterable[str], purpose: PurposeLike = Purpose.DEFAULT) -> RecordDecryption:
        """Decrypt the named fields of a copy of ``record``, field by field.

        A field that fails to decrypt keeps its stored value and is reported
        as ``FAILED``; the other fields are still processed.
        """
        purpose = _purpose_name(purpose)
        decrypted = _copy_record(record)
        result = RecordDecryption(record=decrypted)

        for name in fields:
            value = _get_field(decrypted, name)
            if value is None:
                result.outcomes.append(FieldOutcome(name, FieldStatus.EMPTY))
                continue

            stored = classify(str(value))
            if not isinstance(stored, EncryptedEnvelope):
                result.outcomes.append(FieldOutcome(name, FieldStatus.PLAINTEXT))
                continue

            try:
                _set_field(decrypted, name, self._open(stored, purpose))
            except DecryptionError as exc:
                logger.warning(
                    f"Failed to decrypt field {name}: {type(exc).__name__}",
                    extra={"field": name, "purpose": purpose},
                )
                result.outcomes.append(FieldOutcome(name, FieldStatus.FAILED, type(exc).__name__))
                continue
            result.outcomes.append(FieldOutcome(name, FieldStatus.DECRYPTED))

        return result

    def decrypt_fields(self, record: Any, fields: Iterable[str], purpose: PurposeLike = Purpose.DEFAULT) -> Any:
        """Return a copy of ``record`` with the named fields decrypted. Never raises."""
        return self.decrypt_record(record, fields, purpose).record


@lru_cache(maxsize=None)
def get_encryption_service() -> EncryptionService:
    """Process-wide service built from settings on first use"""
    return EncryptionService(get_master_key())
