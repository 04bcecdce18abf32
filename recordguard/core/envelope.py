# recordguard/core/envelope.py
"""
Ciphertext envelope codec.

Wire format, the only on-disk contract::

    base64(salt):base64(iv):base64(authTag):base64(ciphertext)

Exactly four segments. Any other segment count means "not encrypted".
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from recordguard.core.crypto import AUTH_TAG_SIZE, IV_SIZE, SALT_SIZE
from recordguard.core.exceptions import MalformedEnvelopeError, NotAnEnvelope

SEPARATOR = ":"
SEGMENT_COUNT = 4


@dataclass(frozen=True)
class Envelope:
    salt: bytes
    iv: bytes
    auth_tag: bytes
    ciphertext: bytes

    def encode(self) -> str:
        return encode_envelope(self.salt, self.iv, self.auth_tag, self.ciphertext)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encode_envelope(salt: bytes, iv: bytes, auth_tag: bytes, ciphertext: bytes) -> str:
    return SEPARATOR.join(_b64(part) for part in (salt, iv, auth_tag, ciphertext))


def split_segments(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Return the four segments of an envelope-shaped value, else ``None``"""
    if not value:
        return None
    parts = value.split(SEPARATOR)
    if len(parts) != SEGMENT_COUNT:
        return None
    return tuple(parts)


def looks_encrypted(value: Optional[str]) -> bool:
    """
    Cheap shape check: exactly four colon-separated segments.

    Best-effort signal for "try to decrypt this", not a validity proof.
    """
    return split_segments(value) is not None


def _decode_segments(segments: Tuple[str, ...]) -> Envelope:
    try:
        salt, iv, auth_tag, ciphertext = (
            base64.b64decode(segment, validate=True) for segment in segments
        )
    except (binascii.Error, ValueError) as exc:
        raise MalformedEnvelopeError("Envelope segment is not valid base64") from exc

    if len(salt) != SALT_SIZE or len(iv) != IV_SIZE or len(auth_tag) != AUTH_TAG_SIZE:
        raise MalformedEnvelopeError("Envelope segment has an unexpected length")
    return Envelope(salt=salt, iv=iv, auth_tag=auth_tag, ciphertext=ciphertext)


def decode_envelope(value: Optional[str]) -> Envelope:
    """
    Parse a stored value into its four components.

    Raises:
        NotAnEnvelope: the value does not have four segments (plaintext).
        MalformedEnvelopeError: four segments that do not decode.
    """
    segments = split_segments(value)
    if segments is None:
        raise NotAnEnvelope("Value is not in envelope format")
    return _decode_segments(segments)


@dataclass(frozen=True)
class PlaintextField:
    """A stored value that is not envelope-shaped (legacy plaintext)"""
    value: str


@dataclass(frozen=True)
class EncryptedEnvelope:
    """A stored value with the envelope shape, segments already split"""
    raw: str
    segments: Tuple[str, ...]

    def decode(self) -> Envelope:
        return _decode_segments(self.segments)


StoredValue = Union[PlaintextField, EncryptedEnvelope]


def classify(value: str) -> StoredValue:
    """Tag a value read from storage as plaintext or envelope, once"""
    segments = split_segments(value)
    if segments is None:
        return PlaintextField(value)
    return EncryptedEnvelope(raw=value, segments=segments)
