# recordguard/core/exceptions.py
"""
Exception hierarchy for the field encryption engine.

Messages carry failure categories only. Ciphertext, key material and
plaintext never appear in an exception message.
"""


class RecordGuardError(Exception):
    """Base class for all engine errors"""


class EncryptionConfigurationError(RecordGuardError):
    """Master key missing or unusable (fatal)"""


class EncryptionError(RecordGuardError):
    """Sealing a value failed"""


class DecryptionError(RecordGuardError):
    """A stored envelope could not be turned back into plaintext"""


class AuthenticationError(DecryptionError):
    """GCM tag did not verify: tampering, wrong key or wrong purpose"""


class MalformedEnvelopeError(DecryptionError):
    """Value has the envelope shape but its segments do not decode"""


class NotAnEnvelope(ValueError):
    """Raised by the codec when a value is not envelope-shaped.

    Callers treat this as "legacy plaintext", never as corruption.
    """
