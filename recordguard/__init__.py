"""RecordGuard: field-level encryption for sensitive employee records."""

__version__ = "1.0.0"
