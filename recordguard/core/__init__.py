"""Field-level encryption engine.

Public entry points live in :mod:`recordguard.core.encryption`.
"""
