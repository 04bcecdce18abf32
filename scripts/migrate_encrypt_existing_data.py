# scripts/migrate_encrypt_existing_data.py
"""
Encrypt existing plaintext data in the database.

Back up the database first. Safe to run more than once: fields that are
already encrypted are skipped. Ctrl+C stops after the records in flight.

Usage:
    python scripts/migrate_encrypt_existing_data.py [family ...] [--no-verify] [--concurrency N]
"""
import argparse
import asyncio
import json
import signal
import sys

from recordguard.core.config import settings
from recordguard.core.encryption import get_encryption_service
from recordguard.core.exceptions import EncryptionConfigurationError
from recordguard.core.logging import logger
from recordguard.db.database import close_db
from recordguard.services.migration import (
    DEFAULT_FAMILIES,
    MigrationDriver,
    build_default_stores,
    families_by_name,
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Encrypt existing sensitive fields")
    parser.add_argument("families", nargs="*", help="medical, government, salary (default: all)")
    parser.add_argument("--no-verify", action="store_true", help="skip the decrypt-before-write check")
    parser.add_argument("--concurrency", type=int, default=None, help="records migrated in parallel")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    families = families_by_name(args.families) if args.families else list(DEFAULT_FAMILIES)

    if not settings.ENCRYPTION_KEY and not settings.is_production:
        print("WARNING: ENCRYPTION_KEY not set, continuing with the default development key")

    try:
        service = get_encryption_service()
    except EncryptionConfigurationError as exc:
        logger.error(str(exc))
        print(f"ERROR: {exc}")
        return 1

    driver = MigrationDriver(
        service,
        build_default_stores(),
        verify=False if args.no_verify else None,
        max_concurrency=args.concurrency,
    )

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, driver.stop)
    except NotImplementedError:
        pass

    try:
        report = await driver.run(families)
    finally:
        await close_db()

    print(json.dumps(report.to_dict(), indent=2))
    return 1 if report.errors or report.cancelled else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
