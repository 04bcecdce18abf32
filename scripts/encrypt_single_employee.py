# scripts/encrypt_single_employee.py
"""
Encrypt the sensitive data of one employee. Useful to try the migration
on a single record before running it on the whole database.

Usage:
    python scripts/encrypt_single_employee.py <employee_id>
"""
import asyncio
import json
import sys

from recordguard.core.encryption import get_encryption_service
from recordguard.core.exceptions import EncryptionConfigurationError
from recordguard.db.database import close_db
from recordguard.services.migration import MigrationDriver, build_default_stores


async def main(employee_id: str) -> int:
    try:
        service = get_encryption_service()
    except EncryptionConfigurationError as exc:
        print(f"ERROR: {exc}")
        return 1

    driver = MigrationDriver(service, build_default_stores(), max_concurrency=1)
    try:
        report = await driver.migrate_employee(employee_id)
    finally:
        await close_db()

    print(json.dumps(report.to_dict(), indent=2))
    print(f"Encrypted {report.total_fields_encrypted} field(s) for employee {employee_id}")
    return 1 if report.errors else 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/encrypt_single_employee.py <employee_id>")
        print("Example: python scripts/encrypt_single_employee.py 2026-0001")
        sys.exit(1)
    sys.exit(asyncio.run(main(sys.argv[1])))
