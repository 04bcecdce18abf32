"""
Integration tests for the SQLAlchemy record store
Runs the migration against a real (SQLite) database
"""

import pytest
from decimal import Decimal

from recordguard.db.models import Employee, EmploymentDetail, GovernmentID, MedicalInfo
from recordguard.db.repositories.base import BaseRepository
from recordguard.db.repositories.record_store import SqlAlchemyRecordStore
from recordguard.services.migration import (
    DEFAULT_FAMILIES,
    MigrationDriver,
    build_default_stores,
    families_by_name,
)


async def seed(session_factory):
    async with session_factory() as session:
        session.add_all([
            Employee(employee_id="2026-0001", first_name="Ana", last_name="Reyes"),
            Employee(employee_id="2026-0002", first_name="Ben", last_name="Cruz"),
        ])
        await session.commit()

        session.add_all([
            GovernmentID(id="gov-1", employee_id="2026-0001", sss_number="34-1234567-8", tin_number="123-456-789"),
            GovernmentID(id="gov-2", employee_id="2026-0002", passport_number="P7654321B"),
            MedicalInfo(id="med-1", employee_id="2026-0001", allergies="Penicillin", blood_type="O+", disability_type="none"),
            EmploymentDetail(id="emp-1", employee_id="2026-0001", position="Registrar", salary_amount=str(Decimal("42000.00")), salary_grade="SG-11"),
        ])
        await session.commit()


@pytest.mark.asyncio
class TestSqlAlchemyRecordStore:

    async def test_fetch_and_update(self, session_factory):
        await seed(session_factory)
        store = SqlAlchemyRecordStore(session_factory, GovernmentID)

        assert await store.list_ids() == ["gov-1", "gov-2"]
        assert await store.fetch("gov-1", ["sss_number", "passport_number"]) == {
            "sss_number": "34-1234567-8",
            "passport_number": None,
        }
        assert await store.fetch("missing", ["sss_number"]) is None

        await store.update("gov-1", {"sss_number": "changed"})
        assert (await store.fetch("gov-1", ["sss_number"]))["sss_number"] == "changed"

    async def test_find_by_employee(self, session_factory):
        await seed(session_factory)
        store = SqlAlchemyRecordStore(session_factory, MedicalInfo)

        assert await store.find_by_employee("2026-0001") == "med-1"
        assert await store.find_by_employee("2026-0002") is None

    async def test_full_migration_is_idempotent(self, session_factory, service):
        await seed(session_factory)
        driver = MigrationDriver(service, build_default_stores(session_factory), max_concurrency=1)

        first = await driver.run(DEFAULT_FAMILIES)
        second = await driver.run(DEFAULT_FAMILIES)

        assert first.families["government"].encrypted == 2
        assert first.families["medical"].encrypted == 1
        assert first.families["salary"].encrypted == 1
        assert first.total_fields_encrypted == 7
        assert second.total_encrypted == 0
        assert second.errors == []

        async with session_factory() as session:
            medical = await BaseRepository(MedicalInfo, session).get("med-1")
            salary = await BaseRepository(EmploymentDetail, session).get("emp-1")

        assert service.is_encrypted(medical.allergies)
        assert medical.disability_type == "none"
        assert service.decrypt(medical.blood_type, "medical") == "O+"
        assert service.decrypt(salary.salary_amount, "salary") == "42000.00"
        assert salary.position == "Registrar"

        decrypted = service.decrypt_fields(
            {"allergies": medical.allergies, "blood_type": medical.blood_type},
            ["allergies", "blood_type"],
            "medical",
        )
        assert decrypted == {"allergies": "Penicillin", "blood_type": "O+"}

    async def test_single_employee_migration(self, session_factory, service):
        await seed(session_factory)
        driver = MigrationDriver(service, build_default_stores(session_factory))

        report = await driver.migrate_employee("2026-0002", families_by_name(["government", "medical"]))

        assert report.families["government"].fields_encrypted == 1
        assert report.families["medical"].encrypted == 0

        store = SqlAlchemyRecordStore(session_factory, GovernmentID)
        untouched = await store.fetch("gov-1", ["sss_number"])
        migrated = await store.fetch("gov-2", ["passport_number"])
        assert untouched["sss_number"] == "34-1234567-8"
        assert service.decrypt(migrated["passport_number"], "government") == "P7654321B"
