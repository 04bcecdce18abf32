# recordguard/services/migration.py
"""
Encrypt existing plaintext data in place.

Safe to run on a live store and safe to re-run:
- values that already look encrypted are skipped, so a second run is a no-op
- every new envelope is decrypted again before it is written
- a record is written in one update or not at all
- one failing record never stops the batch
"""

import asyncio
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from recordguard.core.audit_log import AuditEventType, AuditLogger
from recordguard.core.config import settings
from recordguard.core.constants import SENSITIVE_FIELDS, RecordFamily
from recordguard.core.encryption import EncryptionService
from recordguard.core.envelope import looks_encrypted
from recordguard.core.exceptions import DecryptionError
from recordguard.core.logging import logger
from recordguard.db.repositories.record_store import RecordStore


@dataclass(frozen=True)
class FieldFamily:
    """A record family, the purpose its fields are encrypted under, and the fields"""
    name: str
    purpose: str
    fields: Tuple[str, ...]
    # Also compare the verified plaintext with the original, not just decryptability
    strict_verify: bool = True


DEFAULT_FAMILIES: Tuple[FieldFamily, ...] = tuple(
    FieldFamily(name=name, purpose=purpose, fields=fields)
    for name, (purpose, fields) in SENSITIVE_FIELDS.items()
)


class RecordStatus(str, Enum):
    ENCRYPTED = "encrypted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordError:
    family: str
    record_id: Optional[str]
    reason: str
    field: Optional[str] = None


@dataclass
class RecordResult:
    family: str
    record_id: str
    status: RecordStatus
    fields: List[str] = field(default_factory=list)
    error: Optional[RecordError] = None


@dataclass
class FamilyCounts:
    encrypted: int = 0          # records updated
    skipped: int = 0            # records with nothing to do
    errors: int = 0             # records left untouched because of a failure
    fields_encrypted: int = 0


@dataclass
class MigrationReport:
    families: Dict[str, FamilyCounts] = field(default_factory=dict)
    errors: List[RecordError] = field(default_factory=list)
    cancelled: bool = False

    def counts(self, family: str) -> FamilyCounts:
        return self.families.setdefault(family, FamilyCounts())

    def add(self, result: RecordResult) -> None:
        """Fold one record result into the totals"""
        counts = self.counts(result.family)
        if result.status == RecordStatus.ENCRYPTED:
            counts.encrypted += 1
            counts.fields_encrypted += len(result.fields)
        elif result.status == RecordStatus.SKIPPED:
            counts.skipped += 1
        else:
            counts.errors += 1
            if result.error is not None:
                self.errors.append(result.error)

    def merge(self, other: "MigrationReport") -> None:
        for name, theirs in other.families.items():
            ours = self.counts(name)
            ours.encrypted += theirs.encrypted
            ours.skipped += theirs.skipped
            ours.errors += theirs.errors
            ours.fields_encrypted += theirs.fields_encrypted
        self.errors.extend(other.errors)
        self.cancelled = self.cancelled or other.cancelled

    @property
    def total_encrypted(self) -> int:
        return sum(c.encrypted for c in self.families.values())

    @property
    def total_fields_encrypted(self) -> int:
        return sum(c.fields_encrypted for c in self.families.values())

    @property
    def total_errors(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "families": {name: asdict(c) for name, c in self.families.items()},
            "errors": [asdict(e) for e in self.errors],
            "cancelled": self.cancelled,
        }


class MigrationDriver:
    """Encrypt not-yet-encrypted fields of persisted records"""

    def __init__(
        self,
        service: EncryptionService,
        stores: Mapping[str, RecordStore],
        *,
        verify: Optional[bool] = None,
        max_concurrency: Optional[int] = None,
        stop_event: Optional[asyncio.Event] = None,
        audit: Optional[AuditLogger] = None,
        progress_every: Optional[int] = None,
    ):
        self.service = service
        self.stores = dict(stores)
        self.verify = settings.MIGRATION_VERIFY if verify is None else verify
        self.max_concurrency = max_concurrency or settings.MIGRATION_MAX_CONCURRENCY
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.stop_event = stop_event or asyncio.Event()
        self.audit = audit or AuditLogger(actor="migration")
        self.progress_every = progress_every or settings.MIGRATION_PROGRESS_EVERY

    def stop(self) -> None:
        """Ask a running migration to stop before its next record"""
        self.stop_event.set()

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def _store_for(self, family: FieldFamily) -> RecordStore:
        try:
            return self.stores[family.name]
        except KeyError:
            raise ValueError(f"No record store registered for family '{family.name}'") from None

    async def run(self, families: Sequence[FieldFamily] = DEFAULT_FAMILIES) -> MigrationReport:
        """Migrate every record of every family and report the outcome"""
        for family in families:
            self._store_for(family)

        report = MigrationReport()
        logger.info(f"Starting encryption migration (verify={self.verify}, concurrency={self.max_concurrency})")
        await self.audit.log_event(
            event_type=AuditEventType.MIGRATION_STARTED,
            details={"families": [f.name for f in families], "verify": self.verify},
        )

        for family in families:
            if self.stopped:
                report.cancelled = True
                break
            await self._migrate_family(family, report)

        await self._finish(report)
        return report

    async def migrate_employee(self, employee_id: str, families: Sequence[FieldFamily] = DEFAULT_FAMILIES) -> MigrationReport:
        """Migrate the records of a single employee, one family at a time"""
        report = MigrationReport()
        logger.info(f"Encrypting data for employee {employee_id}", extra={"record_id": employee_id})

        for family in families:
            if self.stopped:
                report.cancelled = True
                break
            store = self._store_for(family)
            counts = report.counts(family.name)
            try:
                record_id = await store.find_by_employee(employee_id)
            except Exception as exc:
                logger.error(
                    f"Could not look up {family.name} record: {type(exc).__name__}",
                    extra={"family": family.name, "record_id": employee_id},
                )
                counts.errors += 1
                report.errors.append(RecordError(family.name, None, f"lookup failed: {type(exc).__name__}"))
                continue

            if record_id is None:
                logger.info(f"No {family.name} record found", extra={"family": family.name})
                continue

            result = await self._migrate_record(family, store, record_id)
            report.add(result)
            await self._audit_record(result)

        await self._finish(report)
        return report

    async def _migrate_family(self, family: FieldFamily, report: MigrationReport) -> None:
        store = self._store_for(family)
        counts = report.counts(family.name)
        logger.info(f"Encrypting {family.name} records...", extra={"family": family.name})

        try:
            record_ids = await store.list_ids()
        except Exception as exc:
            logger.error(f"Could not list {family.name} records: {type(exc).__name__}", extra={"family": family.name})
            counts.errors += 1
            report.errors.append(RecordError(family.name, None, f"listing failed: {type(exc).__name__}"))
            return

        logger.info(f"Found {len(record_ids)} {family.name} records", extra={"family": family.name})
        pending: asyncio.Queue = asyncio.Queue()
        for record_id in record_ids:
            pending.put_nowait(record_id)

        async def worker() -> None:
            # Checked once per record, never between the fields of a record
            while not self.stopped:
                try:
                    record_id = pending.get_nowait()
                except asyncio.QueueEmpty:
                    return
                result = await self._migrate_record(family, store, record_id)
                report.add(result)
                await self._audit_record(result)
                if result.status == RecordStatus.ENCRYPTED and counts.encrypted % self.progress_every == 0:
                    logger.info(f"  Encrypted {counts.encrypted} {family.name} records...", extra={"family": family.name})

        workers = [
            asyncio.ensure_future(worker())
            for _ in range(min(self.max_concurrency, len(record_ids)))
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            # No record may start or finish writing once the caller has given up
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        if not pending.empty():
            report.cancelled = True

        logger.info(
            f"{family.name}: {counts.encrypted} encrypted, {counts.skipped} skipped, {counts.errors} errors",
            extra={"family": family.name},
        )

    async def _migrate_record(self, family: FieldFamily, store: RecordStore, record_id: str) -> RecordResult:
        """Encrypt, verify and persist one record. Never raises."""
        extra = {"family": family.name, "record_id": str(record_id)}
        try:
            record = await store.fetch(record_id, family.fields)
            if record is None:
                return RecordResult(family.name, record_id, RecordStatus.SKIPPED)

            updates: Dict[str, str] = {}
            for name in family.fields:
                value = record.get(name)
                if value is None:
                    continue
                plaintext = value if isinstance(value, str) else str(value)
                if not plaintext.strip() or looks_encrypted(plaintext):
                    continue

                envelope = self.service.encrypt(plaintext, family.purpose)
                if envelope is None:
                    continue

                if self.verify and not self._verify(envelope, plaintext, family):
                    logger.error(f"Could not verify encryption of {name}, record skipped", extra={**extra, "field": name})
                    return RecordResult(
                        family.name,
                        record_id,
                        RecordStatus.FAILED,
                        error=RecordError(family.name, str(record_id), "verification failed", field=name),
                    )
                updates[name] = envelope

            if not updates:
                return RecordResult(family.name, record_id, RecordStatus.SKIPPED)

            await store.update(record_id, updates)
            return RecordResult(family.name, record_id, RecordStatus.ENCRYPTED, fields=list(updates))
        except Exception as exc:
            logger.error(f"Error encrypting {family.name} record: {type(exc).__name__}", extra=extra)
            return RecordResult(
                family.name,
                record_id,
                RecordStatus.FAILED,
                error=RecordError(family.name, str(record_id), type(exc).__name__),
            )

    def _verify(self, envelope: str, plaintext: str, family: FieldFamily) -> bool:
        """Decrypt a fresh envelope before it is allowed anywhere near storage"""
        if not looks_encrypted(envelope):
            return False
        try:
            decrypted = self.service.decrypt(envelope, family.purpose)
        except DecryptionError:
            return False
        if decrypted is None:
            return False
        if family.strict_verify:
            return decrypted == plaintext
        return True

    async def _audit_record(self, result: RecordResult) -> None:
        if result.status == RecordStatus.ENCRYPTED:
            await self.audit.log_event(
                event_type=AuditEventType.RECORD_ENCRYPTED,
                family=result.family,
                record_id=str(result.record_id),
                details={"fields": result.fields},
            )
        elif result.status == RecordStatus.FAILED and result.error is not None:
            await self.audit.log_event(
                event_type=AuditEventType.RECORD_FAILED,
                family=result.family,
                record_id=str(result.record_id),
                details={"reason": result.error.reason, "field": result.error.field},
            )

    async def _finish(self, report: MigrationReport) -> None:
        event_type = AuditEventType.MIGRATION_CANCELLED if report.cancelled else AuditEventType.MIGRATION_COMPLETED
        await self.audit.log_event(
            event_type=event_type,
            details={"families": report.to_dict()["families"], "errors": report.total_errors},
        )
        if report.cancelled:
            logger.warning("Migration stopped before all records were processed")
        logger.info(
            f"Migration finished: {report.total_encrypted} records encrypted, {report.total_errors} errors"
        )


def build_default_stores(session_factory=None) -> Dict[str, RecordStore]:
    """SQLAlchemy stores for the built-in record families"""
    from recordguard.db.models import EmploymentDetail, GovernmentID, MedicalInfo
    from recordguard.db.repositories.record_store import SqlAlchemyRecordStore

    if session_factory is None:
        from recordguard.db.database import async_session_local
        session_factory = async_session_local

    return {
        RecordFamily.MEDICAL.value: SqlAlchemyRecordStore(session_factory, MedicalInfo),
        RecordFamily.GOVERNMENT.value: SqlAlchemyRecordStore(session_factory, GovernmentID),
        RecordFamily.SALARY.value: SqlAlchemyRecordStore(session_factory, EmploymentDetail),
    }


def families_by_name(names: Iterable[str]) -> List[FieldFamily]:
    """Pick built-in families by name, keeping the requested order"""
    known = {family.name: family for family in DEFAULT_FAMILIES}
    unknown = [name for name in names if name not in known]
    if unknown:
        raise ValueError(f"Unknown record families: {', '.join(unknown)}")
    return [known[name] for name in names]
