# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import AuditConstraintError
from models.audit_log import ACTOR_SYSTEM, AuditLogEntry
from services.identifier_service import utc_now_iso


class AuditService:
    """Append-only audit trail. Entries are never updated or deleted."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        incident_id: str,
        action: str,
        actor: str | None = ACTOR_SYSTEM,
        notes: str | None = None,
        timestamp: str | None = None,
    ) -> AuditLogEntry:
        entry = AuditLogEntry(
            incident_id=incident_id,
            action=action,
            actor=(actor or ACTOR_SYSTEM).strip() or ACTOR_SYSTEM,
            notes=notes,
            timestamp=timestamp or utc_now_iso(),
        )

        self.db.add(entry)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise AuditConstraintError(incident_id) from exc
        return entry

    def list_for(self, incident_id: str) -> list[AuditLogEntry]:
        return (
            self.db.query(AuditLogEntry)
            .filter(AuditLogEntry.incident_id == incident_id)
            .order_by(AuditLogEntry.timestamp.desc(), AuditLogEntry.id.desc())
            .all()
        )


__all__ = ["AuditService"]
