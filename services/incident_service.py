# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Optional, Union

from sqlalchemy.orm import Session

from core.exceptions import AuditConstraintError, IncidentNotFoundError, StorageError
from models.audit_log import ACTION_CREATED, ACTION_STATUS_CHANGED, ACTOR_OPERATOR, ACTOR_SYSTEM, AuditLogEntry
from models.incident import Incident, IncidentStatus
from schemas.incident import IncidentCreate
from services.audit_service import AuditService
from services.identifier_service import utc_now_iso
from services.image_service import DEFAULT_MAX_SIZE_KB, CompressionResult, compress_image
from services.incident_store import IncidentStore, parse_status
from services.photo_storage import PhotoStorage

log = logging.getLogger(__name__)

LOCATION_KEYS = ("latitude", "longitude", "accuracy")


def parse_location(raw: Any) -> dict:
    """
    Pull latitude/longitude/accuracy out of a location payload.

    Accepts a JSON string or a mapping. Anything malformed yields an empty dict.
    """
    if raw is None or raw == "":
        return {}

    payload = raw
    if isinstance(raw, (str, bytes)):
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            log.warning("Ignoring unparseable location payload: %s", exc)
            return {}

    if not isinstance(payload, Mapping):
        log.warning("Ignoring location payload of type %s", type(payload).__name__)
        return {}

    return {key: payload[key] for key in LOCATION_KEYS if key in payload}


@dataclass
class ReportOutcome:
    incident: Incident
    compression: Optional[CompressionResult] = None

    @property
    def photo_status(self) -> Optional[str]:
        return self.compression.outcome.value if self.compression else None


@dataclass
class IncidentDetail:
    incident: Incident
    audit_log: list[AuditLogEntry] = field(default_factory=list)


class IncidentLifecycleService:
    """
    Entry point for reporting, triaging and reading incidents.

    Every write commits exactly once, together with its audit entry.
    """

    def __init__(
        self,
        db: Session,
        photo_storage: PhotoStorage,
        max_photo_size_kb: int = DEFAULT_MAX_SIZE_KB,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.db = db
        self.photo_storage = photo_storage
        self.max_photo_size_kb = max_photo_size_kb
        self.clock = clock
        self.incidents = IncidentStore(db)
        self.audit = AuditService(db)

    def _rollback(self, photo_name: Optional[str]) -> None:
        self.db.rollback()
        if photo_name:
            self.photo_storage.discard(photo_name)

    def report_incident(self, data: IncidentCreate, photo: Optional[Path] = None) -> ReportOutcome:
        """`photo` is an upload already written into the photo storage area."""
        compression = None
        stored_photo = None
        if photo is not None:
            # compress before the row exists so photo_path always names a real file
            compression = compress_image(photo, self.max_photo_size_kb)
            stored_photo = compression.filename
            data = data.model_copy(update={"photo_path": stored_photo})

        try:
            now = self.clock()
            incident = self.incidents.create(data, now=now)
            self.audit.append(
                str(incident.id),
                ACTION_CREATED,
                actor=ACTOR_SYSTEM,
                notes=f"Incident created via {incident.transmission_type}",
                timestamp=now,
            )
            self.db.commit()
        except AuditConstraintError:
            self._rollback(stored_photo)
            log.error("Audit entry rejected while creating incident", exc_info=True)
            raise
        except Exception as exc:
            self._rollback(stored_photo)
            log.error("Failed to store incident: %s", exc, exc_info=True)
            raise StorageError("Failed to create incident") from exc

        self.db.refresh(incident)
        log.info(
            "Incident %s created via %s (photo: %s)",
            incident.id, incident.transmission_type, compression.outcome.value if compression else "none",
        )
        return ReportOutcome(incident=incident, compression=compression)

    def change_status(
        self,
        incident_id: str,
        status: Union[str, IncidentStatus, None] = None,
        notes: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Incident:
        incident = self.incidents.get_by_id(incident_id)
        if not incident:
            raise IncidentNotFoundError(incident_id)

        if status is None or (isinstance(status, str) and not status.strip()):
            return incident

        new_status = parse_status(status)
        try:
            updated = self.incidents.update_status(incident_id, new_status, self.clock())
            self.audit.append(
                incident_id,
                ACTION_STATUS_CHANGED,
                actor=(actor or "").strip() or ACTOR_OPERATOR,
                notes=(notes or "").strip() or f"Status changed to {new_status.value}",
                timestamp=str(updated.updated_at),
            )
            self.db.commit()
        except AuditConstraintError:
            self._rollback(None)
            log.error("Audit entry rejected while updating incident %s", incident_id, exc_info=True)
            raise
        except IncidentNotFoundError:
            self._rollback(None)
            raise
        except Exception as exc:
            self._rollback(None)
            log.error("Failed to update incident %s: %s", incident_id, exc, exc_info=True)
            raise StorageError("Failed to update incident") from exc

        self.db.refresh(updated)
        log.info("Incident %s status -> %s", incident_id, new_status.value)
        return updated

    def get_incident(self, incident_id: str) -> IncidentDetail:
        incident = self.incidents.get_by_id(incident_id)
        if not incident:
            raise IncidentNotFoundError(incident_id)
        return IncidentDetail(incident=incident, audit_log=self.audit.list_for(incident_id))

    def list_incidents(self, status: Optional[str] = None, limit: Optional[int] = None) -> list[Incident]:
        status_filter = parse_status(status) if status else None
        return self.incidents.list(status=status_filter, limit=limit)

    def get_audit_trail(self, incident_id: str) -> list[AuditLogEntry]:
        return self.audit.list_for(incident_id)

    def get_photo(self, incident_id: str) -> Path:
        incident = self.incidents.get_by_id(incident_id)
        if not incident:
            raise IncidentNotFoundError(incident_id)
        return self.photo_storage.resolve(incident.photo_path)  # type: ignore[arg-type]

    def reconcile_photos(self, grace_minutes: int) -> list[str]:
        """Remove stored photos that no incident references (left behind by crashes)."""
        referenced = self.incidents.photo_paths()
        return self.photo_storage.sweep_orphans(referenced, older_than=timedelta(minutes=grace_minutes))
