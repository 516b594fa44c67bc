# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from __future__ import annotations

from typing import Optional, Union

from sqlalchemy.orm import Session

from core.exceptions import IncidentNotFoundError, InvalidStatusError
from models.incident import Incident, IncidentStatus
from schemas.incident import IncidentCreate
from services.identifier_service import generate_incident_id, utc_now_iso


def parse_status(value: Union[str, IncidentStatus]) -> IncidentStatus:
    if isinstance(value, IncidentStatus):
        return value
    normalized = str(value or "").strip().lower()
    try:
        return IncidentStatus(normalized)
    except ValueError:
        raise InvalidStatusError(value, IncidentStatus.values())


class IncidentStore:
    """
    Persistence for incident rows.

    Methods flush but never commit; the caller owns the transaction so a row
    change and its audit entry land together.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: IncidentCreate, now: Optional[str] = None) -> Incident:
        now = now or utc_now_iso()
        incident = Incident(
            id=data.id or generate_incident_id(),
            device_id=data.device_id,
            phone=data.phone,
            timestamp=data.timestamp or now,
            latitude=data.latitude,
            longitude=data.longitude,
            accuracy=data.accuracy,
            language=data.language,
            transmission_type=data.transmission_type,
            photo_path=data.photo_path,
            status=IncidentStatus.UNVERIFIED,
            created_at=now,
            updated_at=now,
        )
        self.db.add(incident)
        self.db.flush()
        return incident

    def list(self, status: Optional[IncidentStatus] = None, limit: Optional[int] = None) -> list[Incident]:
        query = self.db.query(Incident)
        if status is not None:
            query = query.filter(Incident.status == status)
        query = query.order_by(Incident.created_at.desc(), Incident.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_by_id(self, incident_id: str) -> Optional[Incident]:
        return self.db.query(Incident).filter(Incident.id == incident_id).first()

    def update_status(self, incident_id: str, status: IncidentStatus, timestamp: str) -> Incident:
        incident = (
            self.db.query(Incident)
            .filter(Incident.id == incident_id)
            .with_for_update()
            .first()
        )
        if not incident:
            raise IncidentNotFoundError(incident_id)

        incident.status = status  # type: ignore[assignment]
        # updated_at never moves backwards, even if the clock does
        incident.updated_at = max(timestamp, str(incident.updated_at))  # type: ignore[assignment]
        self.db.flush()
        return incident

    def photo_paths(self) -> set[str]:
        rows = self.db.query(Incident.photo_path).filter(Incident.photo_path.isnot(None)).all()
        return {row[0] for row in rows}
