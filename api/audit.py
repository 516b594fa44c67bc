# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from fastapi import APIRouter, Depends

from api.dependencies import get_incident_service
from schemas.audit_log import AuditLogEntryResponse, AuditLogListResponse
from services.incident_service import IncidentLifecycleService

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("/{incident_id}", response_model=AuditLogListResponse)
def get_audit_trail(
    incident_id: str,
    service: IncidentLifecycleService = Depends(get_incident_service),
):
    entries = service.get_audit_trail(incident_id)
    return AuditLogListResponse(
        count=len(entries),
        audit_log=[AuditLogEntryResponse.model_validate(entry) for entry in entries],
    )
