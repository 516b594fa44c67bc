# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse

from api.dependencies import get_incident_service, get_photo_storage
from schemas.audit_log import AuditLogEntryResponse
from schemas.incident import (
    IncidentCreate,
    IncidentCreatedResponse,
    IncidentDetailResponse,
    IncidentListResponse,
    IncidentResponse,
    IncidentUpdateRequest,
    IncidentUpdateResponse,
)
from services.incident_service import IncidentLifecycleService, parse_location
from services.photo_storage import PhotoStorage

router = APIRouter(prefix="/incidents", tags=["incidents"])


@router.post("", response_model=IncidentCreatedResponse, status_code=201)
def create_incident(
    location: Optional[str] = Form(None),
    language: Optional[str] = Form(None),
    device_id: Optional[str] = Form(None, alias="deviceId"),
    phone: Optional[str] = Form(None),
    timestamp: Optional[str] = Form(None),
    transmission_type: Optional[str] = Form(None, alias="transmissionType"),
    photo: Optional[UploadFile] = File(None),
    service: IncidentLifecycleService = Depends(get_incident_service),
    photo_storage: PhotoStorage = Depends(get_photo_storage),
):
    data = IncidentCreate(
        device_id=device_id,
        phone=phone,
        timestamp=timestamp,
        language=language,
        transmission_type=transmission_type,
        **parse_location(location),
    )

    upload_path = None
    if photo is not None and photo.filename:
        upload_path = photo_storage.save_upload(photo.filename, photo.content_type, photo.file)

    try:
        outcome = service.report_incident(data, upload_path)
    except Exception:
        if upload_path is not None:
            photo_storage.discard(upload_path.name)
        raise
    return IncidentCreatedResponse(
        incident_id=str(outcome.incident.id),
        message="Incident reported successfully",
        photo_status=outcome.photo_status,
    )


@router.get("", response_model=IncidentListResponse)
def list_incidents(
    status: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1),
    service: IncidentLifecycleService = Depends(get_incident_service),
):
    incidents = service.list_incidents(status=status, limit=limit)
    return IncidentListResponse(
        count=len(incidents),
        incidents=[IncidentResponse.model_validate(item) for item in incidents],
    )


@router.get("/{incident_id}", response_model=IncidentDetailResponse)
def get_incident(
    incident_id: str,
    service: IncidentLifecycleService = Depends(get_incident_service),
):
    detail = service.get_incident(incident_id)
    return IncidentDetailResponse(
        incident=IncidentResponse.model_validate(detail.incident),
        audit_log=[AuditLogEntryResponse.model_validate(entry) for entry in detail.audit_log],
    )


@router.patch("/{incident_id}", response_model=IncidentUpdateResponse)
def update_incident(
    incident_id: str,
    payload: IncidentUpdateRequest,
    service: IncidentLifecycleService = Depends(get_incident_service),
):
    incident = service.change_status(
        incident_id,
        status=payload.status,
        notes=payload.notes,
        actor=payload.actor,
    )
    return IncidentUpdateResponse(incident=IncidentResponse.model_validate(incident))


@router.get("/{incident_id}/photo")
def get_incident_photo(
    incident_id: str,
    service: IncidentLifecycleService = Depends(get_incident_service),
):
    return FileResponse(service.get_photo(incident_id))
