# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.database import get_db
from services.incident_service import IncidentLifecycleService
from services.photo_storage import PhotoStorage


def get_photo_storage(request: Request) -> PhotoStorage:
    return request.app.state.photo_storage


def get_incident_service(
    request: Request,
    db: Session = Depends(get_db),
    photo_storage: PhotoStorage = Depends(get_photo_storage),
) -> IncidentLifecycleService:
    return IncidentLifecycleService(
        db,
        photo_storage,
        max_photo_size_kb=request.app.state.photo_max_size_kb,
    )
