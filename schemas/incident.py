"""
Pydantic schemas for incident intake, updates and responses.
"""
import math
from datetime import datetime
from typing import Any, Optional

# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from models.incident import DEFAULT_LANGUAGE, DEFAULT_TRANSMISSION_TYPE, IncidentStatus
from schemas.audit_log import AuditLogEntryResponse

COORDINATE_LIMITS = {"latitude": 90.0, "longitude": 180.0}
MAX_ACCURACY_METERS = 10_000_000


class IncidentCreate(BaseModel):
    """
    Reporter-supplied fields for a new incident.

    Malformed optional values are coerced to None instead of failing the report.
    """
    id: Optional[str] = None
    device_id: Optional[str] = None
    phone: Optional[str] = None
    timestamp: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[int] = None
    language: str = DEFAULT_LANGUAGE
    transmission_type: str = DEFAULT_TRANSMISSION_TYPE
    photo_path: Optional[str] = None

    @field_validator("id", "device_id", "phone", "photo_path", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("language", "transmission_type", mode="before")
    @classmethod
    def default_when_blank(cls, v: Any, info: ValidationInfo) -> str:
        fallback = DEFAULT_LANGUAGE if info.field_name == "language" else DEFAULT_TRANSMISSION_TYPE
        if v is None:
            return fallback
        return str(v).strip() or fallback

    @field_validator("timestamp", mode="before")
    @classmethod
    def iso_or_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, datetime):
            return v.isoformat()
        v = str(v).strip()
        # fromisoformat() rejects a trailing Z before Python 3.11
        candidate = v[:-1] + "+00:00" if v.endswith(("Z", "z")) else v
        try:
            datetime.fromisoformat(candidate)
        except ValueError:
            return None
        return v

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coordinate_or_none(cls, v: Any, info: ValidationInfo) -> Optional[float]:
        if v is None or isinstance(v, bool):
            return None
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(value) or abs(value) > COORDINATE_LIMITS[info.field_name]:
            return None
        return value

    @field_validator("accuracy", mode="before")
    @classmethod
    def accuracy_or_none(cls, v: Any) -> Optional[int]:
        if v is None or isinstance(v, bool):
            return None
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(value) or value < 0 or value > MAX_ACCURACY_METERS:
            return None
        return int(round(value))


class IncidentUpdateRequest(BaseModel):
    status: Optional[str] = Field(None, max_length=40)
    notes: Optional[str] = Field(None, max_length=5000)
    actor: Optional[str] = Field(None, max_length=120)


class IncidentResponse(BaseModel):
    id: str
    device_id: Optional[str] = None
    phone: Optional[str] = None
    timestamp: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[int] = None
    language: str
    transmission_type: str
    photo_path: Optional[str] = None
    status: IncidentStatus
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class IncidentCreatedResponse(BaseModel):
    success: bool = True
    incident_id: str
    message: str
    photo_status: Optional[str] = None


class IncidentListResponse(BaseModel):
    success: bool = True
    count: int
    incidents: list[IncidentResponse]


class IncidentDetailResponse(BaseModel):
    success: bool = True
    incident: IncidentResponse
    audit_log: list[AuditLogEntryResponse]


class IncidentUpdateResponse(BaseModel):
    success: bool = True
    incident: IncidentResponse
