# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AuditLogEntryResponse(BaseModel):
    id: int
    incident_id: str
    action: str
    actor: str
    notes: Optional[str] = None
    timestamp: str

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    success: bool = True
    count: int
    audit_log: list[AuditLogEntryResponse]
