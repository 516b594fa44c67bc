# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

"""
Domain errors raised by the incident services and mapped to HTTP responses in main.py.
"""


class EishAlertError(Exception):
    """Base class for all incident service errors."""


class IncidentNotFoundError(EishAlertError):
    def __init__(self, incident_id: str):
        super().__init__(f"Incident {incident_id} not found")
        self.incident_id = incident_id


class PhotoNotFoundError(EishAlertError):
    """No photo recorded for the incident, or the stored file is gone."""


class InvalidStatusError(EishAlertError):
    def __init__(self, value: object, allowed: list[str]):
        super().__init__(f"Invalid status '{value}'. Allowed: {', '.join(allowed)}")
        self.value = value
        self.allowed = allowed


class PhotoRejectedError(EishAlertError):
    """Upload refused before it reached the compression pipeline."""


class StorageError(EishAlertError):
    """The database could not complete a write. Nothing was committed."""


class AuditConstraintError(StorageError):
    """An audit entry referenced an incident that does not exist."""

    def __init__(self, incident_id: str):
        super().__init__(f"Audit entry references unknown incident {incident_id}")
        self.incident_id = incident_id
