# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

"""
Services module - Business logic layer for EishAlert.
"""
from services.audit_service import AuditService
from services.incident_service import IncidentLifecycleService
from services.incident_store import IncidentStore

__all__ = ["AuditService", "IncidentLifecycleService", "IncidentStore"]
