# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from core.database import Base

ACTION_CREATED = "created"
ACTION_STATUS_CHANGED = "status_changed"

ACTOR_SYSTEM = "system"
ACTOR_OPERATOR = "operator"


class AuditLogEntry(Base):
    """Append-only record of an action taken on an incident."""
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore
    incident_id = Column(String(40), ForeignKey("incidents.id"), index=True, nullable=False)  # type: ignore
    action = Column(String(64), nullable=False)  # type: ignore
    actor = Column(String(120), nullable=False, default=ACTOR_SYSTEM)  # type: ignore
    notes = Column(Text, nullable=True)  # type: ignore
    timestamp = Column(String(32), nullable=False)  # type: ignore
