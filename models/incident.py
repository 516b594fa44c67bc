"""
Incident SQLAlchemy model with a closed status vocabulary.
"""
from enum import Enum as PyEnum

# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

from sqlalchemy import Column, Enum, Float, Index, Integer, String

from core.database import Base


class IncidentStatus(PyEnum):
    """Enum for incident triage status."""
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    DISPATCHED = "dispatched"
    RESOLVED = "resolved"
    FALSE_ALARM = "false_alarm"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


DEFAULT_LANGUAGE = "eng"
DEFAULT_TRANSMISSION_TYPE = "app"


class Incident(Base):
    """
    A single reported event.

    Only status and updated_at change after creation. Timestamps are fixed-width
    ISO-8601 UTC strings so ordering by the column is chronological.
    """
    __tablename__ = "incidents"

    __table_args__ = (
        Index("idx_incidents_created_at", "created_at"),
    )

    id = Column(String(40), primary_key=True)
    device_id = Column(String(128), nullable=True)
    phone = Column(String(32), nullable=True)
    timestamp = Column(String(40), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    accuracy = Column(Integer, nullable=True)
    language = Column(String(16), nullable=False, default=DEFAULT_LANGUAGE)
    transmission_type = Column(String(32), nullable=False, default=DEFAULT_TRANSMISSION_TYPE)
    photo_path = Column(String(255), nullable=True)

    status = Column(
        Enum(
            IncidentStatus,
            native_enum=False,
            length=20,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=IncidentStatus.UNVERIFIED,
        index=True,
    )

    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)

    def __repr__(self) -> str:
        return f"<Incident(id={self.id}, status={self.status})>"
