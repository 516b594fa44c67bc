# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import re
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

INCIDENT_ID_PREFIX = "INC"
INCIDENT_ID_PATTERN = re.compile(r"^INC-\d{13}-[0-9a-f]{9}$")


def utc_now_iso(at_time: Optional[datetime] = None) -> str:
    """Server timestamp, e.g. 2026-10-19T08:15:02.417Z (fixed width, sorts chronologically)."""
    moment = (at_time or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_incident_id(at_time: Optional[datetime] = None) -> str:
    """
    Time-sortable incident id: prefix, epoch milliseconds, random suffix.
    Collisions need two reports in the same millisecond drawing the same 36-bit suffix.
    """
    moment = at_time or datetime.now(timezone.utc)
    millis = int(moment.timestamp() * 1000)
    return f"{INCIDENT_ID_PREFIX}-{millis}-{uuid4().hex[:9]}"
