import os
import time
from itertools import count
from pathlib import Path

import pytest

from core.exceptions import IncidentNotFoundError, InvalidStatusError, PhotoNotFoundError, StorageError
from models.audit_log import AuditLogEntry
from models.incident import IncidentStatus
from schemas.incident import IncidentCreate
from services.identifier_service import INCIDENT_ID_PATTERN
from services.image_service import QUALITY_FLOOR, CompressionOutcome
from services.incident_service import IncidentLifecycleService, parse_location


def audit_count(db_session) -> int:
    return db_session.query(AuditLogEntry).count()


def stepping_clock(*stamps: str):
    values = iter(stamps)
    return lambda: next(values)


def test_report_creates_unverified_incident_with_one_created_entry(incident_service, db_session):
    outcome = incident_service.report_incident(IncidentCreate(phone="+27820000000"))
    incident = outcome.incident

    assert incident.status == IncidentStatus.UNVERIFIED
    assert incident.created_at == incident.updated_at
    assert outcome.compression is None
    assert outcome.photo_status is None

    entries = incident_service.get_audit_trail(incident.id)
    assert len(entries) == 1
    assert entries[0].action == "created"
    assert entries[0].actor == "system"
    assert entries[0].notes == "Incident created via app"
    assert entries[0].incident_id == incident.id
    assert entries[0].timestamp == incident.created_at


def test_created_note_names_transmission_type(incident_service):
    outcome = incident_service.report_incident(IncidentCreate(transmission_type="sms"))

    entries = incident_service.get_audit_trail(outcome.incident.id)
    assert entries[0].notes == "Incident created via sms"


def test_report_then_verify_scenario(incident_service):
    outcome = incident_service.report_incident(IncidentCreate(latitude=-26.2, longitude=28.0))
    incident_id = outcome.incident.id
    assert INCIDENT_ID_PATTERN.fullmatch(incident_id)

    detail = incident_service.get_incident(incident_id)
    assert detail.incident.status == IncidentStatus.UNVERIFIED
    assert detail.incident.latitude == -26.2
    assert detail.incident.longitude == 28.0
    assert len(detail.audit_log) == 1

    incident_service.change_status(incident_id, "verified", notes="confirmed by patrol")

    detail = incident_service.get_incident(incident_id)
    assert detail.incident.status == IncidentStatus.VERIFIED
    assert len(detail.audit_log) == 2
    newest, oldest = detail.audit_log
    assert newest.action == "status_changed"
    assert newest.notes == "confirmed by patrol"
    assert newest.actor == "operator"
    assert oldest.action == "created"


def test_change_status_default_note_and_actor(incident_service):
    incident_id = incident_service.report_incident(IncidentCreate()).incident.id

    incident_service.change_status(incident_id, "dispatched", actor="control-room-2")

    newest = incident_service.get_audit_trail(incident_id)[0]
    assert newest.notes == "Status changed to dispatched"
    assert newest.actor == "control-room-2"


def test_change_status_on_missing_incident_logs_nothing(incident_service, db_session):
    before = audit_count(db_session)

    with pytest.raises(IncidentNotFoundError):
        incident_service.change_status("INC-0000000000000-000000000", "verified")

    assert audit_count(db_session) == before


@pytest.mark.parametrize("status", [None, "", "   "])
def test_change_status_without_status_is_a_no_op(incident_service, db_session, status):
    incident = incident_service.report_incident(IncidentCreate()).incident
    updated_at = incident.updated_at
    before = audit_count(db_session)

    result = incident_service.change_status(incident.id, status, notes="just a note")

    assert result.status == IncidentStatus.UNVERIFIED
    assert result.updated_at == updated_at
    assert audit_count(db_session) == before


def test_change_status_rejects_unknown_status(incident_service, db_session):
    incident = incident_service.report_incident(IncidentCreate()).incident
    before = audit_count(db_session)

    with pytest.raises(InvalidStatusError):
        incident_service.change_status(incident.id, "on_fire")

    assert incident_service.get_incident(incident.id).incident.status == IncidentStatus.UNVERIFIED
    assert audit_count(db_session) == before


def test_each_status_change_appends_exactly_one_entry(incident_service):
    incident_id = incident_service.report_incident(IncidentCreate()).incident.id

    for status in ("verified", "dispatched", "resolved", "resolved"):
        incident_service.change_status(incident_id, status)

    entries = incident_service.get_audit_trail(incident_id)
    assert [entry.action for entry in entries].count("status_changed") == 4
    assert [entry.action for entry in entries].count("created") == 1


def test_updated_at_increases_with_status_changes(db_session, photo_storage):
    service = IncidentLifecycleService(
        db_session,
        photo_storage,
        clock=stepping_clock(
            "2026-10-19T08:00:00.000Z",
            "2026-10-19T08:05:00.000Z",
            "2026-10-19T08:04:00.000Z",
        ),
    )
    incident_id = service.report_incident(IncidentCreate()).incident.id

    first = service.change_status(incident_id, "verified").updated_at
    second = service.change_status(incident_id, "dispatched").updated_at

    assert first == "2026-10-19T08:05:00.000Z"
    assert second == "2026-10-19T08:05:00.000Z"
    assert service.get_audit_trail(incident_id)[0].timestamp == second


def test_list_incidents_filters_and_orders(db_session, photo_storage):
    ticks = count()
    service = IncidentLifecycleService(
        db_session,
        photo_storage,
        clock=lambda: f"2026-10-19T08:00:{next(ticks):02d}.000Z",
    )
    first = service.report_incident(IncidentCreate()).incident.id
    second = service.report_incident(IncidentCreate()).incident.id
    third = service.report_incident(IncidentCreate()).incident.id
    service.change_status(second, "false_alarm")

    assert [incident.id for incident in service.list_incidents()] == [third, second, first]
    assert [incident.id for incident in service.list_incidents(status="false_alarm")] == [second]
    assert [incident.id for incident in service.list_incidents(status="unverified")] == [third, first]
    assert [incident.id for incident in service.list_incidents(limit=1)] == [third]

    with pytest.raises(InvalidStatusError):
        service.list_incidents(status="archived")


def test_get_incident_missing(incident_service):
    with pytest.raises(IncidentNotFoundError):
        incident_service.get_incident("INC-missing")


def test_large_photo_is_compressed_and_original_removed(incident_service, photo_dir: Path, make_image):
    upload = make_image(photo_dir / "1760860800000-upload.png", size=(1500, 1250), noise=True, image_format="PNG")
    assert upload.stat().st_size >= 5 * 1024 * 1024

    outcome = incident_service.report_incident(IncidentCreate(), photo=upload)
    incident = outcome.incident

    assert not upload.exists()
    assert incident.photo_path == "1760860800000-upload-compressed.jpg"
    stored = photo_dir / incident.photo_path
    assert stored.exists()
    assert outcome.compression.outcome in (CompressionOutcome.COMPRESSED, CompressionOutcome.DEGRADED)
    assert stored.stat().st_size <= 500 * 1024 or outcome.compression.quality == QUALITY_FLOOR
    assert outcome.photo_status == outcome.compression.outcome.value


def test_unreadable_photo_is_kept_as_uploaded(incident_service, photo_dir: Path):
    upload = photo_dir / "1760860800000-garbled.jpg"
    upload.write_bytes(b"\xff\xd8 truncated")

    outcome = incident_service.report_incident(IncidentCreate(), photo=upload)

    assert outcome.photo_status == "fallback_original"
    assert outcome.incident.photo_path == upload.name
    assert upload.exists()
    assert incident_service.get_photo(outcome.incident.id) == upload


def test_failed_insert_rolls_back_and_discards_photo(incident_service, db_session, photo_dir: Path, make_image):
    incident_service.report_incident(IncidentCreate(id="INC-duplicate"))
    upload = make_image(photo_dir / "dup.jpg", size=(200, 200))

    with pytest.raises(StorageError):
        incident_service.report_incident(IncidentCreate(id="INC-duplicate"), photo=upload)

    assert list(photo_dir.iterdir()) == []
    assert len(incident_service.get_audit_trail("INC-duplicate")) == 1
    assert len(incident_service.list_incidents()) == 1


def test_get_photo_errors(incident_service, photo_dir: Path, make_image):
    without_photo = incident_service.report_incident(IncidentCreate()).incident.id
    with pytest.raises(PhotoNotFoundError):
        incident_service.get_photo(without_photo)

    upload = make_image(photo_dir / "scene.jpg", size=(200, 200))
    with_photo = incident_service.report_incident(IncidentCreate(), photo=upload).incident
    assert incident_service.get_photo(with_photo.id) == photo_dir / with_photo.photo_path

    (photo_dir / with_photo.photo_path).unlink()
    with pytest.raises(PhotoNotFoundError):
        incident_service.get_photo(with_photo.id)

    with pytest.raises(IncidentNotFoundError):
        incident_service.get_photo("INC-missing")


def test_reconcile_photos_removes_orphans_only(incident_service, photo_dir: Path, make_image):
    upload = make_image(photo_dir / "kept.jpg", size=(200, 200))
    incident = incident_service.report_incident(IncidentCreate(), photo=upload).incident
    orphan = photo_dir / "crashed-upload.jpg"
    orphan.write_bytes(b"x")
    old = time.time() - 7200
    os.utime(orphan, (old, old))
    os.utime(photo_dir / incident.photo_path, (old, old))

    removed = incident_service.reconcile_photos(grace_minutes=60)

    assert removed == ["crashed-upload.jpg"]
    assert (photo_dir / incident.photo_path).exists()


@pytest.mark.parametrize("raw, expected", [
    ('{"latitude": -26.2, "longitude": 28.0, "accuracy": 15}', {"latitude": -26.2, "longitude": 28.0, "accuracy": 15}),
    ({"latitude": 1.5, "altitude": 900}, {"latitude": 1.5}),
    ("{not json", {}),
    ("[1, 2]", {}),
    ("", {}),
    (None, {}),
])
def test_parse_location(raw, expected):
    assert parse_location(raw) == expected


def test_huge_accuracy_with_photo_is_stored_as_null(incident_service, photo_dir: Path, make_image):
    upload = make_image(photo_dir / "far.jpg", size=(200, 200))

    outcome = incident_service.report_incident(IncidentCreate(accuracy=1e300), photo=upload)

    assert outcome.incident.accuracy is None
    assert incident_service.get_photo(outcome.incident.id).exists()


def test_unexpected_failure_during_create_rolls_back_and_discards_photo(
    incident_service, db_session, photo_dir: Path, make_image, monkeypatch
):
    upload = make_image(photo_dir / "doomed.jpg", size=(200, 200))

    def broken_create(data, now=None):
        raise OverflowError("Python int too large to convert to SQLite INTEGER")

    monkeypatch.setattr(incident_service.incidents, "create", broken_create)

    with pytest.raises(StorageError):
        incident_service.report_incident(IncidentCreate(), photo=upload)

    assert list(photo_dir.iterdir()) == []
    assert audit_count(db_session) == 0

    monkeypatch.undo()
    assert incident_service.report_incident(IncidentCreate()).incident.status == IncidentStatus.UNVERIFIED


def test_unexpected_failure_during_status_change_rolls_back(incident_service, db_session, monkeypatch):
    incident_id = incident_service.report_incident(IncidentCreate()).incident.id
    before = audit_count(db_session)

    def broken_append(*args, **kwargs):
        raise RuntimeError("audit writer unavailable")

    monkeypatch.setattr(incident_service.audit, "append", broken_append)

    with pytest.raises(StorageError):
        incident_service.change_status(incident_id, "verified")

    monkeypatch.undo()
    assert incident_service.get_incident(incident_id).incident.status == IncidentStatus.UNVERIFIED
    assert audit_count(db_session) == before
