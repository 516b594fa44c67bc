# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import logging
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import BinaryIO, Iterable, Optional
from uuid import uuid4

from core.exceptions import PhotoNotFoundError, PhotoRejectedError

log = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
CHUNK_SIZE = 1024 * 1024


class PhotoStorage:
    """
    Flat blob area for incident photos.

    Incidents reference photos by filename only; full paths never leave this class.
    """

    def __init__(self, root: Path, max_upload_bytes: int):
        self.root = Path(root)
        self.max_upload_bytes = max_upload_bytes

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def save_upload(self, filename: Optional[str], content_type: Optional[str], stream: BinaryIO) -> Path:
        extension = Path(filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS or (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
            raise PhotoRejectedError("Only image files are allowed (jpeg, jpg, png, gif, webp)")

        self.ensure_root()
        target = self.root / f"{int(time.time() * 1000)}-{uuid4().hex[:9]}{extension}"
        written = 0
        with target.open("wb") as buffer:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_upload_bytes:
                    break
                buffer.write(chunk)

        if written > self.max_upload_bytes:
            target.unlink(missing_ok=True)
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise PhotoRejectedError(f"File too large. Maximum {limit_mb}MB.")
        if written == 0:
            target.unlink(missing_ok=True)
            raise PhotoRejectedError("Uploaded photo is empty")

        log.info("Stored upload %s (%d bytes)", target.name, written)
        return target

    def resolve(self, name: Optional[str]) -> Path:
        if not name or Path(name).name != name:
            raise PhotoNotFoundError("No photo available for this incident")
        path = self.root / name
        if not path.is_file():
            raise PhotoNotFoundError("Photo file not found")
        return path

    def discard(self, name: Optional[str]) -> None:
        if not name or Path(name).name != name:
            return
        try:
            (self.root / name).unlink(missing_ok=True)
        except OSError as exc:
            log.error("Could not remove photo %s: %s", name, exc)

    def sweep_orphans(self, referenced: Iterable[str], older_than: timedelta) -> list[str]:
        """Delete unreferenced photos older than the grace period. Returns the removed names."""
        if not self.root.is_dir():
            return []

        keep = set(referenced)
        cutoff = (datetime.now(timezone.utc) - older_than).timestamp()
        removed: list[str] = []

        for path in sorted(self.root.iterdir()):
            if not path.is_file() or path.name in keep:
                continue
            try:
                if path.stat().st_mtime > cutoff:
                    continue
                path.unlink()
            except OSError as exc:
                log.error("Could not remove orphaned photo %s: %s", path.name, exc)
                continue
            removed.append(path.name)

        if removed:
            log.info("Removed %d orphaned photo(s) from %s", len(removed), self.root)
        return removed

