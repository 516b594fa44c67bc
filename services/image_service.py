# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

"""
Photo compression pipeline.

Uploads are re-encoded to JPEG until they fit the size budget. Quality starts at
80 and drops by 10 per attempt; the quality floor (30) is accepted whatever its
size. A photo that cannot be processed is kept as uploaded, never dropped.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps

log = logging.getLogger(__name__)

DEFAULT_MAX_SIZE_KB = 500
MAX_DIMENSION = 1200
QUALITY_START = 80
QUALITY_STEP = 10
QUALITY_FLOOR = 30


class CompressionOutcome(str, Enum):
    COMPRESSED = "compressed"
    DEGRADED = "degraded"
    FALLBACK_ORIGINAL = "fallback_original"


@dataclass(frozen=True)
class CompressionResult:
    outcome: CompressionOutcome
    path: Path
    quality: Optional[int]
    size_bytes: int
    error: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.path.name


def compressed_path_for(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}-compressed.jpg")


def _prepare(source: Image.Image) -> Image.Image:
    image = ImageOps.exif_transpose(source)
    # thumbnail() keeps the aspect ratio and never enlarges
    image.thumbnail((MAX_DIMENSION, MAX_DIMENSION), Image.Resampling.LANCZOS)
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def _encode(image: Image.Image, quality: int) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def compress_image(input_path: Path, max_size_kb: int = DEFAULT_MAX_SIZE_KB) -> CompressionResult:
    """
    Compress `input_path` into `<stem>-compressed.jpg` and delete the original.

    Never raises: processing errors return FALLBACK_ORIGINAL pointing at the
    untouched input.
    """
    input_path = Path(input_path)
    output_path = compressed_path_for(input_path)
    budget_bytes = max_size_kb * 1024

    try:
        with Image.open(input_path) as source:
            image = _prepare(source)

        quality = QUALITY_START
        payload = _encode(image, quality)
        while len(payload) > budget_bytes and quality - QUALITY_STEP >= QUALITY_FLOOR:
            quality -= QUALITY_STEP
            payload = _encode(image, quality)

        output_path.write_bytes(payload)
        input_path.unlink()
    except Exception as exc:
        log.error("Image compression failed for %s, keeping original: %s", input_path.name, exc, exc_info=True)
        if output_path.exists() and input_path.exists():
            output_path.unlink()
        return CompressionResult(
            outcome=CompressionOutcome.FALLBACK_ORIGINAL,
            path=input_path,
            quality=None,
            size_bytes=_file_size(input_path),
            error=str(exc),
        )

    size_bytes = len(payload)
    if size_bytes <= budget_bytes:
        outcome = CompressionOutcome.COMPRESSED
    else:
        outcome = CompressionOutcome.DEGRADED
        log.warning(
            "Photo %s still %.1f KB at quality floor %d (budget %d KB)",
            output_path.name, size_bytes / 1024, quality, max_size_kb,
        )

    log.info("Compressed %s -> %s at quality %d (%.1f KB)", input_path.name, output_path.name, quality, size_bytes / 1024)
    return CompressionResult(outcome=outcome, path=output_path, quality=quality, size_bytes=size_bytes)
