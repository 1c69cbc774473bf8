"""Attachment intake: type filtering, size limit, storage and content analysis."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from ..models.domain import FileAnalysis, FileMetadata
from .errors import InvalidRequest, PayloadTooLarge

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/jpeg", "image/png", "image/gif", "image/webp",
    "text/plain", "text/markdown", "application/json", "text/csv",
    "text/javascript", "text/typescript", "text/html", "text/css",
    "application/pdf",
}

ALLOWED_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".webp",
    ".txt", ".md", ".json", ".csv",
    ".js", ".ts", ".html", ".css", ".py", ".java", ".cpp", ".c",
    ".pdf",
}

TEXT_EXTENSIONS = {".txt", ".md", ".json", ".csv"}

LANGUAGES = {
    ".js": "javascript",
    ".ts": "typescript",
    ".py": "python",
    ".html": "html",
    ".css": "css",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".json": "json",
    ".md": "markdown",
}

CODE_EXTENSIONS = {".js", ".ts", ".py", ".html", ".css", ".java", ".cpp", ".c"}

_CHUNK_SIZE = 1024 * 1024


def is_allowed(filename: str, mime_type: str) -> bool:
    return mime_type in ALLOWED_MIME_TYPES or Path(filename).suffix.lower() in ALLOWED_EXTENSIONS


def classify(filename: str, mime_type: str) -> str:
    """image, code, text or document; code extensions win over a text/* mime type."""
    extension = Path(filename).suffix.lower()
    if mime_type.startswith("image/"):
        return "image"
    if extension in CODE_EXTENSIONS:
        return "code"
    if mime_type.startswith("text/") or extension in TEXT_EXTENSIONS:
        return "text"
    return "document"


def language_for(extension: str) -> str:
    return LANGUAGES.get(extension.lower(), "text")


def analyze_file(path: Path, original_name: str, mime_type: str) -> FileAnalysis:
    kind = classify(original_name, mime_type)
    metadata = FileMetadata(size=path.stat().st_size, mime_type=mime_type)
    content: Optional[str] = None

    if kind in ("text", "code"):
        try:
            content = path.read_text(encoding="utf-8")
            metadata.lines = len(content.split("\n"))
            if kind == "code":
                metadata.language = language_for(Path(original_name).suffix)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error reading uploaded file %s: %s", original_name, exc)
            content = None

    return FileAnalysis(type=kind, content=content, metadata=metadata)


async def save_upload(upload: UploadFile, upload_dir: Path, max_bytes: int) -> Path:
    """Streams *upload* to disk under a unique name; rejects disallowed or oversized files."""
    original_name = Path(upload.filename or "").name
    mime_type = upload.content_type or "application/octet-stream"
    if not original_name:
        raise InvalidRequest("No file uploaded")
    if not is_allowed(original_name, mime_type):
        raise InvalidRequest("File type not supported")

    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / f"{uuid.uuid4()}-{original_name}"
    written = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = await upload.read(_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise PayloadTooLarge(f"File exceeds the {max_bytes} byte limit")
                out.write(chunk)
    except PayloadTooLarge:
        target.unlink(missing_ok=True)
        raise

    logger.info("Stored upload %s (%d bytes)", target.name, written)
    return target


def file_url(filename: str) -> str:
    return f"/uploads/{filename}"
