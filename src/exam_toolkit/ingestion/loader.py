"""
Module: ingestion.loader

Purpose:
    Turn an uploaded file into source material for generation:

    - text/*          -> decoded text
    - application/pdf -> text of every page, joined by newlines
    - image/*         -> ImagePayload (raw bytes + MIME type), verified
                         as a readable image

    Anything else is rejected with IngestionError.

Key Functions:
    - ingest_file(): Load from a path
    - ingest_bytes(): Load from raw bytes with a known MIME type
    - guess_mime_type(): MIME type from a file name

Dependencies:
    - fitz (PyMuPDF): PDF text extraction
    - PIL.Image: Image verification

Used By:
    - session.controller.ExamSession.load_source
    - cli
"""

from __future__ import annotations

import io
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

import fitz
from PIL import Image

from exam_toolkit.core.models import ImagePayload
from exam_toolkit.errors import IngestionError

logger = logging.getLogger(__name__)

SourceMaterial = Union[str, ImagePayload]

PDF_MIME = "application/pdf"

# Extensions some platforms' mimetypes tables do not know
_EXTRA_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".webp": "image/webp",
}


def guess_mime_type(path: Path) -> Optional[str]:
    """MIME type guessed from the file extension, or None."""
    suffix = Path(path).suffix.lower()
    if suffix in _EXTRA_TYPES:
        return _EXTRA_TYPES[suffix]
    mime, _ = mimetypes.guess_type(str(path))
    return mime


def ingest_file(path: Path, mime_type: Optional[str] = None) -> SourceMaterial:
    """
    Load source material from a file.

    Args:
        path: File to read
        mime_type: MIME type; guessed from the extension when omitted

    Returns:
        Extracted text, or an ImagePayload for images

    Raises:
        IngestionError: If the file cannot be read, its type is not
            supported, or its contents cannot be parsed

    Example:
        >>> text = ingest_file(Path("chapter1.pdf"))
        >>> image = ingest_file(Path("diagram.png"))
        >>> image.mime_type
        'image/png'
    """
    path = Path(path)
    mime = mime_type or guess_mime_type(path)
    if mime is None:
        raise IngestionError(f"Unsupported file type: {path.name}", path=path)

    try:
        data = path.read_bytes()
    except OSError as e:
        raise IngestionError(f"Could not read {path}: {e}", path=path) from e

    try:
        return ingest_bytes(data, mime)
    except IngestionError as e:
        e.path = path
        raise


def ingest_bytes(data: bytes, mime_type: str) -> SourceMaterial:
    """
    Load source material from raw bytes.

    Raises:
        IngestionError: If the type is unsupported or parsing fails
    """
    mime = mime_type.split(";", 1)[0].strip().lower()

    if mime.startswith("text/"):
        text = data.decode("utf-8", errors="replace")
        logger.info(f"Ingested {len(text)} characters of text")
        return text

    if mime == PDF_MIME:
        return _extract_pdf_text(data)

    if mime.startswith("image/"):
        return _load_image(data, mime)

    raise IngestionError(f"Unsupported file type: {mime}")


def _extract_pdf_text(data: bytes) -> str:
    """Concatenate the text of every page, pages separated by newlines."""
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            pages = [page.get_text("text") for page in doc]
    except (RuntimeError, ValueError) as e:
        raise IngestionError(f"Could not read PDF: {e}") from e

    text = "\n".join(p.strip() for p in pages).strip()
    logger.info(f"Extracted {len(text)} characters from {len(pages)} PDF pages")
    return text


def _load_image(data: bytes, mime: str) -> ImagePayload:
    """Verify the bytes decode as an image and wrap them unchanged."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise IngestionError(f"Could not read image: {e}") from e

    logger.info(f"Ingested {mime} image ({len(data)} bytes)")
    return ImagePayload(data=data, mime_type=mime)
