"""
Ingestion Package

Source material loading from text, PDF and image files.
"""

from .loader import SourceMaterial, guess_mime_type, ingest_bytes, ingest_file

__all__ = ["SourceMaterial", "guess_mime_type", "ingest_bytes", "ingest_file"]
