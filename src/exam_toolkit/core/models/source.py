"""
Module: source

Purpose:
    Source material attached to a generation request: either plain text
    (from a text or PDF upload, or typed in) or a raw image payload that
    is forwarded to the model as an image part.

Key Classes:
    - ImagePayload: Raw image bytes plus MIME type
"""

from __future__ import annotations

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class ImagePayload:
    """
    Raw image source (immutable).

    Attributes:
        data: Encoded image bytes as uploaded (PNG, JPEG, ...)
        mime_type: MIME type such as "image/png"
    """

    data: bytes
    mime_type: str

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError("Image payload cannot be empty")
        if not self.mime_type.startswith("image/"):
            raise ValueError(f"Not an image MIME type: {self.mime_type}")

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def data_url(self) -> str:
        """data: URL accepted by the chat completions image part."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def __repr__(self) -> str:
        return f"ImagePayload(mime_type={self.mime_type!r}, size={len(self.data)})"
