"""
Core utilities for CSV contact processing
"""

from .header_resolver import (
    HeaderResolver,
    DEFAULT_SYNONYMS,
    resolve_headers,
)
from .row_validator import build_contact
from .vcard_serializer import (
    serialize_contact,
    escape_value,
    split_name,
    download_filename,
)

__all__ = [
    "HeaderResolver",
    "DEFAULT_SYNONYMS",
    "resolve_headers",
    "build_contact",
    "serialize_contact",
    "escape_value",
    "split_name",
    "download_filename",
]
