"""
Web interface for the CSV vCard QR generator

Provides the upload page, the scanned card viewer and vCard downloads.
"""

from src.vcardqr.api.web.main import create_app
from src.vcardqr.api.web.routes import cards_bp

__all__ = ["create_app", "cards_bp"]
