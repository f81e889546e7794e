"""Core configuration, logging and security helpers."""

from .config import Settings, settings
from .logging import configure_logging
from .security import decode_token, extract_subject, verify_subject

__all__ = [
    "Settings",
    "settings",
    "configure_logging",
    "decode_token",
    "extract_subject",
    "verify_subject",
]
