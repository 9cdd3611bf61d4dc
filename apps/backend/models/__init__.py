"""
Table model exports.

Models are organized into domain modules:
- catalog.py: Platform and Modpack records owned by the local store
"""

from models.catalog import (
    Platform,
    Modpack,
    utcnow,
)

__all__ = [
    "Platform",
    "Modpack",
    "utcnow",
]
