from __future__ import annotations

from .scanconfig import ScanConfig
from .scanner import Scanner

__all__ = [
    "ScanConfig",
    "Scanner",
]
