"""
Concurrent TCP port scanner that splits the port space across a fixed pool
of worker threads.
"""

from .cli import main
from .config import ScanConfig, resolve
from .scanner import scan

__all__ = ["main", "resolve", "scan", "ScanConfig"]
