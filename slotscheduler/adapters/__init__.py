"""
Adapters layer - External busy-time sources.
"""

from .busy_file_loader import BusyFileLoader

__all__ = ["BusyFileLoader"]
