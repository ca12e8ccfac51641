"""
Preflight Module - Black Box Interface

Purpose: Make sure the external binaries a tool needs are installed
Interface: INSTALL_HINTS, find_missing(), report_missing()
Hidden: PATH lookup
"""

from .preflight import INSTALL_HINTS, find_missing, report_missing

__all__ = ["INSTALL_HINTS", "find_missing", "report_missing"]
