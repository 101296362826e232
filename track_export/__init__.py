"""
Track export module for recorded tracking sessions.

Exports recorded paths to CSV, JSON, GPX and FIT for spreadsheets, GPS tracking
software and mapping tools, and renders replay animations to MP4.
"""

from track_export.csv_io import read_csv, read_fixes, write_csv
from track_export.exporter import TrackExporter

__all__ = [
    "read_csv",
    "read_fixes",
    "write_csv",
    "TrackExporter",
]
