"""
CSV input/output for recorded tracks.

The export format is one row per path point:
    x_meters,y_meters,latitude,longitude,accuracy,speed,timestamp
with x/y rounded to millimeters and timestamps as ISO-8601 UTC.

read_fixes() also accepts raw fix recordings with latitude/longitude columns
and optional accuracy, speed and timestamp (epoch ms or ISO-8601), which is
what the replay source consumes.
"""

import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, TextIO, Union

from tracking.data_models import GeoFix, PathPoint

logger = logging.getLogger(__name__)

CSV_HEADER = ["x_meters", "y_meters", "latitude", "longitude", "accuracy", "speed", "timestamp"]


def format_timestamp(timestamp_ms: int) -> str:
    """Format epoch milliseconds as ISO 8601 UTC with millisecond precision."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def parse_timestamp(value: str) -> int:
    """Parse epoch milliseconds or an ISO 8601 string into epoch milliseconds."""
    value = value.strip()
    try:
        return int(value)
    except ValueError:
        pass

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * 1000))


def write_csv(points: Iterable[PathPoint], output: TextIO) -> int:
    """
    Write path points in the export CSV format.

    Args:
        points: Recorded path points in order
        output: Text stream opened with newline=""

    Returns:
        Number of rows written (excluding header)
    """
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    rows = 0
    for p in points:
        writer.writerow([
            f"{p.x:.3f}",
            f"{p.y:.3f}",
            repr(p.latitude),
            repr(p.longitude),
            repr(p.accuracy_m),
            repr(p.speed_mps),
            format_timestamp(p.timestamp_ms),
        ])
        rows += 1
    return rows


def to_csv_string(points: Iterable[PathPoint]) -> str:
    """Export CSV as a string."""
    buffer = io.StringIO()
    write_csv(points, buffer)
    return buffer.getvalue()


def _check_columns(fieldnames, required: List[str], source: str) -> None:
    missing = [c for c in required if c not in (fieldnames or [])]
    if missing:
        raise ValueError(f"CSV is missing required columns {missing}: {source}. Columns: {fieldnames}")


def read_csv(csv_path: Union[str, Path]) -> List[PathPoint]:
    """
    Read an exported track CSV back into path points.

    Args:
        csv_path: Path to a CSV written by write_csv

    Returns:
        PathPoints in file order

    Raises:
        ValueError: If a required column is missing or a row is malformed
    """
    p = Path(csv_path)
    points: List[PathPoint] = []
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        _check_columns(reader.fieldnames, CSV_HEADER, str(p))
        for line_no, row in enumerate(reader, start=2):
            try:
                points.append(PathPoint(
                    x=float(row["x_meters"]),
                    y=float(row["y_meters"]),
                    latitude=float(row["latitude"]),
                    longitude=float(row["longitude"]),
                    accuracy_m=float(row["accuracy"]),
                    speed_mps=float(row["speed"]),
                    timestamp_ms=parse_timestamp(row["timestamp"]),
                ))
            except (TypeError, ValueError) as e:
                raise ValueError(f"Malformed row {line_no} in {p}: {e}") from e
    return points


def read_fixes(csv_path: Union[str, Path]) -> List[GeoFix]:
    """
    Read a fix recording for replay.

    Required columns: latitude, longitude. Optional: accuracy, speed,
    timestamp. Rows without a timestamp are spaced one second apart.
    Rows that fail to parse are skipped with a warning.

    Args:
        csv_path: Path to the recording

    Returns:
        GeoFix list in file order
    """
    p = Path(csv_path)
    fixes: List[GeoFix] = []
    rows_total = 0
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        _check_columns(reader.fieldnames, ["latitude", "longitude"], str(p))
        for row in reader:
            rows_total += 1
            try:
                raw_time = (row.get("timestamp") or "").strip()
                timestamp_ms = parse_timestamp(raw_time) if raw_time else rows_total * 1000
                fixes.append(GeoFix(
                    latitude=float(row["latitude"]),
                    longitude=float(row["longitude"]),
                    accuracy_m=float(row.get("accuracy") or 0.0),
                    speed_mps=float(row.get("speed") or 0.0),
                    timestamp_ms=timestamp_ms,
                ))
            except (TypeError, ValueError):
                # Corrupt or empty rows are skipped
                continue

    skipped = rows_total - len(fixes)
    if skipped > 0:
        logger.warning(f"Skipped {skipped} unparseable rows in {p}")
    return fixes
