"""
Track exporter for recorded tracking sessions.

Read-only, on-demand export of a PathStore (or PathState snapshot) to a
structured dump, JSON, CSV, GPX and FIT.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from track_export.csv_io import format_timestamp, write_csv
from track_export.fit_writer import write_fit
from track_export.gpx_writer import write_gpx
from tracking.data_models import PathState

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json", "gpx", "fit", "all")


def _now_ms() -> int:
    return int(time.time() * 1000)


class TrackExporter:
    """
    Exports a recorded track to various formats.

    Usage:
        exporter = TrackExporter(tracker.store)
        data = exporter.tracking_data()
        exporter.export_csv('drive.csv')
        exporter.export_gpx('drive.gpx')
    """

    def __init__(self, track, name: str = "GPS Track", clock: Callable[[], int] = _now_ms):
        """
        Initialize exporter with a recorded track.

        Args:
            track: PathStore or PathState to export
            name: Track name used in GPX metadata
            clock: Callable returning the current epoch time in ms (for duration)
        """
        self._track = track
        self.name = name
        self._clock = clock

    @property
    def state(self) -> PathState:
        """Current snapshot of the track."""
        if isinstance(self._track, PathState):
            return self._track
        return self._track.snapshot()

    def tracking_data(self, now_ms: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Structured dump of the track.

        Args:
            now_ms: Reference time for the duration (clock if None)

        Returns:
            {origin, total_distance_m, point_count, duration_seconds, points},
            or None when nothing has been recorded
        """
        state = self.state
        if not state.points:
            logger.warning("No tracking data available")
            return None

        now_ms = self._clock() if now_ms is None else now_ms
        duration = (now_ms - state.start_time_ms) / 1000.0 if state.start_time_ms is not None else 0.0
        return {
            "origin": state.origin.model_dump() if state.origin else None,
            "total_distance_m": state.total_distance_m,
            "point_count": len(state.points),
            "duration_seconds": max(0.0, duration),
            "points": [
                {
                    "x_m": p.x,
                    "y_m": p.y,
                    "latitude": p.latitude,
                    "longitude": p.longitude,
                    "accuracy_m": p.accuracy_m,
                    "speed_mps": p.speed_mps,
                    "odometer_m": p.odometer_m,
                    "timestamp_ms": p.timestamp_ms,
                    "timestamp": format_timestamp(p.timestamp_ms),
                }
                for p in state.points
            ],
        }

    def export_csv(self, output_path: Union[str, Path]) -> str:
        """
        Export the track to CSV.

        Args:
            output_path: Path for output .csv file

        Returns:
            Path to the created file
        """
        output_path = Path(output_path)
        if not output_path.suffix:
            output_path = output_path.with_suffix('.csv')

        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            rows = write_csv(self.state.points, f)

        logger.info(f"Exported {rows} points to {output_path}")
        return str(output_path)

    def export_json(self, output_path: Union[str, Path]) -> str:
        """
        Export the structured dump to JSON.

        Args:
            output_path: Path for output .json file

        Returns:
            Path to the created file
        """
        output_path = Path(output_path)
        if not output_path.suffix:
            output_path = output_path.with_suffix('.json')

        data = self.tracking_data()
        if data is None:
            data = {"origin": None, "total_distance_m": 0.0, "point_count": 0,
                    "duration_seconds": 0.0, "points": []}

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

        logger.info(f"Exported JSON to {output_path}")
        return str(output_path)

    def export_gpx(self, output_path: Union[str, Path]) -> str:
        """
        Export the track to GPX format.

        Args:
            output_path: Path for output .gpx file

        Returns:
            Path to the created file
        """
        output_path = Path(output_path)
        if not output_path.suffix:
            output_path = output_path.with_suffix('.gpx')

        state = self.state
        with open(output_path, 'w', encoding='utf-8') as f:
            write_gpx(state.points, f, name=self.name, start_time_ms=state.start_time_ms)

        logger.info(f"Exported GPX to {output_path}")
        return str(output_path)

    def export_fit(self, output_path: Union[str, Path]) -> str:
        """
        Export the track to FIT format.

        Args:
            output_path: Path for output .fit file

        Returns:
            Path to the created file
        """
        output_path = Path(output_path)
        if not output_path.suffix:
            output_path = output_path.with_suffix('.fit')

        with open(output_path, 'wb') as f:
            write_fit(self.state.points, f)

        logger.info(f"Exported FIT to {output_path}")
        return str(output_path)

    def export_all(self, output_base: Union[str, Path]) -> List[str]:
        """
        Export to all supported formats (CSV, JSON, GPX, FIT).

        Args:
            output_base: Base path without extension (e.g., 'drive_2026-01-09')

        Returns:
            List of paths to created files
        """
        output_base = Path(output_base)
        return [
            self.export_csv(output_base.with_suffix('.csv')),
            self.export_json(output_base.with_suffix('.json')),
            self.export_gpx(output_base.with_suffix('.gpx')),
            self.export_fit(output_base.with_suffix('.fit')),
        ]

    def export(self, output_base: Union[str, Path], export_format: str = "csv") -> List[str]:
        """
        Export in one named format.

        Args:
            output_base: Base path without extension
            export_format: 'csv', 'json', 'gpx', 'fit', or 'all'

        Returns:
            List of created file paths
        """
        export_format = export_format.lower()
        output_base = str(output_base)

        if export_format == "all":
            return self.export_all(output_base)
        if export_format == "csv":
            return [self.export_csv(f"{output_base}.csv")]
        if export_format == "json":
            return [self.export_json(f"{output_base}.json")]
        if export_format == "gpx":
            return [self.export_gpx(f"{output_base}.gpx")]
        if export_format == "fit":
            return [self.export_fit(f"{output_base}.fit")]
        raise ValueError(f"Unknown export format: {export_format}. Use 'csv', 'json', 'gpx', 'fit', or 'all'")
