"""
Tests for the command line entry point.

Runs the replay and poll commands end to end against temporary files, with
the vehicle HTTP session and the video codec mocked out.
"""

import pytest
import json
import requests
from unittest.mock import patch, MagicMock

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import main
from main import build_config, build_parser

from conftest import METERS_PER_DEG_LAT


@pytest.fixture
def fix_csv(tmp_path):
    """Recording moving 5 m north every 2 seconds."""
    path = tmp_path / "drive.csv"
    rows = ["latitude,longitude,accuracy,speed,timestamp"]
    for i in range(3):
        lat = 37.7749 + i * 5.0 / METERS_PER_DEG_LAT
        rows.append(f"{lat},-122.4194,4.0,2.5,{1_700_000_000_000 + i * 2000}")
    path.write_text("\n".join(rows) + "\n")
    return str(path)


class TestArguments:
    """Tests for argument parsing and config mapping."""

    def test_replay_defaults(self):
        args = build_parser().parse_args(["replay", "drive.csv"])
        config = build_config(args)
        assert args.image == "track.png"
        assert args.export_format == "csv"
        assert config.min_distance_m == 1.0
        assert config.max_retries is None

    def test_overrides(self):
        args = build_parser().parse_args([
            "replay", "drive.csv", "--min-distance", "2.5", "--min-time", "500",
            "--pixels-per-meter", "5", "--canvas-size", "800", "--margin", "20",
        ])
        config = build_config(args)
        assert config.min_distance_m == 2.5
        assert config.min_time_between_ms == 500
        assert config.pixels_per_meter == 5.0
        assert config.canvas_size_px == 800
        assert config.margin_px == 20

    def test_poll_maps_retry_settings(self):
        args = build_parser().parse_args(["poll", "http://car", "--interval", "0.5", "--max-retries", "3"])
        config = build_config(args)
        assert config.retry_delay_ms == 500
        assert config.max_retries == 3

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["replay", "drive.csv", "--format", "kml"])


class TestReplayCommand:
    """Tests for the replay command."""

    def test_replay_writes_image_and_exports(self, fix_csv, tmp_path):
        image = str(tmp_path / "out.png")
        base = str(tmp_path / "export")

        code = main.main(["replay", fix_csv, "--image", image, "--export-base", base, "--format", "all"])

        assert code == 0
        assert os.path.exists(image)
        for suffix in (".csv", ".json", ".gpx"):
            assert os.path.exists(base + suffix)

        with open(base + ".json") as f:
            data = json.load(f)
        assert data["point_count"] == 3
        assert data["total_distance_m"] == pytest.approx(10.0, abs=0.01)
        assert data["duration_seconds"] == 4.0

    def test_replay_video_frame_per_point(self, fix_csv, tmp_path):
        writer = MagicMock()
        writer.isOpened.return_value = True
        with patch("track_export.video_writer.cv2.VideoWriter", return_value=writer):
            code = main.main(["replay", fix_csv, "--image", str(tmp_path / "out.png"),
                              "--video", str(tmp_path / "out.mp4")])

        assert code == 0
        assert writer.write.call_count == 3
        writer.release.assert_called_once()

    def test_replay_empty_recording(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("latitude,longitude\n")
        assert main.main(["replay", str(path), "--image", str(tmp_path / "out.png")]) == 1

    def test_replay_missing_file(self, tmp_path):
        assert main.main(["replay", str(tmp_path / "nope.csv")]) == 1

    def test_invalid_config(self, fix_csv):
        assert main.main(["replay", fix_csv, "--min-distance", "-1"]) == 2


class TestPollCommand:
    """Tests for the poll command."""

    def _session(self, response):
        session = MagicMock()
        session.get.return_value = response
        return session

    def test_poll_tracks_vehicle(self, tmp_path):
        response = MagicMock()
        response.json.return_value = {"data": {"lat": 37.7749, "long": -122.4194, "speed": 0}}
        image = str(tmp_path / "live.png")

        with patch("tracking.vehicle_source.requests.Session", return_value=self._session(response)):
            code = main.main(["poll", "http://vehicle.local", "--duration", "0.2",
                              "--interval", "0.01", "--image", image])

        assert code == 0
        assert os.path.exists(image)

    def test_poll_forbidden_fails(self, tmp_path):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError(
            "forbidden", response=MagicMock(status_code=403))

        with patch("tracking.vehicle_source.requests.Session", return_value=self._session(response)):
            code = main.main(["poll", "http://vehicle.local", "--duration", "5",
                              "--interval", "0.01", "--image", str(tmp_path / "live.png")])

        assert code == 1
