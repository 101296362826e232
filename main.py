#!/usr/bin/env python3
"""
GPS path tracker command line.

    python main.py replay drive.csv --image drive.png --export-base drive --format all
    python main.py poll http://192.168.1.10:5000 --duration 120 --image live.png
"""

import argparse
import contextlib
import logging
import sys
import time
from typing import List, Optional

from pydantic import ValidationError

from rich_console import (
    console,
    setup_rich_logging,
    create_replay_progress,
    create_poll_progress,
    print_banner,
    print_config_summary,
    print_completion_summary,
    print_error,
)
from surface import ImageSurface
from track_export.csv_io import read_fixes
from track_export.exporter import EXPORT_FORMATS, TrackExporter
from track_export.video_writer import TrackVideoWriter
from tracking.controller import TrackingController
from tracking.data_models import TrackerConfig, TrackerState
from tracking.errors import TrackingError
from tracking.position_source import ReplayPositionSource
from tracking.vehicle_source import VehicleTelemetrySource

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Track a GPS path in a local meter frame and render it on a grid.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--min-distance", type=float, default=None,
                        help="Minimum movement counted as travel in meters (default 1)")
    common.add_argument("--min-time", type=int, default=None,
                        help="Minimum time between recorded fixes in ms (default 1000)")
    common.add_argument("--pixels-per-meter", type=float, default=None, help="Canvas scale")
    common.add_argument("--canvas-size", type=int, default=None, help="Square canvas edge in pixels")
    common.add_argument("--margin", type=int, default=None, help="Canvas margin in pixels")
    common.add_argument("--image", default="track.png", help="Output image of the final canvas")
    common.add_argument("--export-base", default=None,
                        help="Base path (without extension) for data exports")
    common.add_argument("--format", dest="export_format", default="csv", choices=EXPORT_FORMATS,
                        help="Export format when --export-base is given")

    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", parents=[common], help="Replay a recorded fix CSV")
    replay.add_argument("input_path", help="CSV with latitude,longitude[,accuracy,speed,timestamp]")
    replay.add_argument("--video", default=None, help="Write an MP4 animation of the path")
    replay.add_argument("--fps", type=float, default=10.0, help="Animation frames per second")

    poll = sub.add_parser("poll", parents=[common], help="Track a vehicle status endpoint")
    poll.add_argument("base_url", help="Vehicle API root, e.g. http://192.168.1.10:5000")
    poll.add_argument("--duration", type=float, default=60.0, help="Seconds to track")
    poll.add_argument("--interval", type=float, default=2.0, help="Polling interval in seconds")
    poll.add_argument("--max-retries", type=int, default=10,
                      help="Timeouts tolerated before giving up")

    return parser


def build_config(args) -> TrackerConfig:
    """Map CLI flags onto a TrackerConfig, leaving unset flags at defaults."""
    overrides = {
        "min_distance_m": args.min_distance,
        "min_time_between_ms": args.min_time,
        "pixels_per_meter": args.pixels_per_meter,
        "canvas_size_px": args.canvas_size,
        "margin_px": args.margin,
        "max_retries": getattr(args, "max_retries", None),
    }
    if getattr(args, "interval", None) is not None:
        overrides["retry_delay_ms"] = int(args.interval * 1000)
    return TrackerConfig(**{k: v for k, v in overrides.items() if v is not None})


def _write_outputs(tracker: TrackingController, surface: ImageSurface, args, name: str,
                   clock) -> List[str]:
    outputs = []
    if surface.image is None:
        tracker.redraw()
    if surface.image is not None:
        outputs.append(surface.save(args.image))
    if args.export_base:
        exporter = TrackExporter(tracker.store, name=name, clock=clock)
        outputs.extend(exporter.export(args.export_base, args.export_format))
    return outputs


def run_replay(args, config: TrackerConfig) -> int:
    fixes = read_fixes(args.input_path)
    if not fixes:
        print_error(f"No fixes found in {args.input_path}",
                    hint="The CSV needs latitude and longitude columns")
        return 1

    # Replay time ends with the recording, not the wall clock
    end_ms = fixes[-1].timestamp_ms
    clock = lambda: end_ms  # noqa: E731

    source = ReplayPositionSource(fixes)
    surface = ImageSurface(config.canvas_size_px, config.canvas_size_px)

    with contextlib.ExitStack() as stack:
        video: Optional[TrackVideoWriter] = None
        if args.video:
            video = stack.enter_context(
                TrackVideoWriter(args.video, args.fps, (config.canvas_size_px, config.canvas_size_px)))

        def on_render(commands):
            if video is not None:
                video.write(surface.to_array())

        tracker = TrackingController(source, config, surface=surface, clock=clock, on_render=on_render)
        tracker.start()

        with create_replay_progress() as progress:
            task = progress.add_task("Replaying", total=len(fixes), status="searching")
            while source.step() is not None:
                progress.update(task, advance=1,
                                status=f"{tracker.store.point_count} pts • {tracker.store.total_distance_m:.1f} m")

        tracker.stop()

    outputs = _write_outputs(tracker, surface, args, name=args.input_path, clock=clock)
    if args.video:
        outputs.append(args.video)
    print_completion_summary(tracker.status(), outputs)
    return 0


def run_poll(args, config: TrackerConfig) -> int:
    source = VehicleTelemetrySource(args.base_url, interval_s=args.interval)
    surface = ImageSurface(config.canvas_size_px, config.canvas_size_px)
    tracker = TrackingController(source, config, surface=surface)

    tracker.start()
    deadline = time.monotonic() + args.duration
    try:
        with create_poll_progress() as progress:
            task = progress.add_task("Tracking", total=None, status="searching")
            while time.monotonic() < deadline and tracker.state != TrackerState.ERROR:
                source.poll_once()
                status = tracker.status()
                progress.update(task, status=(
                    f"{status.state.value} • {status.point_count} pts • "
                    f"{status.total_distance_m:.1f} m • {status.elapsed_text}"
                ))
                time.sleep(args.interval)
    except KeyboardInterrupt:
        console.print("[warning]Interrupted, stopping tracker[/]")
    finally:
        final_state = tracker.state
        tracker.stop()
        source.close()

    outputs = _write_outputs(tracker, surface, args, name=args.base_url, clock=lambda: int(time.time() * 1000))
    status = tracker.status()
    print_completion_summary(status, outputs)

    if final_state == TrackerState.ERROR:
        print_error(f"Tracking failed: {status.message or status.error}",
                    hint="Check the vehicle endpoint URL and that its GPS has a fix")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_rich_logging(verbose=args.verbose)

    try:
        config = build_config(args)
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        return 2

    print_banner(__version__)
    source_name = args.input_path if args.command == "replay" else args.base_url
    print_config_summary(source_name, config, outputs=[args.image])

    try:
        if args.command == "replay":
            return run_replay(args, config)
        return run_poll(args, config)
    except (TrackingError, ValueError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
