"""
FIT file writer for recorded tracks.

Exports a tracking session to Garmin FIT format (activity file with one lap
and one session) so it can be loaded into Garmin Connect, Strava and similar
platforms.
"""

import logging
from typing import BinaryIO, Sequence

from tracking.data_models import PathPoint

logger = logging.getLogger(__name__)

# FIT devices report 0/0 when they have no position
_MIN_VALID_DEG = 0.001


def write_fit(points: Sequence[PathPoint], output: BinaryIO) -> None:
    """
    Write recorded path points to FIT format.

    Record distance is the session odometer, so jitter that the filter kept
    out of the total is kept out of the FIT distance too.

    Args:
        points: Recorded path points in order
        output: Binary file-like object to write to
    """
    try:
        from fit_tool.fit_file_builder import FitFileBuilder
        from fit_tool.profile.messages.file_id_message import FileIdMessage
        from fit_tool.profile.messages.record_message import RecordMessage
        from fit_tool.profile.messages.event_message import EventMessage
        from fit_tool.profile.messages.device_info_message import DeviceInfoMessage
        from fit_tool.profile.messages.activity_message import ActivityMessage
        from fit_tool.profile.messages.session_message import SessionMessage
        from fit_tool.profile.messages.lap_message import LapMessage
        from fit_tool.profile.profile_type import (
            Manufacturer, FileType, Event, EventType, Sport, SubSport
        )
    except ImportError as e:
        raise ImportError(
            "fit-tool library required for FIT export. Install with: pip install fit-tool"
        ) from e

    valid = [
        p for p in points
        if abs(p.latitude) >= _MIN_VALID_DEG or abs(p.longitude) >= _MIN_VALID_DEG
    ]
    if not valid:
        logger.warning("No valid GPS points to export")
        return

    first, last = valid[0], valid[-1]
    # fit-tool takes epoch milliseconds and degrees, and converts internally
    start_ms = first.timestamp_ms
    end_ms = last.timestamp_ms
    elapsed_s = (end_ms - start_ms) / 1000.0
    total_distance = last.odometer_m

    builder = FitFileBuilder(auto_define=True, min_string_size=50)

    file_id = FileIdMessage()
    file_id.type = FileType.ACTIVITY
    file_id.manufacturer = Manufacturer.DEVELOPMENT.value
    file_id.product = 1
    file_id.serial_number = 12345
    file_id.time_created = start_ms
    builder.add(file_id)

    device_info = DeviceInfoMessage()
    device_info.manufacturer = Manufacturer.DEVELOPMENT.value
    device_info.product = 1
    device_info.device_index = 0
    device_info.timestamp = start_ms
    builder.add(device_info)

    start_event = EventMessage()
    start_event.event = Event.TIMER
    start_event.event_type = EventType.START
    start_event.timestamp = start_ms
    builder.add(start_event)

    for point in valid:
        rec = RecordMessage()
        rec.timestamp = point.timestamp_ms
        rec.position_lat = point.latitude
        rec.position_long = point.longitude
        rec.speed = point.speed_mps
        rec.enhanced_speed = point.speed_mps
        rec.distance = point.odometer_m
        builder.add(rec)

    stop_event = EventMessage()
    stop_event.event = Event.TIMER
    stop_event.event_type = EventType.STOP_ALL
    stop_event.timestamp = end_ms
    builder.add(stop_event)

    lap = LapMessage()
    lap.timestamp = end_ms
    lap.start_time = start_ms
    lap.start_position_lat = first.latitude
    lap.start_position_long = first.longitude
    lap.end_position_lat = last.latitude
    lap.end_position_long = last.longitude
    lap.total_elapsed_time = elapsed_s
    lap.total_timer_time = elapsed_s
    lap.total_distance = total_distance
    lap.event = Event.LAP
    lap.event_type = EventType.STOP
    builder.add(lap)

    session = SessionMessage()
    session.timestamp = end_ms
    session.start_time = start_ms
    session.start_position_lat = first.latitude
    session.start_position_long = first.longitude
    session.total_elapsed_time = elapsed_s
    session.total_timer_time = elapsed_s
    session.total_distance = total_distance
    session.sport = Sport.DRIVING
    session.sub_sport = SubSport.GENERIC
    session.event = Event.SESSION
    session.event_type = EventType.STOP
    session.first_lap_index = 0
    session.num_laps = 1
    builder.add(session)

    activity = ActivityMessage()
    activity.timestamp = end_ms
    activity.total_timer_time = elapsed_s
    activity.num_sessions = 1
    activity.type = 0  # Manual activity
    activity.event = Event.ACTIVITY
    activity.event_type = EventType.STOP
    builder.add(activity)

    output.write(builder.build().to_bytes())
    logger.debug(f"Wrote FIT file with {len(valid)} records, {total_distance:.1f}m distance")
