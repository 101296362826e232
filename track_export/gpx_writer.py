"""
GPX 1.1 writer for recorded tracks.

Exports a tracking session to GPX with:
- Standard GPX 1.1 trackpoints (lat, lon, time)
- Garmin TrackPointExtension for speed
- Custom tracker extension for local x/y and fix accuracy
"""

import xml.etree.ElementTree as ET
from typing import Optional, Sequence, TextIO

from track_export.csv_io import format_timestamp
from tracking.data_models import PathPoint


# XML namespaces
NS_GPX = "http://www.topografix.com/GPX/1/1"
NS_GARMIN = "http://www.garmin.com/xmlschemas/TrackPointExtension/v2"
NS_TRACK = "http://gps-path-tracker/gpx/local/v1"
NS_XSI = "http://www.w3.org/2001/XMLSchema-instance"


def write_gpx(points: Sequence[PathPoint], output: TextIO, name: str = "GPS Track",
              start_time_ms: Optional[int] = None) -> None:
    """
    Write recorded path points to GPX 1.1 format with extensions.

    Args:
        points: Recorded path points in order
        output: File-like object to write to
        name: Track name
        start_time_ms: Session start (defaults to the first point's time)
    """
    # Register namespaces to avoid ns0/ns1 prefixes
    ET.register_namespace("", NS_GPX)
    ET.register_namespace("gpxtpx", NS_GARMIN)
    ET.register_namespace("trk", NS_TRACK)
    ET.register_namespace("xsi", NS_XSI)

    gpx = ET.Element(
        "{%s}gpx" % NS_GPX,
        attrib={
            "version": "1.1",
            "creator": "GPS Path Tracker",
            "{%s}schemaLocation" % NS_XSI: (
                f"{NS_GPX} http://www.topografix.com/GPX/1/1/gpx.xsd "
                f"{NS_GARMIN} http://www.garmin.com/xmlschemas/TrackPointExtensionv2.xsd"
            ),
        }
    )

    # Metadata
    metadata = ET.SubElement(gpx, "{%s}metadata" % NS_GPX)
    name_elem = ET.SubElement(metadata, "{%s}name" % NS_GPX)
    name_elem.text = name

    if start_time_ms is None and points:
        start_time_ms = points[0].timestamp_ms
    if start_time_ms is not None:
        time_elem = ET.SubElement(metadata, "{%s}time" % NS_GPX)
        time_elem.text = format_timestamp(start_time_ms)

    trk = ET.SubElement(gpx, "{%s}trk" % NS_GPX)
    trk_name = ET.SubElement(trk, "{%s}name" % NS_GPX)
    trk_name.text = name
    trkseg = ET.SubElement(trk, "{%s}trkseg" % NS_GPX)

    for point in points:
        trkpt = ET.SubElement(trkseg, "{%s}trkpt" % NS_GPX)
        trkpt.set("lat", f"{point.latitude:.7f}")
        trkpt.set("lon", f"{point.longitude:.7f}")

        time_elem = ET.SubElement(trkpt, "{%s}time" % NS_GPX)
        time_elem.text = format_timestamp(point.timestamp_ms)

        extensions = ET.SubElement(trkpt, "{%s}extensions" % NS_GPX)

        # Garmin TrackPointExtension (speed in m/s)
        gpxtpx = ET.SubElement(extensions, f"{{{NS_GARMIN}}}TrackPointExtension")
        speed_elem = ET.SubElement(gpxtpx, f"{{{NS_GARMIN}}}speed")
        speed_elem.text = f"{point.speed_mps:.2f}"

        # Local frame and accuracy
        local = ET.SubElement(extensions, f"{{{NS_TRACK}}}LocalPoint")
        _add_track_elem(local, "x", f"{point.x:.3f}")
        _add_track_elem(local, "y", f"{point.y:.3f}")
        _add_track_elem(local, "accuracy", f"{point.accuracy_m:.1f}")

    tree = ET.ElementTree(gpx)
    output.write('<?xml version="1.0" encoding="UTF-8"?>\n')
    tree.write(output, encoding="unicode", xml_declaration=False)


def _add_track_elem(parent: ET.Element, name: str, value: str) -> None:
    """Add a tracker namespace element to the parent."""
    elem = ET.SubElement(parent, f"{{{NS_TRACK}}}{name}")
    elem.text = value

