"""GPX 1.1 rendering of an activity track."""

import xml.etree.ElementTree as ET

from aktywni.core.timeutil import isoformat_z
from aktywni.db.models.activity import Activity as ActivityModel
from aktywni.db.models.activity_point import ActivityPoint as ActivityPointModel

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"
GPX_CREATOR = "Aktywni.pl"
GPX_MEDIA_TYPE = "application/gpx+xml"


def build_gpx(activity: ActivityModel, points: list[ActivityPointModel]) -> str:
    gpx = ET.Element(
        "gpx", {"version": "1.1", "creator": GPX_CREATOR, "xmlns": GPX_NAMESPACE}
    )
    trk = ET.SubElement(gpx, "trk")
    ET.SubElement(trk, "name").text = activity.name
    ET.SubElement(trk, "type").text = activity.type
    segment = ET.SubElement(trk, "trkseg")
    for point in points:
        trkpt = ET.SubElement(
            segment, "trkpt", {"lat": str(point.lat), "lon": str(point.lon)}
        )
        ET.SubElement(trkpt, "time").text = isoformat_z(point.timestamp)

    ET.indent(gpx, space="  ")
    body = ET.tostring(gpx, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def gpx_filename(activity_id: int) -> str:
    return f"activity-{activity_id}.gpx"
