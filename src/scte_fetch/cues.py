"""
SCTE-35 cue classification.
"""

from .models import MarkerType, Segment


def is_cue_in(segment: Segment) -> bool:
    """Return True if the segment closes an ad interval (CUE-IN boundary).

    A date range wins over markers: the segment is a boundary when the range
    carries an end. Otherwise any IN marker makes it one.
    """
    if segment.date_range is not None:
        return segment.date_range.end is not None
    return any(marker.type is MarkerType.IN for marker in segment.markers)


def describe_cue(segment: Segment) -> str:
    """Short label for log lines: the event id or the marker types."""
    if segment.date_range is not None:
        return f"event_id={segment.date_range.id}"
    if segment.markers:
        return "markers=" + ",".join(m.type.value for m in segment.markers)
    return "interior"
