"""
reportd/diagnosis/annotations.py

Assemble the anomaly annotation timeline.

Every sample of the annotation measurement becomes one AnnotationEvent, in
backend order.  Optional tags refine the event:

  title / tags / text   override the default texts
  panel_id              integer panel the event belongs to (ignored when
                        it does not parse)

A sample whose field is ``end_time`` also carries the end of the anomaly
in unix seconds, stored on the event in milliseconds.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

import structlog

from reportd.backends.base import QueryBackend, QueryMode, Sample, SampleQuery
from reportd.config import settings
from reportd.diagnosis.decoding import as_number, field_key, parse_int_tag
from reportd.diagnosis.window import TimeWindow
from reportd.models.schemas.annotation import AnnotationEvent

logger = structlog.get_logger(__name__)

END_TIME_FIELD = "end_time"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_TEXT_TAGS = ("title", "tags", "text")


def to_millis(ts: datetime) -> int:
    """Unix milliseconds of *ts*; naive datetimes are taken as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - _EPOCH) // timedelta(milliseconds=1)


def build_annotation(sample: Sample, measurement: str, qualified: bool) -> AnnotationEvent | None:
    """Convert one sample to an event, or None when it has no timestamp."""
    if sample.timestamp is None:
        logger.warning("annotation_sample_skipped", reason="missing timestamp", field=sample.field)
        return None

    overrides = {tag: sample.tags[tag] for tag in _TEXT_TAGS if tag in sample.tags}
    event = AnnotationEvent(
        time=to_millis(sample.timestamp),
        panel_id=parse_int_tag(sample.tags.get("panel_id")),
        **overrides,
    )

    if field_key(sample.field, measurement, qualified) == END_TIME_FIELD:
        end_seconds = as_number(sample.value)
        end_ms = int(end_seconds) * 1000 if end_seconds is not None else 0
        if end_ms:
            event.time_end = end_ms
    return event


def build_annotations(
    samples: Iterable[Sample],
    measurement: str,
    qualified: bool = False,
) -> list[AnnotationEvent]:
    """Return one event per usable sample, preserving sample order."""
    events: list[AnnotationEvent] = []
    for sample in samples:
        event = build_annotation(sample, measurement, qualified)
        if event is not None:
            events.append(event)
    return events


async def query_annotations(
    backend: QueryBackend,
    window: TimeWindow,
    measurement: str | None = None,
) -> list[AnnotationEvent]:
    """Fetch every anomaly point in *window* and build the timeline."""
    measurement = measurement or settings.annotation_measurement
    samples = await backend.query(
        SampleQuery(measurement=measurement, window=window, mode=QueryMode.RANGE)
    )
    events = build_annotations(samples, measurement, backend.qualified_field_names)
    logger.info(
        "annotations_built",
        cluster_id=window.cluster_id,
        measurement=measurement,
        events=len(events),
    )
    return events
