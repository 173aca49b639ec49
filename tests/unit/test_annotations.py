"""
tests/unit/test_annotations.py

Unit tests for reportd.diagnosis.annotations.

Coverage
--------
  to_millis: aware and naive datetimes
  build_annotations: defaults when no override tags
  build_annotations: title/tags/text overrides
  build_annotations: end_time field 120 s → timeEnd 120000 ms
  build_annotations: qualified metric name end_time recognised
  build_annotations: non end_time fields leave timeEnd empty
  build_annotations: end_time truncating to 0 leaves timeEnd empty
  build_annotations: sibling metric sharing the prefix is not an end_time
  build_annotations: panel_id parsed; unparsable panel_id left empty
  build_annotations: sample without timestamp dropped
  build_annotations: backend order preserved
  query_annotations: RANGE query on the default measurement; override used
"""
from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from reportd.backends.base import QueryBackend, QueryMode, Sample
from reportd.config import settings
from reportd.diagnosis.annotations import build_annotations, query_annotations, to_millis
from reportd.diagnosis.window import TimeWindow

TS = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
TS_MS = 1_700_000_000_000
MEASUREMENT = "fast_tune_anomaly"


def _sample(
    field: str | None = "value",
    value: object = 1.0,
    tags: dict[str, str] | None = None,
    timestamp: datetime | None = TS,
) -> Sample:
    return Sample(tags=tags or {}, value=value, timestamp=timestamp, field=field)


class TestToMillis:
    def test_aware_datetime(self) -> None:
        assert to_millis(TS) == TS_MS

    def test_naive_taken_as_utc(self) -> None:
        assert to_millis(TS.replace(tzinfo=None)) == TS_MS

    def test_sub_second_precision(self) -> None:
        assert to_millis(TS.replace(microsecond=250_000)) == TS_MS + 250


class TestBuildAnnotations:
    def test_defaults(self) -> None:
        [event] = build_annotations([_sample()], MEASUREMENT)
        assert event.time == TS_MS
        assert event.title == "anomaly title"
        assert event.tags == "anomaly tags"
        assert event.text == "anomaly text"
        assert event.time_end is None
        assert event.panel_id is None
        assert event.annotation.name == "Anomaly Point"

    def test_overrides(self) -> None:
        tags = {"title": "QPS drop", "tags": "qps", "text": "QPS fell by 40%"}
        [event] = build_annotations([_sample(tags=tags)], MEASUREMENT)
        assert (event.title, event.tags, event.text) == ("QPS drop", "qps", "QPS fell by 40%")

    def test_end_time_converted_to_millis(self) -> None:
        [event] = build_annotations([_sample(field="end_time", value=120.0)], MEASUREMENT)
        assert event.time_end == 120_000

    def test_end_time_truncated_before_scaling(self) -> None:
        [event] = build_annotations([_sample(field="end_time", value=120.9)], MEASUREMENT)
        assert event.time_end == 120_000

    def test_qualified_end_time(self) -> None:
        [event] = build_annotations(
            [_sample(field="fast_tune_anomaly_end_time", value=120.0)],
            MEASUREMENT,
            qualified=True,
        )
        assert event.time_end == 120_000

    def test_other_field_has_no_end(self) -> None:
        [event] = build_annotations([_sample(field="score", value=120.0)], MEASUREMENT)
        assert event.time_end is None

    def test_non_numeric_end_time_ignored(self) -> None:
        [event] = build_annotations([_sample(field="end_time", value="soon")], MEASUREMENT)
        assert event.time_end is None

    def test_zero_end_time_omitted(self) -> None:
        [event] = build_annotations([_sample(field="end_time", value=0.4)], MEASUREMENT)
        assert event.time_end is None
        assert "timeEnd" not in event.model_dump(by_alias=True, exclude_none=True)

    def test_sibling_metric_end_time_ignored(self) -> None:
        [event] = build_annotations(
            [_sample(field="fast_tune_anomaly2_end_time", value=120.0)],
            MEASUREMENT,
            qualified=True,
        )
        assert event.time_end is None

    def test_panel_id_parsed(self) -> None:
        [event] = build_annotations([_sample(tags={"panel_id": "12"})], MEASUREMENT)
        assert event.panel_id == 12

    def test_unparsable_panel_id_left_empty(self) -> None:
        [event] = build_annotations([_sample(tags={"panel_id": "twelve"})], MEASUREMENT)
        assert event.panel_id is None

    def test_missing_timestamp_dropped(self) -> None:
        events = build_annotations([_sample(timestamp=None), _sample()], MEASUREMENT)
        assert len(events) == 1

    def test_backend_order_preserved(self) -> None:
        later = _sample(tags={"title": "b"}, timestamp=TS.replace(minute=30))
        earlier = _sample(tags={"title": "a"})
        events = build_annotations([later, earlier], MEASUREMENT)
        assert [e.title for e in events] == ["b", "a"]

    def test_serialised_without_empty_optionals(self) -> None:
        [event] = build_annotations([_sample()], MEASUREMENT)
        data = event.model_dump(by_alias=True, exclude_none=True)
        assert "timeEnd" not in data
        assert "panelId" not in data
        assert data["annotation"]["iconColor"] == "rgba(255, 96, 96, 1)"


class TestQueryAnnotations:
    @pytest.mark.asyncio
    async def test_default_measurement_range_query(self) -> None:
        backend = AsyncMock(spec=QueryBackend)
        backend.name = "stub"
        backend.qualified_field_names = False
        backend.query.return_value = [_sample(field="end_time", value=120.0)]
        window = TimeWindow(start_ts=1, end_ts=2, cluster_id="c1")

        events = await query_annotations(backend, window)

        query = backend.query.await_args.args[0]
        assert query.measurement == settings.annotation_measurement
        assert query.mode is QueryMode.RANGE
        assert events[0].time_end == 120_000

    @pytest.mark.asyncio
    async def test_measurement_override(self) -> None:
        backend = AsyncMock(spec=QueryBackend)
        backend.qualified_field_names = True
        backend.query.return_value = []
        window = TimeWindow(start_ts=1, end_ts=2, cluster_id="c1")

        assert await query_annotations(backend, window, "custom_anomaly") == []
        assert backend.query.await_args.args[0].measurement == "custom_anomaly"
