"""
reportd/diagnosis/activation.py

Resolve which diagnostic checks are active in a window.

The activation query returns one sample per check with its indicator value;
resolve_activations() turns those samples into ActivationRecords keyed by
CheckID.  A sample that has a non-numeric value, no ``id`` tag, or an id
that does not parse is dropped and resolution continues.  When two samples
carry the same id the later one wins, keeping the position of the first.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from reportd.backends.base import QueryBackend, QueryMode, Sample, SampleQuery
from reportd.config import settings
from reportd.diagnosis.decoding import as_number, parse_check_id
from reportd.diagnosis.window import TimeWindow

logger = structlog.get_logger(__name__)

ID_TAG = "id"
LABEL_TAG = "title"
DEFAULT_LABEL = "unknown"


@dataclass(frozen=True)
class ActivationRecord:
    """One active check: its id, indicator value and descriptive label.

    Attributes:
        check_id: Parsed CheckID.
        value:    Upstream indicator (nominally 0.0 – 1.0, not clamped).
        label:    Human-readable subtitle, ``"unknown"`` when untagged.
        raw_id:   The id tag exactly as the backend reported it.
    """

    check_id: int
    value: float
    label: str = DEFAULT_LABEL
    raw_id: str = ""


def resolve_activations(samples: Iterable[Sample]) -> dict[int, ActivationRecord]:
    """Build the CheckID → ActivationRecord mapping from activation samples.

    The key set of the returned dict is the activation lookup set.
    """
    records: dict[int, ActivationRecord] = {}
    skipped = 0

    for sample in samples:
        value = as_number(sample.value)
        if value is None:
            skipped += 1
            logger.warning("activation_sample_skipped", reason="non-numeric value", value=repr(sample.value))
            continue

        raw_id = sample.tags.get(ID_TAG)
        if raw_id is None:
            skipped += 1
            logger.warning("activation_sample_skipped", reason="missing id tag", tags=sample.tags)
            continue

        try:
            check_id = parse_check_id(raw_id)
        except ValueError:
            skipped += 1
            logger.warning("activation_sample_skipped", reason="unparsable id", id=raw_id)
            continue

        records[check_id] = ActivationRecord(
            check_id=check_id,
            value=value,
            label=sample.tags.get(LABEL_TAG, DEFAULT_LABEL),
            raw_id=raw_id,
        )

    if skipped:
        logger.info("activation_samples_skipped", skipped=skipped, resolved=len(records))
    return records


def activation_measurement(backend_name: str) -> str:
    """Measurement holding similarity scores in the named backend.

    The Flux store names it with hyphens, metric stores with underscores.
    """
    if backend_name == "influxdb":
        return settings.influxdb_activation_measurement
    return settings.activation_measurement


def activation_query(window: TimeWindow, measurement: str | None = None) -> SampleQuery:
    """The query that selects active checks: first value per id at or above threshold."""
    return SampleQuery(
        measurement=measurement or settings.activation_measurement,
        window=window,
        mode=QueryMode.FIRST,
        group_by=(ID_TAG,),
        min_value=settings.activation_threshold,
    )


async def fetch_activations(
    backend: QueryBackend,
    window: TimeWindow,
) -> dict[int, ActivationRecord]:
    """Query *backend* for the window and resolve the active checks.

    Backend errors propagate unchanged.
    """
    query = activation_query(window, activation_measurement(backend.name))
    samples = await backend.query(query)
    return resolve_activations(samples)
