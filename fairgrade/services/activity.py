"""
Activity ingestion: request models and the insert paths for single
tracked activities and raw extension event batches.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pydantic
from pydantic import BaseModel, Field, field_validator

from fairgrade.errors import ServiceError, StoreError
from fairgrade.services.scope import check_scope

logger = logging.getLogger(__name__)


def _zero_if_missing(value):
    return 0 if value is None else value


class ActivityCounters(BaseModel):
    duration_seconds: int = Field(default=0, ge=0)
    characters_added: int = Field(default=0, ge=0)
    characters_deleted: int = Field(default=0, ge=0)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _whole_seconds(cls, value):
        value = _zero_if_missing(value)
        if isinstance(value, float):
            return round(value)
        return value

    @field_validator("characters_added", "characters_deleted", mode="before")
    @classmethod
    def _default_characters(cls, value):
        return _zero_if_missing(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value):
        return {} if value is None else value


class TrackRequest(ActivityCounters):
    project_id: str = Field(min_length=1)
    activity_type: str = Field(min_length=1)
    platform: str
    url: str = Field(min_length=1)


class BatchEvent(ActivityCounters):
    event_type: Optional[str] = None
    project_id: Optional[str] = None
    url: Optional[str] = None
    platform: Optional[str] = None
    timestamp: Optional[str] = None


def record_activity(store, student_id, activity: TrackRequest, scope_mode="hostname"):
    """Validate scope and append one activity log row.

    The row's timestamp is left to the database default.
    """
    check_scope(store, activity.project_id, activity.url, scope_mode)

    row = {
        "project_id": activity.project_id,
        "student_id": student_id,
        "activity_type": activity.activity_type,
        "platform": activity.platform,
        "url": activity.url,
        "duration_seconds": activity.duration_seconds,
        "characters_added": activity.characters_added,
        "characters_deleted": activity.characters_deleted,
        "metadata": activity.metadata,
    }
    try:
        store.insert_activity(row)
    except StoreError as e:
        logger.error("[track] Error inserting activity: %s", e)
        raise ServiceError("Failed to log activity") from e

    logger.info("[track] Activity logged successfully for user %s", student_id)


def parse_batch_events(raw_events):
    """Parse the typed events of a batch.

    Entries without an event_type are skipped before validation; typed
    entries that fail validation are dropped so the rest of the batch is kept.
    """
    events = []
    for index, raw in enumerate(raw_events):
        if not isinstance(raw, dict) or not raw.get("event_type"):
            continue
        try:
            events.append(BatchEvent.model_validate(raw))
        except pydantic.ValidationError as e:
            logger.warning("Dropping invalid event %d (%s): %s", index, raw.get("event_type"), e.errors()[0].get("msg"))
    return events


def build_event_rows(student_id, events: List[BatchEvent], now=None):
    """Turn parsed batch events into event_stream rows, dropping typeless ones."""
    now = now or datetime.now(timezone.utc)
    rows = []
    for event in events:
        if not event.event_type:
            continue
        rows.append({
            "student_id": student_id,
            "project_id": event.project_id or None,
            "event_type": event.event_type,
            "url": event.url or None,
            "platform": event.platform or None,
            "duration_seconds": event.duration_seconds,
            "characters_added": event.characters_added,
            "characters_deleted": event.characters_deleted,
            "metadata": event.metadata,
            "timestamp": event.timestamp or now.isoformat(),
        })
    return rows


def record_events(store, rows):
    """Insert event_stream rows in one call and return how many were saved."""
    try:
        saved = store.insert_events(rows)
    except StoreError as e:
        logger.error("Error inserting events: %s", e)
        raise ServiceError("Failed to save events", details=str(e)) from e
    logger.info("Successfully saved %d events", saved)
    return saved
