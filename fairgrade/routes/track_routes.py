"""
Activity Tracking Routes for FairGrade.
Receives activity reports from the browser extension: single activities
scoped to a project (track) and raw event batches (track-batch).
"""
import logging
from flask import Blueprint, jsonify, g

from fairgrade.deps import get_config, get_store, get_recalculation
from fairgrade.errors import ValidationError
from fairgrade.routes.validation import json_body, parse_model
from fairgrade.services.activity import TrackRequest, record_activity, parse_batch_events, build_event_rows, record_events

track_bp = Blueprint('track', __name__)
logger = logging.getLogger(__name__)


@track_bp.route('/functions/v1/track', methods=['POST'])
def track():
    """
    Log one activity for the authenticated student.
    The URL must be inside the project's tracking scope. Score recalculation
    is queued afterwards and never delays or fails this response.
    """
    activity = parse_model(TrackRequest, json_body())
    logger.info("[track] User %s activity: %s on %s", g.user_id, activity.activity_type, activity.platform)

    record_activity(get_store(), g.user_id, activity, get_config().scope_match_mode)

    # Fire-and-forget: the activity is already stored
    try:
        queued = get_recalculation().dispatch(activity.project_id, g.user_id)
    except Exception as e:
        logger.error("[track] Score recalculation dispatch failed: %s", e)
        queued = False
    if not queued:
        logger.warning("[track] Score recalculation not queued for project %s", activity.project_id)

    return jsonify({"success": True, "message": "Activity logged"})


@track_bp.route('/functions/v1/track-batch', methods=['POST'])
def track_batch():
    """Store a batch of raw extension events for the token's student."""
    events = json_body().get('events')
    if not events or not isinstance(events, list):
        raise ValidationError("Events array is required")

    logger.info("Track-batch request from student %s: %d events", g.user_id, len(events))
    parsed = parse_batch_events(events)
    rows = build_event_rows(g.user_id, parsed)
    if not rows:
        raise ValidationError("No valid events provided")

    saved = record_events(get_store(), rows)
    return jsonify({"success": True, "events_saved": saved})
