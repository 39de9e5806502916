"""
Contribution scoring.

A student's score in a project is their share of the group's tracked work,
split across document edits, meeting attendance and messages.
"""
import logging
from datetime import datetime, timezone

from fairgrade.errors import ServiceError, StoreError

logger = logging.getLogger(__name__)

DOCUMENT_WEIGHT = 0.5
MEETING_WEIGHT = 0.3
COMMUNICATION_WEIGHT = 0.2
MAX_SCORE = 100


def _characters(activities):
    return sum(a.get("characters_added") or 0 for a in activities if a.get("activity_type") == "document_edit")


def _meetings(activities):
    return sum(1 for a in activities if a.get("activity_type") == "meeting_join")


def _messages(activities):
    total = 0
    for a in activities:
        if a.get("activity_type") != "message_sent":
            continue
        metadata = a.get("metadata") or {}
        total += metadata.get("message_count") or 1
    return total


def _share(part, whole):
    return (part / whole) * 100 if whole > 0 else 0


def compute_scores(student_activities, group_activities):
    """Return the capped score breakdown for one student.

    Each component is the student's percentage of the group total (0 for
    an empty group); the total is their weighted sum.
    """
    document = _share(_characters(student_activities), _characters(group_activities))
    meeting = _share(_meetings(student_activities), _meetings(group_activities))
    communication = _share(_messages(student_activities), _messages(group_activities))
    total = document * DOCUMENT_WEIGHT + meeting * MEETING_WEIGHT + communication * COMMUNICATION_WEIGHT

    return {
        "total_score": min(total, MAX_SCORE),
        "document_edit_score": min(document, MAX_SCORE),
        "meeting_score": min(meeting, MAX_SCORE),
        "communication_score": min(communication, MAX_SCORE),
    }


def recalculate_scores(store, project_id, student_id, now=None):
    """Recompute and persist a student's contribution score for a project."""
    logger.info("[calculate-scores] Calculating scores for project %s, student %s", project_id, student_id)
    try:
        group_activities = store.list_activities(project_id)
    except StoreError as e:
        logger.error("[calculate-scores] Error fetching activities: %s", e)
        raise ServiceError("Failed to fetch activities") from e

    student_activities = [a for a in group_activities if a.get("student_id") == student_id]
    scores = compute_scores(student_activities, group_activities)
    logger.info(
        "[calculate-scores] Scores calculated: total=%.2f, doc=%.2f, meeting=%.2f, comm=%.2f",
        scores["total_score"], scores["document_edit_score"],
        scores["meeting_score"], scores["communication_score"],
    )

    now = now or datetime.now(timezone.utc)
    try:
        store.upsert_score({
            "project_id": project_id,
            "student_id": student_id,
            **scores,
            "last_calculated": now.isoformat(),
        })
    except StoreError as e:
        logger.error("[calculate-scores] Error upserting score: %s", e)
        raise ServiceError("Failed to save scores") from e

    return scores
