"""
Per-project statistics for the student dashboard widget.
Every read here is best-effort: a failure is logged and counted as empty.
"""
import logging
from datetime import datetime, timedelta, timezone

from fairgrade.errors import StoreError

logger = logging.getLogger(__name__)

EMPTY_SCORE = {
    "total_score": 0,
    "document_edit_score": 0,
    "meeting_score": 0,
    "communication_score": 0,
}


def _best_effort(label, fn, default):
    try:
        return fn()
    except StoreError as e:
        logger.error("[student-stats] Error fetching %s: %s", label, e)
        return default


def student_stats(store, project_id, student_id, now=None):
    now = now or datetime.now(timezone.utc)
    week_ago = now - timedelta(days=7)

    score = _best_effort("score", lambda: store.get_score(project_id, student_id), None)
    recent = _best_effort(
        "activities", lambda: store.list_activities(project_id, student_id, since=week_ago), []
    )
    tasks = _best_effort("tasks", lambda: store.list_tasks(project_id, student_id), [])

    total_seconds = sum(a.get("duration_seconds") or 0 for a in recent)

    return {
        "contribution_score": score or dict(EMPTY_SCORE),
        "hours_this_week": f"{total_seconds / 3600:.1f}",
        "activities_count": len(recent),
        "tasks": {
            "completed": sum(1 for t in tasks if t.get("completed")),
            "total": len(tasks),
        },
    }
