"""
Extension heartbeat: record the ping, then report what to watch.

The two steps fail independently. A failed last-sync update is only
logged; a failed project read fails the request.
"""
import logging
from datetime import datetime, timezone

from fairgrade.errors import ServiceError, StoreError

logger = logging.getLogger(__name__)


def record_sync(store, student_id, now=None):
    """Advance extension_last_sync on every enrollment of the student."""
    now = now or datetime.now(timezone.utc)
    try:
        store.touch_last_sync(student_id, now)
    except StoreError as e:
        logger.warning("[heartbeat] Error updating sync time for %s: %s", student_id, e)
        return False
    return True


def active_projects(store, student_id):
    """List the student's active projects with their tracking URLs."""
    try:
        enrollments = store.list_enrollments_with_projects(student_id)
    except StoreError as e:
        logger.error("[heartbeat] Error fetching enrollments: %s", e)
        raise ServiceError("Failed to fetch projects") from e

    projects = []
    for enrollment in enrollments:
        project = enrollment.get("projects")
        if not project or project.get("status") != "active":
            continue
        projects.append({
            "id": project["id"],
            "name": project.get("name"),
            "urls": [
                {"url": u.get("url"), "platform": u.get("platform")}
                for u in project.get("project_urls") or []
            ],
        })
    return projects


def heartbeat(store, student_id, now=None):
    record_sync(store, student_id, now)
    projects = active_projects(store, student_id)
    logger.info("[heartbeat] Returning %d active projects for user %s", len(projects), student_id)
    return projects
