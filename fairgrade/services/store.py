"""
Supabase data store for the tracking functions.

Wraps a supabase-py client and exposes the handful of reads and writes the
functions need. Every PostgREST failure is re-raised as StoreError so the
callers can decide whether it is fatal (primary path) or best-effort.
"""
import logging

from postgrest.exceptions import APIError
from supabase import create_client, Client

from fairgrade.errors import StoreError

logger = logging.getLogger(__name__)

ENROLLMENT_PROJECTS_SELECT = """
    project_id,
    projects:project_id (
        id,
        name,
        status,
        project_urls (url, platform)
    )
"""

ENROLLMENT_SUMMARY_SELECT = """
    project_id,
    projects:project_id (
        id,
        name,
        course_name,
        status
    )
"""


def _execute(query, what):
    """Run a PostgREST query, translating API errors into StoreError."""
    try:
        return query.execute()
    except APIError as e:
        raise StoreError(f"{what}: {e.message}") from e


class SupabaseStore:
    """Table access for one request (or one background job)."""

    def __init__(self, client: Client):
        self.client = client

    # ---- identity ----

    def get_user_id(self, token):
        """Exchange an access token with Supabase Auth. Returns None if rejected."""
        try:
            res = self.client.auth.get_user(token)
        except Exception as e:
            logger.info("Supabase auth rejected token: %s", e)
            return None
        if res is None or res.user is None:
            return None
        return res.user.id

    # ---- projects ----

    def list_project_urls(self, project_id):
        res = _execute(
            self.client.table("project_urls").select("url, platform").eq("project_id", project_id),
            "list project urls",
        )
        return res.data or []

    def list_urls_for_projects(self, project_ids):
        if not project_ids:
            return []
        res = _execute(
            self.client.table("project_urls").select("*").in_("project_id", list(project_ids)),
            "list urls for projects",
        )
        return res.data or []

    # ---- enrollments ----

    def touch_last_sync(self, student_id, when):
        _execute(
            self.client.table("project_students")
            .update({"extension_last_sync": when.isoformat()})
            .eq("student_id", student_id),
            "update last sync",
        )

    def list_enrollments_with_projects(self, student_id):
        res = _execute(
            self.client.table("project_students").select(ENROLLMENT_PROJECTS_SELECT).eq("student_id", student_id),
            "list enrollments",
        )
        return res.data or []

    def list_enrollment_summaries(self, student_id):
        res = _execute(
            self.client.table("project_students").select(ENROLLMENT_SUMMARY_SELECT).eq("student_id", student_id),
            "list enrollment summaries",
        )
        return res.data or []

    # ---- activity ----

    def insert_activity(self, row):
        _execute(self.client.table("activity_logs").insert(row), "insert activity")

    def list_activities(self, project_id, student_id=None, since=None):
        query = self.client.table("activity_logs").select("*").eq("project_id", project_id)
        if student_id is not None:
            query = query.eq("student_id", student_id)
        if since is not None:
            query = query.gte("timestamp", since.isoformat())
        return _execute(query, "list activities").data or []

    def insert_events(self, rows):
        """Insert raw extension events, returning how many were stored."""
        res = _execute(self.client.table("event_stream").insert(rows), "insert events")
        return len(res.data or [])

    # ---- extension pairing ----

    def find_profile_by_email(self, email):
        res = _execute(
            self.client.table("profiles").select("user_id, email, full_name").eq("email", email).limit(1),
            "find profile",
        )
        return res.data[0] if res.data else None

    def find_valid_extension_token(self, student_id, token, now):
        res = _execute(
            self.client.table("extension_tokens")
            .select("*")
            .eq("student_id", student_id)
            .eq("token", token)
            .gt("expires_at", now.isoformat())
            .limit(1),
            "find extension token",
        )
        return res.data[0] if res.data else None

    # ---- scores & tasks ----

    def upsert_score(self, row):
        _execute(
            self.client.table("contribution_scores").upsert(row, on_conflict="project_id,student_id"),
            "upsert score",
        )

    def get_score(self, project_id, student_id):
        res = _execute(
            self.client.table("contribution_scores")
            .select("*")
            .eq("project_id", project_id)
            .eq("student_id", student_id)
            .limit(1),
            "get score",
        )
        return res.data[0] if res.data else None

    def list_tasks(self, project_id, assigned_to):
        res = _execute(
            self.client.table("project_tasks").select("*").eq("project_id", project_id).eq("assigned_to", assigned_to),
            "list tasks",
        )
        return res.data or []


def supabase_store_factory(url, key):
    """Return a callable that builds a fresh SupabaseStore on each call."""
    def factory():
        if not url or not key:
            raise Exception("Supabase credentials not configured. Check SUPABASE_URL and SUPABASE_SERVICE_KEY in .env")
        return SupabaseStore(create_client(url, key))
    return factory
