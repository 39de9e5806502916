"""
Shared test fixtures for the FairGrade functions.
The app runs against an in-memory store and a recording recalculation
queue. Zero network calls.
"""
from datetime import datetime, timezone
import itertools

import pytest

from fairgrade.app import create_app
from fairgrade.errors import StoreError

STUDENT_TOKEN = "student-token"
STUDENT_ID = "student-1"
TEAMMATE_TOKEN = "teammate-token"
TEAMMATE_ID = "student-2"
SERVICE_KEY = "service-role-key"
TOKEN_SECRET = "test-extension-secret-0123456789abcdef"


class FakeStore:
    """In-memory stand-in for SupabaseStore.

    Add a method name to ``fail`` to make that call raise StoreError.
    """

    def __init__(self):
        self.users = {STUDENT_TOKEN: STUDENT_ID, TEAMMATE_TOKEN: TEAMMATE_ID}
        self.projects = {}
        self.project_urls = []
        self.enrollments = []
        self.activity_logs = []
        self.event_stream = []
        self.profiles = []
        self.extension_tokens = []
        self.scores = {}
        self.tasks = []
        self.sync_calls = []
        self.fail = set()
        self._ids = itertools.count(1)

    def _check(self, name):
        if name in self.fail:
            raise StoreError(f"{name}: simulated failure")

    # ---- seeding helpers ----

    def add_project(self, project_id, name, status="active", urls=(), course_name="Civics"):
        self.projects[project_id] = {
            "id": project_id, "name": name, "status": status, "course_name": course_name,
        }
        for url, platform in urls:
            self.project_urls.append({"project_id": project_id, "url": url, "platform": platform})

    def enroll(self, project_id, student_id, group_id="g1"):
        self.enrollments.append({
            "project_id": project_id,
            "student_id": student_id,
            "group_id": group_id,
            "extension_last_sync": None,
        })

    # ---- store interface ----

    def get_user_id(self, token):
        return self.users.get(token)

    def list_project_urls(self, project_id):
        self._check("list_project_urls")
        return [{"url": u["url"], "platform": u["platform"]}
                for u in self.project_urls if u["project_id"] == project_id]

    def list_urls_for_projects(self, project_ids):
        self._check("list_urls_for_projects")
        return [dict(u) for u in self.project_urls if u["project_id"] in project_ids]

    def touch_last_sync(self, student_id, when):
        self._check("touch_last_sync")
        self.sync_calls.append(when)
        for e in self.enrollments:
            if e["student_id"] == student_id:
                e["extension_last_sync"] = when.isoformat()

    def list_enrollments_with_projects(self, student_id):
        self._check("list_enrollments_with_projects")
        rows = []
        for e in self.enrollments:
            if e["student_id"] != student_id:
                continue
            project = self.projects.get(e["project_id"])
            joined = None
            if project:
                joined = {
                    "id": project["id"],
                    "name": project["name"],
                    "status": project["status"],
                    "project_urls": self.list_project_urls(project["id"]),
                }
            rows.append({"project_id": e["project_id"], "projects": joined})
        return rows

    def list_enrollment_summaries(self, student_id):
        self._check("list_enrollment_summaries")
        return [{"project_id": e["project_id"], "projects": dict(self.projects[e["project_id"]])}
                for e in self.enrollments
                if e["student_id"] == student_id and e["project_id"] in self.projects]

    def insert_activity(self, row):
        self._check("insert_activity")
        stored = dict(row)
        stored["id"] = next(self._ids)
        stored["timestamp"] = datetime.now(timezone.utc).isoformat()
        self.activity_logs.append(stored)

    def list_activities(self, project_id, student_id=None, since=None):
        self._check("list_activities")
        rows = [a for a in self.activity_logs if a["project_id"] == project_id]
        if student_id is not None:
            rows = [a for a in rows if a["student_id"] == student_id]
        if since is not None:
            rows = [a for a in rows if datetime.fromisoformat(a["timestamp"]) >= since]
        return rows

    def insert_events(self, rows):
        self._check("insert_events")
        self.event_stream.extend(dict(r) for r in rows)
        return len(rows)

    def find_profile_by_email(self, email):
        self._check("find_profile_by_email")
        for p in self.profiles:
            if p["email"] == email:
                return dict(p)
        return None

    def find_valid_extension_token(self, student_id, token, now):
        self._check("find_valid_extension_token")
        for t in self.extension_tokens:
            if t["student_id"] == student_id and t["token"] == token and t["expires_at"] > now:
                return dict(t)
        return None

    def upsert_score(self, row):
        self._check("upsert_score")
        self.scores[(row["project_id"], row["student_id"])] = dict(row)

    def get_score(self, project_id, student_id):
        self._check("get_score")
        return self.scores.get((project_id, student_id))

    def list_tasks(self, project_id, assigned_to):
        self._check("list_tasks")
        return [t for t in self.tasks if t["project_id"] == project_id and t["assigned_to"] == assigned_to]


class RecordingQueue:
    """Captures recalculation dispatches instead of running them."""

    def __init__(self):
        self.dispatched = []
        self.raise_on_dispatch = False

    def dispatch(self, project_id, student_id):
        if self.raise_on_dispatch:
            raise RuntimeError("queue unavailable")
        self.dispatched.append((project_id, student_id))
        return True

    def shutdown(self, wait=True):
        pass


@pytest.fixture
def store():
    s = FakeStore()
    s.add_project(
        "proj-1", "Constitution Essay",
        urls=[("https://docs.google.com/document/d/ABC", "google_docs")],
    )
    s.add_project(
        "proj-2", "Archived Lab Report", status="archived",
        urls=[("https://docs.google.com/document/d/OLD", "google_docs")],
    )
    s.add_project(
        "proj-3", "Debate Prep",
        urls=[("https://meet.google.com/xyz-abcd-efg", "google_meet"),
              ("https://slack.com/app/T123", "slack")],
    )
    for pid in ("proj-1", "proj-2", "proj-3"):
        s.enroll(pid, STUDENT_ID)
    s.enroll("proj-1", TEAMMATE_ID)
    return s


@pytest.fixture
def queue():
    return RecordingQueue()


@pytest.fixture
def app_settings():
    """Override in a test module to change configuration."""
    return {}


@pytest.fixture
def app(store, queue, app_settings):
    settings = {
        "supabase_url": "https://example.supabase.co",
        "supabase_service_key": SERVICE_KEY,
        "supabase_jwt_secret": "",
        "auth_mode": "remote",
        "extension_token_secret": TOKEN_SECRET,
        "scope_match_mode": "hostname",
        "recalc_mode": "local",
    }
    settings.update(app_settings)
    flask_app = create_app(settings, store_factory=lambda: store, recalculation=queue)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer " + STUDENT_TOKEN}
