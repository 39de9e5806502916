"""
Test: contribution scoring: arithmetic and the calculate-scores function.
"""
import pytest

from conftest import SERVICE_KEY, STUDENT_ID, TEAMMATE_ID
from fairgrade.services.scoring import compute_scores

SCORES_URL = "/functions/v1/calculate-scores"


def _edit(student, chars):
    return {"student_id": student, "activity_type": "document_edit", "characters_added": chars}


def _meeting(student):
    return {"student_id": student, "activity_type": "meeting_join"}


def _message(student, count=None):
    metadata = {"message_count": count} if count is not None else {}
    return {"student_id": student, "activity_type": "message_sent", "metadata": metadata}


class TestComputeScores:
    def test_empty_group_scores_zero(self):
        scores = compute_scores([], [])
        assert scores == {
            "total_score": 0,
            "document_edit_score": 0,
            "meeting_score": 0,
            "communication_score": 0,
        }

    def test_shares_and_weights(self):
        mine = [_edit("a", 300), _meeting("a"), _message("a", 3)]
        group = mine + [_edit("b", 100), _meeting("b"), _message("b")]
        scores = compute_scores(mine, group)
        assert scores["document_edit_score"] == pytest.approx(75.0)
        assert scores["meeting_score"] == pytest.approx(50.0)
        assert scores["communication_score"] == pytest.approx(75.0)
        assert scores["total_score"] == pytest.approx(75 * 0.5 + 50 * 0.3 + 75 * 0.2)

    def test_sole_contributor_is_capped_at_100(self):
        mine = [_edit("a", 10), _meeting("a"), _message("a")]
        scores = compute_scores(mine, mine)
        assert scores["total_score"] == pytest.approx(100)
        assert all(v <= 100 for v in scores.values())

    def test_inconsistent_inputs_still_capped(self):
        scores = compute_scores([_edit("a", 500)], [_edit("a", 100)])
        assert scores["document_edit_score"] == 100

    def test_message_without_count_counts_once(self):
        scores = compute_scores([_message("a")], [_message("a"), _message("b", 3)])
        assert scores["communication_score"] == pytest.approx(25.0)

    def test_other_activity_types_ignored(self):
        view = {"student_id": "a", "activity_type": "view", "characters_added": 999}
        scores = compute_scores([view], [view, _edit("b", 10)])
        assert scores["document_edit_score"] == 0


class TestCalculateScoresFunction:
    @pytest.fixture
    def service_headers(self):
        return {"Authorization": "Bearer " + SERVICE_KEY}

    def test_requires_service_key(self, client, store, auth_headers):
        resp = client.post(SCORES_URL, json={"project_id": "proj-1", "student_id": STUDENT_ID},
                           headers=auth_headers)
        assert resp.status_code == 401
        assert store.scores == {}

    def test_requires_ids(self, client, service_headers):
        resp = client.post(SCORES_URL, json={"project_id": "proj-1"}, headers=service_headers)
        assert resp.status_code == 400

    def test_upserts_scores(self, client, store, service_headers):
        store.activity_logs = [
            dict(_edit(STUDENT_ID, 60), project_id="proj-1"),
            dict(_edit(TEAMMATE_ID, 40), project_id="proj-1"),
            dict(_edit(TEAMMATE_ID, 1000), project_id="proj-3"),
        ]
        resp = client.post(SCORES_URL, json={"project_id": "proj-1", "student_id": STUDENT_ID},
                           headers=service_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["success"] is True
        assert data["scores"]["document_edit_score"] == pytest.approx(60.0)
        assert data["scores"]["total_score"] == pytest.approx(30.0)

        saved = store.scores[("proj-1", STUDENT_ID)]
        assert saved["document_edit_score"] == pytest.approx(60.0)
        assert saved["last_calculated"]

    def test_recalculating_overwrites(self, client, store, service_headers):
        body = {"project_id": "proj-1", "student_id": STUDENT_ID}
        store.activity_logs = [dict(_edit(STUDENT_ID, 10), project_id="proj-1")]
        client.post(SCORES_URL, json=body, headers=service_headers)
        store.activity_logs.append(dict(_edit(TEAMMATE_ID, 30), project_id="proj-1"))
        client.post(SCORES_URL, json=body, headers=service_headers)
        assert len(store.scores) == 1
        assert store.scores[("proj-1", STUDENT_ID)]["document_edit_score"] == pytest.approx(25.0)

    def test_read_failure_is_500(self, client, store, service_headers):
        store.fail.add("list_activities")
        resp = client.post(SCORES_URL, json={"project_id": "proj-1", "student_id": STUDENT_ID},
                           headers=service_headers)
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to fetch activities"}

    def test_upsert_failure_is_500(self, client, store, service_headers):
        store.fail.add("upsert_score")
        resp = client.post(SCORES_URL, json={"project_id": "proj-1", "student_id": STUDENT_ID},
                           headers=service_headers)
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to save scores"}
