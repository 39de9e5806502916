"""
Extension Pairing Routes for FairGrade.
A student copies a pairing token from the web app into the extension; the
extension trades it, together with the student's email, for a session token
and the list of projects to track.

PUBLIC endpoint: the pairing token in the body is the credential.
"""
import logging
from datetime import datetime, timezone
from flask import Blueprint, jsonify

from fairgrade.deps import get_config, get_store
from fairgrade.errors import NotFound, ServiceError, StoreError, Unauthorized, ValidationError
from fairgrade.routes.validation import json_body
from fairgrade.services.extension_tokens import issue_token

extension_bp = Blueprint('extension', __name__)
logger = logging.getLogger(__name__)


def _projects_with_urls(store, student_id):
    """Enrolled projects plus their URLs; read failures leave the list short."""
    try:
        enrollments = store.list_enrollment_summaries(student_id)
    except StoreError as e:
        logger.error("Error fetching projects for %s: %s", student_id, e)
        enrollments = []

    project_ids = [e["project_id"] for e in enrollments if e.get("project_id")]
    try:
        urls = store.list_urls_for_projects(project_ids)
    except StoreError as e:
        logger.error("Error fetching project URLs for %s: %s", student_id, e)
        urls = []

    projects = []
    for e in enrollments:
        project = dict(e.get("projects") or {})
        project["urls"] = [u for u in urls if u.get("project_id") == e.get("project_id")]
        projects.append(project)
    return projects


@extension_bp.route('/functions/v1/extension-auth', methods=['POST'])
def extension_auth():
    data = json_body()
    email = data.get('email')
    token = data.get('token')
    if not email or not token:
        raise ValidationError("Email and token are required")

    logger.info("Extension auth attempt for email: %s", email)
    store = get_store()
    now = datetime.now(timezone.utc)

    try:
        profile = store.find_profile_by_email(email)
    except StoreError as e:
        logger.error("Profile lookup failed: %s", e)
        raise ServiceError() from e
    if not profile:
        raise NotFound("User not found")

    try:
        pairing = store.find_valid_extension_token(profile["user_id"], token, now)
    except StoreError as e:
        logger.error("Token verification failed: %s", e)
        pairing = None
    if not pairing:
        raise Unauthorized("Invalid or expired token")

    logger.info("Token verified for student: %s", profile["user_id"])
    cfg = get_config()
    auth_token = issue_token(profile, cfg.token_secret, cfg.extension_token_ttl_days, now)
    projects = _projects_with_urls(store, profile["user_id"])

    logger.info("Returning %d projects for student", len(projects))
    return jsonify({
        "authToken": auth_token,
        "studentId": profile["user_id"],
        "studentName": profile.get("full_name"),
        "projects": projects,
    })
