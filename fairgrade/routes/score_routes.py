"""
Contribution Score Routes for FairGrade.
calculate-scores is invoked by the recalculation trigger with the service
key; student-stats backs the student's per-project dashboard.
"""
import logging
from flask import Blueprint, request, jsonify, g

from fairgrade.deps import get_store
from fairgrade.errors import ValidationError
from fairgrade.routes.validation import json_body
from fairgrade.services.scoring import recalculate_scores
from fairgrade.services.stats import student_stats as collect_stats

score_bp = Blueprint('score', __name__)
logger = logging.getLogger(__name__)


@score_bp.route('/functions/v1/calculate-scores', methods=['POST'])
def calculate_scores():
    """Recompute one student's contribution score in a project."""
    data = json_body()
    project_id = data.get('project_id')
    student_id = data.get('student_id')
    if not project_id or not student_id:
        raise ValidationError("project_id and student_id are required")

    scores = recalculate_scores(get_store(), project_id, student_id)
    return jsonify({"success": True, "scores": scores})


@score_bp.route('/functions/v1/student-stats', methods=['GET'])
def student_stats():
    project_id = request.args.get('project_id')
    if not project_id:
        raise ValidationError("project_id is required")

    logger.info("[student-stats] Fetching stats for user %s in project %s", g.user_id, project_id)
    return jsonify(collect_stats(get_store(), project_id, g.user_id))
