"""
Heartbeat Routes for FairGrade.
The extension pings periodically; the reply tells it which project URLs to watch.
"""
import logging
from flask import Blueprint, jsonify, g

from fairgrade.deps import get_store
from fairgrade.services.heartbeat import heartbeat as run_heartbeat

heartbeat_bp = Blueprint('heartbeat', __name__)
logger = logging.getLogger(__name__)


@heartbeat_bp.route('/functions/v1/heartbeat', methods=['GET', 'POST'])
def heartbeat():
    logger.info("[heartbeat] User %s heartbeat received", g.user_id)
    projects = run_heartbeat(get_store(), g.user_id)
    return jsonify({"success": True, "projects": projects})
