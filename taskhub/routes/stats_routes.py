from flask import Blueprint, current_app, jsonify

from taskhub.services.stats_service import StatsService
from taskhub.utils.db import get_db


stats_bp = Blueprint("stats", __name__)


@stats_bp.get("/tasks")
def task_stats():
    service = StatsService(get_db(), top_categories_limit=current_app.config["TOP_CATEGORIES_LIMIT"])
    return jsonify(service.get_stats().to_dict()), 200
