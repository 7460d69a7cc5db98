from flask import Blueprint, current_app, jsonify, request

from taskhub.services.task_service import TaskService
from taskhub.utils.db import get_db
from taskhub.utils.validators import validate_task_payload, validate_task_query


tasks_bp = Blueprint("tasks", __name__)


def _service():
    return TaskService(get_db())


@tasks_bp.get("/")
def list_tasks():
    """List tasks filtered by search/status/category, sorted and paginated.

    Query string: search, status (all|done|undone), category, sortField,
    sortBy (asc|desc), page, limit.
    """
    query = validate_task_query(
        request.args,
        default_limit=current_app.config["DEFAULT_PAGE_LIMIT"],
        max_limit=current_app.config["MAX_PAGE_LIMIT"],
    )
    page = _service().find_many(query)
    return jsonify(page.to_dict()), 200


@tasks_bp.post("/")
def create_task():
    payload = request.get_json(silent=True) or {}
    fields = validate_task_payload(payload)
    task = _service().create(fields)
    return jsonify(item=task.to_dict()), 201


@tasks_bp.get("/<task_id>")
def get_task(task_id):
    task = _service().find_by_id(task_id)
    return jsonify(item=task.to_dict()), 200


@tasks_bp.patch("/<task_id>")
def update_task(task_id):
    payload = request.get_json(silent=True) or {}
    patch = validate_task_payload(payload, partial=True)
    task = _service().update(task_id, patch)
    return jsonify(item=task.to_dict()), 200


@tasks_bp.patch("/<task_id>/toggle")
def toggle_task(task_id):
    task = _service().toggle_done(task_id)
    return jsonify(item=task.to_dict()), 200


@tasks_bp.delete("/<task_id>")
def delete_task(task_id):
    _service().remove(task_id)
    return jsonify(status="deleted", id=task_id), 200
