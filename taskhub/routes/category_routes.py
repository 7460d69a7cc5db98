from flask import Blueprint, jsonify, request

from taskhub.services.category_service import CategoryService
from taskhub.utils.db import get_db
from taskhub.utils.validators import validate_category_payload


categories_bp = Blueprint("categories", __name__)


def _service():
    return CategoryService(get_db())


@categories_bp.get("/")
def list_categories():
    items = [c.to_dict() for c in _service().list()]
    return jsonify(items=items), 200


@categories_bp.post("/")
def create_category():
    payload = request.get_json(silent=True) or {}
    fields = validate_category_payload(payload)
    category = _service().create(fields["name"], fields.get("color"))
    return jsonify(item=category.to_dict()), 201


@categories_bp.get("/<category_id>")
def get_category(category_id):
    category = _service().find_by_id(category_id)
    return jsonify(item=category.to_dict()), 200


@categories_bp.patch("/<category_id>")
def update_category(category_id):
    payload = request.get_json(silent=True) or {}
    patch = validate_category_payload(payload, partial=True)
    category = _service().update(category_id, patch)
    return jsonify(item=category.to_dict()), 200


@categories_bp.delete("/<category_id>")
def delete_category(category_id):
    # 409 with the blocking task count if tasks still reference it
    _service().remove(category_id)
    return jsonify(status="deleted", id=category_id), 200
