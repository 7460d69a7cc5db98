"""Request payload validation.

Turns raw JSON bodies and query strings into the inputs the services expect
(snake_case keys, typed query), raising ``BadRequestError`` on malformed
fields. For partial payloads only the keys present are returned, so a
service can tell "not provided" from "explicitly null".
"""

from taskhub.errors import BadRequestError
from taskhub.models.task_query import DEFAULT_LIMIT, DEFAULT_PAGE, SortOrder, TaskQuery, TaskStatus
from taskhub.utils.dates import parse_due_date

PRIORITY_MIN = 1
PRIORITY_MAX = 10

# JSON name -> stored name
_TASK_FIELDS = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "isDone": "is_done",
    "dueDate": "due_date",
    "categoryId": "category_id",
}


def _require_string(name, value, allow_empty=False):
    if not isinstance(value, str):
        raise BadRequestError(f"{name} must be a string")
    if not allow_empty and not value.strip():
        raise BadRequestError(f"{name} must not be empty")
    return value


def validate_task_payload(payload, partial=False):
    """Validate a task body for create (``partial=False``) or update."""
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")

    fields = {}
    for json_name, field in _TASK_FIELDS.items():
        if json_name not in payload:
            continue
        value = payload[json_name]

        if json_name == "title":
            fields[field] = _require_string("title", value).strip()
            continue
        if value is None:
            if json_name == "isDone":
                raise BadRequestError("isDone must be a boolean")
            fields[field] = None
            continue

        if json_name == "description":
            fields[field] = _require_string("description", value, allow_empty=True)
        elif json_name == "priority":
            if isinstance(value, bool) or not isinstance(value, int):
                raise BadRequestError("priority must be an integer")
            if not PRIORITY_MIN <= value <= PRIORITY_MAX:
                raise BadRequestError(f"priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}")
            fields[field] = value
        elif json_name == "isDone":
            if not isinstance(value, bool):
                raise BadRequestError("isDone must be a boolean")
            fields[field] = value
        elif json_name == "dueDate":
            _require_string("dueDate", value)
            try:
                parse_due_date(value)
            except ValueError:
                raise BadRequestError("Invalid dueDate format")
            fields[field] = value
        elif json_name == "categoryId":
            fields[field] = _require_string("categoryId", value)

    if not partial and "title" not in fields:
        raise BadRequestError("Title is required")
    if partial and not fields:
        raise BadRequestError("No valid fields to update")
    return fields


def validate_category_payload(payload, partial=False):
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")

    fields = {}
    if "name" in payload:
        fields["name"] = _require_string("name", payload["name"])
    elif not partial:
        raise BadRequestError("Name is required")
    if "color" in payload:
        color = payload["color"]
        fields["color"] = None if color is None else _require_string("color", color, allow_empty=True)

    if partial and not fields:
        raise BadRequestError("No valid fields to update")
    return fields


def _parse_int(raw, default):
    # Non-numeric input falls back to the default, as an empty value would
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value or default


def _parse_enum(enum_cls, name, raw):
    if raw is None or raw == "":
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise BadRequestError(f"{name} must be one of: {allowed}")


def validate_task_query(args, default_limit=DEFAULT_LIMIT, max_limit=None):
    """Build a ``TaskQuery`` from a query-string mapping."""
    page = _parse_int(args.get("page"), DEFAULT_PAGE)
    limit = _parse_int(args.get("limit"), default_limit)
    if page < 1:
        raise BadRequestError("page must be a positive integer")
    if limit < 1:
        raise BadRequestError("limit must be a positive integer")
    if max_limit is not None and limit > max_limit:
        raise BadRequestError(f"limit must not exceed {max_limit}")

    return TaskQuery(
        search=args.get("search") or None,
        status=_parse_enum(TaskStatus, "status", args.get("status")),
        category=args.get("category") or None,
        sort_field=args.get("sortField") or None,
        sort_by=_parse_enum(SortOrder, "sortBy", args.get("sortBy")),
        page=page,
        limit=limit,
    )
