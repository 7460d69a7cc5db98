"""Task query and mutation engine.

Listing builds one Mongo filter document from the request and uses it for
both the page fetch and the total count, so a page never holds a task the
count does not include.
"""

import logging
import re
from datetime import datetime

from pymongo import ReturnDocument

from taskhub.errors import NotFoundError
from taskhub.models.category_model import normalize_name
from taskhub.models.task_model import Task
from taskhub.models.task_query import Pagination, SortField, TaskPage, TaskQuery, TaskStatus
from taskhub.utils.dates import parse_due_date
from taskhub.utils.db import to_object_id

logger = logging.getLogger(__name__)

# Fields a patch may set; anything else in the dict is ignored.
_PATCHABLE_FIELDS = ("title", "description", "priority", "is_done", "due_date", "category_id")

_CATEGORY_LOOKUP = [
    {
        "$lookup": {
            "from": "categories",
            "localField": "category_id",
            "foreignField": "_id",
            "as": "category",
        }
    },
    {"$unwind": {"path": "$category", "preserveNullAndEmptyArrays": True}},
]


class TaskService:
    def __init__(self, db):
        self.db = db

    # ---- queries ----

    def build_filter(self, query: TaskQuery) -> dict:
        """Translate the request's active filters into one ANDed filter document."""
        clauses = []

        if query.search:
            pattern = {"$regex": re.escape(query.search), "$options": "i"}
            clauses.append({"$or": [{"title": pattern}, {"description": pattern}]})

        if query.status is TaskStatus.DONE:
            clauses.append({"is_done": True})
        elif query.status is TaskStatus.UNDONE:
            clauses.append({"is_done": False})

        if query.category:
            doc = self.db.categories.find_one({"name": normalize_name(query.category)})
            if doc:
                clauses.append({"category_id": doc["_id"]})
            else:
                # No category by that name: nothing can match
                clauses.append({"category_id": {"$in": []}})

        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def find_many(self, query: TaskQuery) -> TaskPage:
        where = self.build_filter(query)
        pipeline = [{"$match": where}] + task_page_stages(query)

        tasks = [Task.from_doc(doc, doc.get("category")) for doc in self.db.tasks.aggregate(pipeline)]
        total = self.db.tasks.count_documents(where)
        logger.debug("find_many filter=%s total=%d page=%d", where, total, query.page)

        return TaskPage(
            tasks=tasks,
            pagination=Pagination(page=query.page, limit=query.limit, total=total),
        )

    def find_by_id(self, task_id) -> Task:
        oid = to_object_id(task_id)
        docs = list(self.db.tasks.aggregate([{"$match": {"_id": oid}}] + _CATEGORY_LOOKUP))
        if not docs:
            raise NotFoundError("Task", task_id)
        return Task.from_doc(docs[0], docs[0].get("category"))

    # ---- mutations ----

    def create(self, fields: dict) -> Task:
        """Insert a task from validated ``fields`` (snake_case keys)."""
        now = datetime.utcnow()
        doc = {
            "title": fields["title"],
            "description": fields.get("description"),
            "priority": fields.get("priority"),
            "is_done": fields.get("is_done", False),
            "due_date": parse_due_date(fields.get("due_date")),
            "category_id": self._category_ref(fields.get("category_id")),
            "created_at": now,
            "updated_at": now,
        }
        res = self.db.tasks.insert_one(doc)
        logger.info("Created task id=%s", res.inserted_id)
        return self.find_by_id(str(res.inserted_id))

    def update(self, task_id, patch: dict) -> Task:
        """Apply ``patch``.

        A key missing from ``patch`` leaves the field untouched; a key
        present with ``None`` clears it.
        """
        oid = to_object_id(task_id)
        self.find_by_id(task_id)

        updates = {k: patch[k] for k in _PATCHABLE_FIELDS if k in patch}
        if "due_date" in updates:
            updates["due_date"] = parse_due_date(updates["due_date"])
        if "category_id" in updates:
            updates["category_id"] = self._category_ref(updates["category_id"])
        updates["updated_at"] = datetime.utcnow()

        self._write(oid, task_id, updates)
        return self.find_by_id(task_id)

    def remove(self, task_id) -> Task:
        oid = to_object_id(task_id)
        task = self.find_by_id(task_id)

        res = self.db.tasks.delete_one({"_id": oid})
        if res.deleted_count == 0:
            logger.warning("Task %s was deleted concurrently", task_id)
            raise NotFoundError("Task", task_id)
        logger.info("Deleted task id=%s", task_id)
        return task

    def toggle_done(self, task_id) -> Task:
        oid = to_object_id(task_id)
        task = self.find_by_id(task_id)

        self._write(oid, task_id, {"is_done": not task.is_done, "updated_at": datetime.utcnow()})
        return self.find_by_id(task_id)

    def _write(self, oid, task_id, updates):
        res = self.db.tasks.find_one_and_update(
            {"_id": oid}, {"$set": updates}, return_document=ReturnDocument.AFTER
        )
        if not res:
            # Existence check and write are not atomic
            logger.warning("Task %s was deleted while being updated", task_id)
            raise NotFoundError("Task", task_id)
        return res

    def _category_ref(self, category_id):
        if category_id is None:
            return None
        oid = to_object_id(category_id)
        if self.db.categories.find_one({"_id": oid}, {"_id": 1}) is None:
            raise NotFoundError("Category", category_id)
        return oid


def task_page_stages(query: TaskQuery):
    """Sort, window and category join stages for one page of ``query``.

    The join runs before the sort only when ordering by category name;
    otherwise just the page's tasks are joined.
    """
    sort = query.resolve_sort()
    window = [{"$sort": dict(sort)}, {"$skip": query.skip}, {"$limit": query.limit}]
    if sort[0][0] == SortField.CATEGORY.sort_key:
        return _CATEGORY_LOOKUP + window
    return window + _CATEGORY_LOOKUP
