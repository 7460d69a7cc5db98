"""Category registry.

Enforces name uniqueness on the normalized (lower-cased, trimmed) name and
refuses to delete a category that tasks still reference. ``taskCount`` is
computed from the tasks collection on every read.
"""

import logging
from datetime import datetime
from typing import List, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from taskhub.errors import ConflictError, NotFoundError
from taskhub.models.category_model import Category, normalize_name
from taskhub.utils.db import to_object_id

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "Category with this name already exists"


class CategoryService:
    def __init__(self, db):
        self.db = db

    def create(self, name: str, color: Optional[str] = None) -> Category:
        normalized = normalize_name(name)
        if self.find_by_name(normalized) is not None:
            raise ConflictError(DUPLICATE_NAME_MESSAGE)

        category = Category(name=normalized, color=color)
        try:
            res = self.db.categories.insert_one(category.to_doc())
        except DuplicateKeyError:
            # Lost a race against a concurrent create of the same name
            raise ConflictError(DUPLICATE_NAME_MESSAGE)
        category.id = str(res.inserted_id)
        category.task_count = 0
        logger.info("Created category id=%s name=%r", category.id, category.name)
        return category

    def find_by_name(self, name: str) -> Optional[Category]:
        doc = self.db.categories.find_one({"name": normalize_name(name)})
        return Category.from_doc(doc) if doc else None

    def find_by_id(self, category_id: str) -> Category:
        oid = to_object_id(category_id)
        doc = self.db.categories.find_one({"_id": oid})
        if not doc:
            raise NotFoundError("Category", category_id)
        return Category.from_doc(doc, task_count=self.count_tasks(oid))

    def list(self) -> List[Category]:
        counts = {
            row["_id"]: row["count"]
            for row in self.db.tasks.aggregate(
                [
                    {"$match": {"category_id": {"$ne": None}}},
                    {"$group": {"_id": "$category_id", "count": {"$sum": 1}}},
                ]
            )
        }
        return [
            Category.from_doc(doc, task_count=counts.get(doc["_id"], 0))
            for doc in self.db.categories.find().sort("name", ASCENDING)
        ]

    def update(self, category_id: str, patch: dict) -> Category:
        """Apply ``patch`` (``name`` and/or ``color``) to an existing category."""
        existing = self.find_by_id(category_id)

        updates = {}
        if "name" in patch:
            normalized = normalize_name(patch["name"])
            owner = self.find_by_name(normalized)
            if owner is not None and owner.id != existing.id:
                raise ConflictError(DUPLICATE_NAME_MESSAGE)
            updates["name"] = normalized
        if "color" in patch:
            updates["color"] = patch["color"]
        updates["updated_at"] = datetime.utcnow()

        try:
            doc = self.db.categories.find_one_and_update(
                {"_id": to_object_id(existing.id)},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError(DUPLICATE_NAME_MESSAGE)
        if not doc:
            logger.warning("Category %s was deleted while being updated", category_id)
            raise NotFoundError("Category", category_id)
        return Category.from_doc(doc, task_count=existing.task_count)

    def remove(self, category_id: str) -> Category:
        category = self.find_by_id(category_id)
        if category.task_count > 0:
            raise ConflictError(
                f"Cannot delete category with {category.task_count} tasks. "
                "Please reassign or delete tasks first."
            )

        res = self.db.categories.delete_one({"_id": to_object_id(category.id)})
        if res.deleted_count == 0:
            logger.warning("Category %s was deleted concurrently", category_id)
            raise NotFoundError("Category", category_id)
        logger.info("Deleted category id=%s name=%r", category.id, category.name)
        return category

    def count_tasks(self, oid) -> int:
        return self.db.tasks.count_documents({"category_id": oid})
