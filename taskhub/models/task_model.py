from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from taskhub.models.category_model import Category


@dataclass
class Task:
    title: str
    description: Optional[str] = None
    priority: Optional[int] = None  # 1..10
    due_date: Optional[datetime] = None
    is_done: bool = False
    category_id: Optional[str] = None
    # Joined on read: the referenced category, if any
    category: Optional[Category] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc, category_doc=None):
        category_id = doc.get("category_id")
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            description=doc.get("description"),
            priority=doc.get("priority"),
            due_date=doc.get("due_date"),
            is_done=bool(doc.get("is_done", False)),
            category_id=str(category_id) if category_id is not None else None,
            category=Category.from_doc(category_doc) if category_doc else None,
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "isDone": self.is_done,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "categoryId": self.category_id,
            "category": self.category.summary() if self.category else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
