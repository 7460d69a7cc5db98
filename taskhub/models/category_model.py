from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def normalize_name(name: str) -> str:
    """Uniqueness key for category names: lower-cased and trimmed."""
    return name.lower().strip()


@dataclass
class Category:
    name: str
    color: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[str] = None
    # Derived on read, never stored
    task_count: Optional[int] = None

    @classmethod
    def from_doc(cls, doc, task_count=None):
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            color=doc.get("color"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            task_count=task_count,
        )

    def to_doc(self):
        return {
            "name": self.name,
            "color": self.color,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def summary(self):
        return {"id": self.id, "name": self.name, "color": self.color}

    def to_dict(self):
        data = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }
        if self.task_count is not None:
            data["taskCount"] = self.task_count
        return data


def _isoformat(value):
    return value.isoformat() if value is not None else None
