from dataclasses import asdict, dataclass, field
from typing import List, Optional


@dataclass
class CategoryStat:
    name: str
    count: int = 0
    color: Optional[str] = None


@dataclass
class TasksStats:
    total_tasks: int = 0
    done_tasks: int = 0
    pending_tasks: int = 0
    completion_rate: int = 0
    overdue_tasks: int = 0
    top_categories: List[CategoryStat] = field(default_factory=list)

    def to_dict(self):
        return {
            "totalTasks": self.total_tasks,
            "doneTasks": self.done_tasks,
            "pendingTasks": self.pending_tasks,
            "completionRate": self.completion_rate,
            "overdueTasks": self.overdue_tasks,
            "topCategories": [asdict(c) for c in self.top_categories],
        }
