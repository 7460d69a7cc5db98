import logging
from datetime import date
from typing import Optional

from pymongo import ASCENDING

from taskhub.models.stats_model import CategoryStat, TasksStats
from taskhub.utils.dates import start_of_day_utc

logger = logging.getLogger(__name__)


class StatsService:
    def __init__(self, db, top_categories_limit=3):
        self.db = db
        self.top_categories_limit = top_categories_limit

    def get_stats(self, today: Optional[date] = None) -> TasksStats:
        """Aggregate totals, completion rate, overdue count and top categories.

        ``today`` defaults to the local calendar day; a task is overdue when
        its due date falls before that day's local midnight and it is not
        done. Stored due dates are UTC, so the cutoff is converted to match.
        """
        start_of_today = start_of_day_utc(today)
        categories = {doc["_id"]: doc for doc in self.db.categories.find()}

        total = done = overdue = 0
        by_name = {}
        # Oldest first, so equal counts keep the order categories were first seen
        for task in self.db.tasks.find().sort([("created_at", ASCENDING), ("_id", ASCENDING)]):
            total += 1
            if task.get("is_done"):
                done += 1
            elif task.get("due_date") is not None and task["due_date"] < start_of_today:
                overdue += 1

            category = categories.get(task.get("category_id"))
            if category is None:
                continue
            stat = by_name.get(category["name"])
            if stat is None:
                stat = by_name[category["name"]] = CategoryStat(
                    name=category["name"], color=category.get("color")
                )
            stat.count += 1

        # sorted() is stable
        top = sorted(by_name.values(), key=lambda s: s.count, reverse=True)
        logger.debug("Stats computed over %d tasks", total)

        return TasksStats(
            total_tasks=total,
            done_tasks=done,
            pending_tasks=total - done,
            completion_rate=completion_rate(done, total),
            overdue_tasks=overdue,
            top_categories=top[: self.top_categories_limit],
        )


def completion_rate(done: int, total: int) -> int:
    """Percentage of done tasks, rounded half-up to an integer."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)
