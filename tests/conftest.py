import time
from datetime import date, timedelta

import mongomock
import pytest

from taskhub.app import create_app
from taskhub.services.category_service import CategoryService
from taskhub.services.stats_service import StatsService
from taskhub.services.task_service import TaskService
from taskhub.utils.db import ensure_indexes


@pytest.fixture()
def mongo_client():
    """In-process stand-in for the MongoDB server."""
    return mongomock.MongoClient()


@pytest.fixture()
def app(mongo_client):
    app = create_app(
        test_config={"TESTING": True, "MONGO_DB_NAME": "taskhub_test"},
        mongo_client=mongo_client,
    )
    ensure_indexes(mongo_client["taskhub_test"])
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db(app, mongo_client):
    return mongo_client[app.config["MONGO_DB_NAME"]]


@pytest.fixture()
def task_service(db):
    return TaskService(db)


@pytest.fixture()
def category_service(db):
    return CategoryService(db)


@pytest.fixture()
def stats_service(db):
    return StatsService(db)


@pytest.fixture()
def yesterday():
    return (date.today() - timedelta(days=1)).isoformat()


@pytest.fixture()
def scenario_tasks(task_service, yesterday):
    """Three tasks: one overdue, one done (also past due), one without due date."""
    return [
        task_service.create({"title": "Buy milk", "is_done": False, "due_date": yesterday}),
        task_service.create({"title": "Write report", "is_done": True, "due_date": yesterday}),
        task_service.create({"title": "Plan trip", "is_done": False, "due_date": None}),
    ]


@pytest.fixture()
def local_tz(monkeypatch):
    """Run the test with the process local time zone at UTC+3."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Etc/GMT-3")
    time.tzset()
    yield "Etc/GMT-3"
    monkeypatch.undo()
    time.tzset()
