import logging

import click
from bson import ObjectId
from flask import current_app
from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from taskhub.errors import BadRequestError

logger = logging.getLogger(__name__)

_EXTENSION_KEY = "taskhub_mongo"


def init_app(app, client=None):
    """Attach a Mongo client to ``app``.

    A pre-built client (e.g. ``mongomock.MongoClient()`` in tests) may be
    passed in; otherwise one is created from ``MONGO_URI``. pymongo connects
    lazily, so nothing touches the network here.
    """
    if client is None:
        client = MongoClient(
            app.config["MONGO_URI"],
            serverSelectionTimeoutMS=app.config["MONGO_SERVER_SELECTION_TIMEOUT_MS"],
            tz_aware=False,
        )
    app.extensions[_EXTENSION_KEY] = client
    app.cli.add_command(init_db_command)


def get_client():
    return current_app.extensions[_EXTENSION_KEY]


def get_db():
    return get_client()[current_app.config["MONGO_DB_NAME"]]


def ensure_indexes(db):
    # The unique index backs the registry's normalized-name check against
    # concurrent inserts.
    db.categories.create_index([("name", ASCENDING)], unique=True, name="uniq_category_name")
    db.tasks.create_index([("category_id", ASCENDING)], name="idx_task_category")
    db.tasks.create_index([("created_at", ASCENDING)], name="idx_task_created_at")


def ping():
    """Return True when the store answers a ping."""
    try:
        get_client().admin.command("ping")
        return True
    except PyMongoError as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return False


def to_object_id(value):
    if not value or not isinstance(value, str) or not ObjectId.is_valid(value):
        raise BadRequestError("Invalid ID format")
    return ObjectId(value)


@click.command("init-db")
def init_db_command():
    """Create the collections' indexes."""
    ensure_indexes(get_db())
    click.echo("Indexes created.")
