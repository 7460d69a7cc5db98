import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

from taskhub.errors import ServiceError
from taskhub.utils.logging_setup import setup_logging


def create_app(test_config=None, mongo_client=None):
    load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"), override=False)

    app = Flask(__name__)
    app.config.from_object("taskhub.config.Config")
    if test_config is not None:
        app.config.update(test_config)
    app.json.sort_keys = False

    # Tests keep pytest's own log capture
    if not app.testing:
        setup_logging(app.config["LOG_LEVEL"])

    # Core extensions
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Initialize the Mongo client and the init-db command
    from taskhub.utils.db import init_app as init_db, ping

    init_db(app, client=mongo_client)

    # Register blueprints
    from taskhub.routes.task_routes import tasks_bp
    from taskhub.routes.category_routes import categories_bp
    from taskhub.routes.stats_routes import stats_bp

    app.register_blueprint(tasks_bp, url_prefix="/api/tasks")
    app.register_blueprint(categories_bp, url_prefix="/api/categories")
    app.register_blueprint(stats_bp, url_prefix="/api/stats")

    @app.get("/api/health")
    def health():
        database = "ok" if ping() else "unavailable"
        return jsonify(status="ok", service="TaskHub API", database=database), 200

    @app.errorhandler(ServiceError)
    def service_error(exc):
        return jsonify(error=exc.message), exc.status_code

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(error="Not Found"), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify(error="Method Not Allowed"), 405

    @app.errorhandler(500)
    def server_error(_):
        # Flask has already logged the traceback through app.logger
        return jsonify(error="Internal Server Error"), 500

    return app
