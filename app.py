import logging
import os
from flask import Flask, jsonify
from flask_migrate import Migrate
from sqlalchemy.engine import make_url
from werkzeug.exceptions import HTTPException
from config import Config
from models import db

migrate = Migrate()


def _configure_logging(app):
    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])


def _register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code


def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    # Local dev → SQLite file in the instance folder
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        os.makedirs(app.instance_path, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = (
            "sqlite:///" + os.path.join(app.instance_path, "splitsend.db")
        )

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)

    from routes.groups import groups_bp
    from routes.members import members_bp
    from routes.expenses import expenses_bp
    from routes.settlements import settlements_bp

    app.register_blueprint(groups_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(settlements_bp)

    _register_error_handlers(app)

    if app.config["AUTO_CREATE_TABLES"]:
        with app.app_context():
            db.create_all()

    app.logger.info(
        "SplitSend ready (database: %s)",
        make_url(app.config["SQLALCHEMY_DATABASE_URI"]).render_as_string(hide_password=True),
    )
    return app


if __name__ == "__main__":
    create_app().run(debug=True)
