"""Application factory for the BruinLease housing marketplace."""

from __future__ import annotations

import logging

import click
from flask import Flask, jsonify
from flask_login import LoginManager
from flask_wtf import CSRFProtect

from .config import BaseConfig, get_config
from .data_access import users_dao
from .data_access.db import init_app as init_db_app
from .models.entities import User
from .services import ratings
from .services.errors import CoreError

csrf = CSRFProtect()
login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id: str) -> User | None:
    """Look up a user for Flask-Login session handling."""
    if not user_id:
        return None
    return users_dao.get_user_by_id(int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"status": "error", "message": "Authentication required"}), 401


def create_app(config_object: type[BaseConfig] | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)

    config_cls = config_object or get_config()
    app.config.from_object(config_cls)
    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    csrf.init_app(app)
    login_manager.init_app(app)
    init_db_app(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Import and register application blueprints."""

    from .controllers import (  # pylint: disable=import-outside-toplevel
        messaging,
        reviews,
    )

    app.register_blueprint(reviews.bp)
    app.register_blueprint(messaging.bp)


def register_error_handlers(app: Flask) -> None:
    """Map core errors and HTTP failures onto the JSON error envelope."""

    @app.errorhandler(CoreError)
    def core_error(error: CoreError) -> tuple:
        if error.status_code >= 500:
            app.logger.error("Unhandled core failure: %s", error.message, exc_info=error)
        return jsonify({"status": "error", "message": error.message}), error.status_code

    @app.errorhandler(404)
    def not_found(error: Exception) -> tuple:
        return jsonify({"status": "error", "message": "We could not locate the resource you requested."}), 404

    @app.errorhandler(405)
    def method_not_allowed(error: Exception) -> tuple:
        return jsonify({"status": "error", "message": "Method not allowed."}), 405

    @app.errorhandler(500)
    def server_error(error: Exception) -> tuple:
        return jsonify({"status": "error", "message": "An unexpected error occurred."}), 500


def register_commands(app: Flask) -> None:
    """Attach maintenance commands to the Flask CLI."""

    @app.cli.command("recalculate-ratings")
    @click.option("--dry-run", is_flag=True, help="Report differences without saving them.")
    def recalculate_ratings_command(dry_run: bool) -> None:
        """Recompute every listing's rating from its reviews."""

        changed = ratings.recompute_all(dry_run=dry_run)
        prefix = "[DRY-RUN] " if dry_run else ""
        for listing_id, stored, actual in changed:
            click.echo(
                f"  {prefix}Listing {listing_id}: rating {stored.average_rating} -> {actual.average_rating}, "
                f"count {stored.review_count} -> {actual.review_count}"
            )
        if dry_run:
            click.echo(f"Dry run completed. {len(changed)} listings would change.")
        else:
            click.echo(f"Recalculation completed. {len(changed)} listings updated.")
