"""Flask application factory."""

import logging

from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, login_manager

logger = logging.getLogger(__name__)


def seed_db():
    """Create default achievements if they don't exist.

    Also ensures all models are imported so their tables are created.
    """
    from .models import Achievement, SimulationCompletion, User, UserAchievement  # noqa: F401
    from .services.achievements import seed_achievements

    seed_achievements()


def register_error_handlers(app: Flask) -> None:
    """JSON bodies for HTTP errors raised outside the blueprints."""

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return jsonify({"error": error.description}), error.code

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required."}), 401


def create_app(config_class=Config):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Ensure instance folder exists
    config_class.INSTANCE_PATH.mkdir(parents=True, exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # Register blueprints
    from .routes import auth, leaderboard, quizzes, simulations, whatsapp

    app.register_blueprint(auth.bp)
    app.register_blueprint(simulations.bp)
    app.register_blueprint(quizzes.bp)
    app.register_blueprint(leaderboard.bp)
    app.register_blueprint(whatsapp.bp)

    register_error_handlers(app)

    @app.route("/health")
    def health():
        """Liveness plus a database ping."""
        try:
            db.session.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            logger.warning(f"Health check database ping failed: {e}")
            database = "unavailable"
        return jsonify({"status": "ok", "database": database})

    # Create database tables and seed
    with app.app_context():
        db.create_all()
        seed_db()

    logger.info(f"civicsim webapp ready (storage backend: {app.config['STORAGE_BACKEND']})")
    return app


def main():
    """Entry point for `civicsim-web` command."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    app = create_app()
    app.run(debug=True, host="0.0.0.0", port=5000)


if __name__ == "__main__":
    main()
