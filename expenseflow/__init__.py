from datetime import datetime
from flask import Flask, jsonify
from .extensions import db, migrate, login_manager
from .config import Config
from .cli import register_commands
from .errors import register_error_handlers
from .logs import configure_logging

from .blueprints.auth.routes import auth_bp
from .blueprints.transactions.routes import transactions_bp
from .blueprints.analytics.routes import analytics_bp
from .blueprints.budgets.routes import budgets_bp
from .blueprints.data.routes import data_bp


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Ensure tables exist for a smooth first run
    with app.app_context():
        db.create_all()

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(budgets_bp)
    app.register_blueprint(data_bp)

    register_error_handlers(app)
    register_commands(app)

    @app.route("/health")
    def health():
        return jsonify({"status": "healthy", "timestamp": datetime.utcnow().isoformat() + "Z"})

    return app
