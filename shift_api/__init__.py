import logging
import os
from datetime import timedelta

import click
from flask import Flask
from flask_cors import CORS

from shift_api.extensions import db, migrate, jwt, normalize_db_url, engine_options
from shift_api.common.errors import register_error_handlers
from shift_api.models import load_all


def create_app(config_object: str | None = None):
    app = Flask(__name__)

    # Basic inline config (defaults)
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=int(os.getenv("JWT_ACCESS_MINUTES", "1440")))
    app.config["JWT_REFRESH_TOKEN_EXPIRES"] = timedelta(days=7)
    app.config["JWT_DECODE_LEEWAY"] = 120  # clock skew
    app.config["JWT_TOKEN_LOCATION"] = ["headers", "cookies"]
    app.config["JWT_COOKIE_SECURE"] = os.getenv("JWT_COOKIE_SECURE", "0") == "1"
    app.config["JWT_COOKIE_CSRF_PROTECT"] = os.getenv("JWT_COOKIE_CSRF_PROTECT", "1") == "1"
    app.config["SQLALCHEMY_DATABASE_URI"] = normalize_db_url(
        os.getenv("DATABASE_URL", "sqlite:///shift_roster.db")
    )
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["CORS_ORIGINS"] = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    app.config["REPORT_WINDOW_DAYS"] = int(os.getenv("REPORT_WINDOW_DAYS", "30"))
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO").upper()

    if config_object:
        try:
            app.config.from_object(config_object)
        except Exception as e:
            # Just log and continue with defaults
            app.logger.warning("Could not import config object %r: %s", config_object, e)

    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS", engine_options(app.config["SQLALCHEMY_DATABASE_URI"])
    )

    level = getattr(logging, app.config["LOG_LEVEL"], logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)
    logging.getLogger("shift_api").setLevel(level)

    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True)

    # Extensions
    db.init_app(app)
    register_error_handlers(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    # Ensure models are loaded so metadata is complete
    with app.app_context():
        load_all()

    # Blueprints
    from shift_api.blueprints.health import bp as health_bp
    from shift_api.blueprints.auth import bp as auth_bp
    from shift_api.blueprints.users import bp as users_bp
    from shift_api.blueprints.employees import bp as employees_bp
    from shift_api.blueprints.shifts import bp as shifts_bp
    from shift_api.blueprints.shift_assignments import bp as shift_assignments_bp
    from shift_api.blueprints.reports import bp as reports_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(shifts_bp)
    app.register_blueprint(shift_assignments_bp)
    app.register_blueprint(reports_bp)

    # ----------------- CLI COMMANDS -----------------

    @app.cli.command("init-db")
    @click.option("--admin-password", default="admin123", show_default=True, help="Password for the default admin")
    def init_db_cmd(admin_password: str):
        """Create all tables and the default admin user."""
        from shift_api.models.user import User

        db.create_all()
        if User.query.filter_by(username="admin").first():
            click.echo("Admin user already exists")
            return
        u = User(username="admin", role="admin")
        u.set_password(admin_password)
        db.session.add(u)
        db.session.commit()
        click.echo("Created admin user: admin")

    @app.cli.command("create-user")
    @click.argument("username")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--role", type=click.Choice(["admin", "user"]), default="user", show_default=True)
    def create_user_cmd(username: str, password: str, role: str):
        """Create a login user."""
        from shift_api.models.user import User

        if User.query.filter_by(username=username).first():
            raise click.ClickException(f"User {username!r} already exists")
        u = User(username=username, role=role)
        u.set_password(password)
        db.session.add(u)
        db.session.commit()
        click.echo(f"Created user {username} ({role})")

    return app
