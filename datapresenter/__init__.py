import logging
import os

import click
from flask import Flask, send_from_directory
from flask_cors import CORS

from .auth import auth_bp, bcrypt, duplicate_account, hash_password, jwt
from .config import Config
from .errors import ValidationError, error_response, register_error_handlers
from .measurements import measurements_bp
from .models import User, db
from .seed import seed_database
from .sensors import sensors_bp
from .series import series_bp
from .validation import credentials_payload


def cors_origins(value):
    """CORS_ORIGINS is "*" or a comma-separated list of origins."""
    if isinstance(value, str):
        origins = [origin.strip() for origin in value.split(",") if origin.strip()]
        return "*" if origins == ["*"] else origins
    return value


def create_app(config_class=Config):
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": cors_origins(app.config["CORS_ORIGINS"])}})

    app.register_blueprint(auth_bp)
    app.register_blueprint(series_bp)
    app.register_blueprint(sensors_bp)
    app.register_blueprint(measurements_bp)

    register_error_handlers(app)
    register_frontend(app)
    register_commands(app)
    return app


def register_frontend(app):
    frontend = app.config["FRONTEND_FOLDER"]

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def serve_frontend(path):
        if path == "api" or path.startswith("api/"):
            return error_response("Not found", 404)
        if path != "" and os.path.isfile(os.path.join(frontend, path)):
            return send_from_directory(frontend, path)
        return send_from_directory(frontend, "index.html")


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create the database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("seed-db")
    def seed_db():
        """Load demo users, series, sensors and measurements into an empty database."""
        db.create_all()
        if seed_database(app.config["SEED_ADMIN_PASSWORD"]):
            click.echo("Demo data loaded.")
        else:
            click.echo("Database is not empty, nothing seeded.")

    @app.cli.command("create-user")
    @click.argument("username")
    @click.argument("email")
    @click.argument("password")
    def create_user(username, email, password):
        """Create a user account."""
        try:
            username, email, password = credentials_payload(
                {"username": username, "email": email, "password": password})
        except ValidationError as e:
            raise click.ClickException(e.message)
        taken = duplicate_account(username, email)
        if taken:
            raise click.ClickException(taken)
        db.session.add(User(username=username, email=email,
                            password_hash=hash_password(password)))
        db.session.commit()
        click.echo(f"Created user {username}")
