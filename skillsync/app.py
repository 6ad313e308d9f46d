"""
Flask application factory for SkillSync.
Sets up configuration, database, migrations, CORS, logging, the resume
pipeline and registers blueprints.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

# Re-export db for scripts that import from skillsync.app
from skillsync.extensions import db, migrate


def _resolve_database_uri() -> str:
    """Resolve SQLAlchemy database URI from environment.

    Supports dual modes:
    - sqlite via `DATABASE_MODE=sqlite` and `DATABASE_DEV`
    - postgres via `DATABASE_MODE=postgres` and `DATABASE_PROD`
    """
    mode = (os.getenv("DATABASE_MODE") or "sqlite").lower()
    if mode == "postgres":
        uri = os.getenv("DATABASE_PROD")
        if not uri:
            raise RuntimeError("DATABASE_PROD must be set when DATABASE_MODE=postgres")
        return uri
    # default sqlite dev path
    return os.getenv("DATABASE_DEV") or "sqlite:///skillsync.db"


def _ensure_instance_dir(app: Flask) -> None:
    """Ensure the Flask instance directory exists (for SQLite)."""
    try:
        Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    except OSError:
        # Non-fatal; continue even if instance dir can't be created
        pass


def _cors_origins() -> list:
    raw = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _configure_logging(app: Flask) -> None:
    """Info level, stderr plus a rotating file, configured once per process."""
    root = logging.getLogger()
    if not root.handlers:
        root.setLevel(logging.INFO)
        formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        sh = logging.StreamHandler()
        sh.setLevel(logging.INFO)
        sh.setFormatter(formatter)
        root.addHandler(sh)
        log_path = os.getenv("SKILLSYNC_LOG", "skillsync.log")
        try:
            fh = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=2)
            fh.setLevel(logging.INFO)
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            app.logger.warning(f"Cannot open log file {log_path}; logging to stderr only")

    if os.getenv("DEBUG_MODE") == "1":
        logging.getLogger("skillsync").setLevel(logging.DEBUG)
    app.logger.setLevel(logging.INFO)


def create_app(
    test_config: Optional[Mapping[str, Any]] = None, pipeline: Any = None
) -> Flask:
    """Create and configure the Flask application."""
    # Load .env for development convenience
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)

    # Base config
    app.config.setdefault("SQLALCHEMY_DATABASE_URI", _resolve_database_uri())
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    app.config.setdefault("SECRET_KEY", os.getenv("SECRET_KEY", "dev-secret-key"))
    if test_config:
        app.config.update(test_config)

    _ensure_instance_dir(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    CORS(
        app,
        resources={r"/api/*": {"origins": _cors_origins()}},
        supports_credentials=True,
    )

    if pipeline is None:
        from skillsync.services.resume_management import ResumePipeline

        pipeline = ResumePipeline()
    app.extensions["resume_pipeline"] = pipeline

    # Whole-request ceiling; the upload gate enforces the per-file limit.
    if app.config.get("MAX_CONTENT_LENGTH") is None:
        app.config["MAX_CONTENT_LENGTH"] = 2 * pipeline.upload_config.max_file_size

    # Register API blueprint
    from skillsync.blueprints.api import api_bp

    app.register_blueprint(api_bp)

    _configure_logging(app)
    return app
