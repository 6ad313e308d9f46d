#!/usr/bin/env python3
"""
WSGI entry point for SkillSync (e.g. ``gunicorn wsgi:application``).
Tables are managed by Flask-Migrate: run ``flask --app wsgi db upgrade`` first.
"""

from skillsync.app import create_app

application = create_app()

if __name__ == "__main__":
    application.run(host="127.0.0.1", port=5000)
