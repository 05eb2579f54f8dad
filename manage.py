"""
manage.py - application entry point and development server.
Run with `python manage.py`, or use the Flask CLI:
  flask --app manage seed-demo
  flask --app manage mark-overdue
  flask --app manage db upgrade
"""
from __future__ import annotations
import os
from flask import Flask
from billtracker import create_app

app: Flask = create_app()

if __name__ == "__main__":
    # allow the port to be overridden from the environment
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_ENV") == "development"
    app.run(host="0.0.0.0", port=port, debug=debug)
