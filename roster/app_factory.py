"""Entry point for uvicorn/gunicorn (roster.app_factory:app)."""
from roster.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
