"""Entry point for uvicorn/gunicorn."""
from cruscotto.app import app, create_app

__all__ = ["app", "create_app"]
