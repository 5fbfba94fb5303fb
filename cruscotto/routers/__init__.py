"""
FastAPI routers: HTML pages and the JSON API.

Each module exposes an APIRouter included by the main application (app.py).
"""
