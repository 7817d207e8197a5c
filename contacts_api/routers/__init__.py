"""
FastAPI routers grouped by domain (users, contacts).

Each module exposes an APIRouter included by contacts_api.app.create_app.
"""
