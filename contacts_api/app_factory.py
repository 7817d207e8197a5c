"""Entry point for the FastAPI app (``uvicorn contacts_api.app_factory:create_app --factory``)."""
from contacts_api.app import create_app

__all__ = ["create_app"]
