"""ar_api -- HTTP surface (FastAPI) for the AR dashboard."""

from ar_api.app import create_app

__all__ = ["create_app"]
