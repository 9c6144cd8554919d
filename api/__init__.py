"""API Package.

FastAPI server for the kiosk ledger.
"""

from api.server import create_app, app

__all__ = [
    "create_app",
    "app",
]
