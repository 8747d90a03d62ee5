"""
Shared FastAPI dependencies.
"""

from fastapi import Request

from cardtracker.services.tracker import CardTracker


def get_tracker(request: Request) -> CardTracker:
    """The application's single CardTracker, created in the app lifespan."""
    tracker: CardTracker = request.app.state.tracker
    return tracker
