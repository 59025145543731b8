"""Dependency providers for the records context.

Components are built once by the application lifespan and kept on
``app.state``; these providers hand them to route handlers.
"""

from fastapi import Request

from records.application.services import RecordService


def get_record_service(request: Request) -> RecordService:
    """Get the RecordService built at startup.

    Returns:
        The application-wide RecordService instance
    """
    return request.app.state.record_service
