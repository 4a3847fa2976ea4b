"""FastAPI dependencies for the objects the application factory builds.

create_app() stores the TransactionCoordinator and NotificationPublisher on
app.state; routers pull them from the request instead of importing globals.
Tests swap them via app.dependency_overrides.
"""

from typing import TYPE_CHECKING

from fastapi import Request

from src.ct_common.transaction import TransactionCoordinator

if TYPE_CHECKING:
    from src.ct_notification.application.publisher import NotificationPublisher


def get_coordinator(request: Request) -> TransactionCoordinator:
    return request.app.state.coordinator  # type: ignore[no-any-return]


def get_publisher(request: Request) -> "NotificationPublisher":
    return request.app.state.publisher  # type: ignore[no-any-return]
