"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  6xxx: Lifecycle (permission, transition, conflict)
  7xxx: Request (validation, lookup)
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


# --- 6xxx: Lifecycle ---

class ForbiddenError(AppError):
    def __init__(self, detail: str = "Access denied") -> None:
        super().__init__(6001, detail, 403)


class InvalidTransitionError(AppError):
    def __init__(self, entity: str, current: str, target: str) -> None:
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(
            6002, f"Invalid {entity} transition from {current} to {target}", 409
        )


class ConflictError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6003, detail, 409)


class OrderAlreadyExistsError(ConflictError):
    def __init__(self, hire_request_id: str) -> None:
        super().__init__(f"An order already exists for hire request {hire_request_id}")


class ContractAlreadyExistsError(ConflictError):
    def __init__(self, hire_request_id: str) -> None:
        super().__init__(f"A contract already exists for hire request {hire_request_id}")


class AlreadySignedError(ConflictError):
    def __init__(self, contract_id: str) -> None:
        super().__init__(f"Contract {contract_id} already signed by this user")


class PendingHireExistsError(ConflictError):
    def __init__(self, service_id: str) -> None:
        super().__init__(f"You already have a pending hire request for service {service_id}")


# --- 7xxx: Request ---

class ValidationError(AppError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            7001,
            f"Validation failed: {field}: {message}",
            422,
            details=[{"field": field, "message": message}],
        )


class NotFoundError(AppError):
    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(7004, f"{entity} not found: {entity_id}", 404)


class HireRequestNotFoundError(NotFoundError):
    def __init__(self, hire_request_id: str) -> None:
        super().__init__("Hire request", hire_request_id)


class ServiceNotFoundError(NotFoundError):
    def __init__(self, service_id: str) -> None:
        super().__init__("Service", service_id)


class ContractNotFoundError(NotFoundError):
    def __init__(self, contract_id: str) -> None:
        super().__init__("Contract", contract_id)


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__("Order", order_id)


class DisputeNotFoundError(NotFoundError):
    def __init__(self, dispute_id: str) -> None:
        super().__init__("Dispute", dispute_id)


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: str) -> None:
        super().__init__("Notification", notification_id)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ExhaustedKeyspaceError(AppError):
    """Every value of a bounded identifier space is taken. Not retriable."""

    def __init__(self, low: int, high: int) -> None:
        self.low = low
        self.high = high
        super().__init__(
            9003,
            f"Identifier space [{low}, {high}] exhausted; widen the numbering scheme",
            503,
        )


class StorageConflictError(AppError):
    """A uniqueness constraint fired despite the allocator. Retriable once."""

    def __init__(self, constraint: str) -> None:
        self.constraint = constraint
        super().__init__(9004, f"Storage conflict on {constraint}", 409)
