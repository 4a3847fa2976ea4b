"""Global enums — must match the CHECK constraints declared on the ORM models."""

from enum import Enum


class UserRole(str, Enum):
    BUYER = "BUYER"
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class PartyRole(str, Enum):
    """Who the actor is relative to one entity, not their account role."""
    BUYER = "BUYER"
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class EntityKind(str, Enum):
    HIRE_REQUEST = "HIRE_REQUEST"
    CONTRACT = "CONTRACT"
    ORDER = "ORDER"


class HireStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class ContractStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    IN_PROGRESS = "IN_PROGRESS"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DISPUTED = "DISPUTED"


class DisputeStatus(str, Enum):
    OPEN = "OPEN"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"


class DisputeResolution(str, Enum):
    RELEASE = "RELEASE"  # pay the student, order COMPLETED
    REFUND = "REFUND"    # refund the buyer, order CANCELLED


class WalletEntryType(str, Enum):
    # Order money flow (user + system paired)
    PAYMENT_CAPTURE = "PAYMENT_CAPTURE"
    ESCROW_RELEASE = "ESCROW_RELEASE"
    PAYOUT = "PAYOUT"
    PLATFORM_FEE = "PLATFORM_FEE"
    REFUND = "REFUND"
    # Operator corrections
    ADJUSTMENT = "ADJUSTMENT"


class NotificationType(str, Enum):
    HIRE_REQUESTED = "HIRE_REQUESTED"
    HIRE_ACCEPTED = "HIRE_ACCEPTED"
    HIRE_REJECTED = "HIRE_REJECTED"
    HIRE_CANCELLED = "HIRE_CANCELLED"
    CONTRACT_CREATED = "CONTRACT_CREATED"
    CONTRACT_SIGNED = "CONTRACT_SIGNED"
    PROGRESS_UPDATED = "PROGRESS_UPDATED"
    CONTRACT_COMPLETED = "CONTRACT_COMPLETED"
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_STATUS_CHANGED = "ORDER_STATUS_CHANGED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    DISPUTE_RAISED = "DISPUTE_RAISED"
    DISPUTE_RESOLVED = "DISPUTE_RESOLVED"
