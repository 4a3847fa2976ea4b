"""Transition tables for hire requests, contracts and orders."""

from src.ct_common.enums import (
    ContractStatus,
    DisputeStatus,
    HireStatus,
    OrderStatus,
    PartyRole,
)
from src.ct_lifecycle.domain.state_machine import Edge, StateMachine, edges

BUYER = PartyRole.BUYER
STUDENT = PartyRole.STUDENT
ADMIN = PartyRole.ADMIN

HIRE_REQUEST_MACHINE = StateMachine(
    "hire request",
    HireStatus,
    [
        Edge(HireStatus.PENDING, HireStatus.ACCEPTED, frozenset({STUDENT})),
        Edge(HireStatus.PENDING, HireStatus.REJECTED, frozenset({STUDENT})),
        *edges([HireStatus.PENDING, HireStatus.ACCEPTED], HireStatus.CANCELLED, BUYER, STUDENT),
    ],
)

CONTRACT_MACHINE = StateMachine(
    "contract",
    ContractStatus,
    [
        Edge(ContractStatus.DRAFT, ContractStatus.ACTIVE, frozenset({BUYER, STUDENT})),
        Edge(ContractStatus.ACTIVE, ContractStatus.COMPLETED, frozenset({BUYER, STUDENT})),
    ],
)

_OPEN_ORDER_STATES = [
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.IN_PROGRESS,
    OrderStatus.DELIVERED,
]

ORDER_MACHINE = StateMachine(
    "order",
    OrderStatus,
    [
        Edge(OrderStatus.PENDING, OrderStatus.PAID, frozenset({BUYER})),
        Edge(OrderStatus.PAID, OrderStatus.IN_PROGRESS, frozenset({STUDENT})),
        Edge(OrderStatus.IN_PROGRESS, OrderStatus.DELIVERED, frozenset({STUDENT})),
        Edge(OrderStatus.DELIVERED, OrderStatus.COMPLETED, frozenset({BUYER})),
        *edges(_OPEN_ORDER_STATES, OrderStatus.CANCELLED, BUYER, ADMIN),
        *edges(_OPEN_ORDER_STATES, OrderStatus.DISPUTED, BUYER, STUDENT),
        # Dispute resolution
        Edge(OrderStatus.DISPUTED, OrderStatus.COMPLETED, frozenset({ADMIN})),
        Edge(OrderStatus.DISPUTED, OrderStatus.CANCELLED, frozenset({ADMIN})),
    ],
)

DISPUTE_MACHINE = StateMachine(
    "dispute",
    DisputeStatus,
    [
        Edge(DisputeStatus.OPEN, DisputeStatus.UNDER_REVIEW, frozenset({ADMIN})),
        *edges([DisputeStatus.OPEN, DisputeStatus.UNDER_REVIEW], DisputeStatus.RESOLVED, ADMIN),
    ],
)
