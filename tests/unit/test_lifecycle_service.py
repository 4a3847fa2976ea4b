"""Tests for LifecycleService — dispatch of generic transition requests."""

import pytest

from src.ct_common.enums import EntityKind
from src.ct_common.errors import ForbiddenError, InvalidTransitionError, ValidationError
from src.ct_hire.domain.models import HireRequest
from src.ct_lifecycle.application.service import LifecycleService
from src.ct_lifecycle.domain.actor import Actor


@pytest.fixture
def lifecycle(hire_service, contract_service, order_service) -> LifecycleService:
    return LifecycleService(hire_service, contract_service, order_service)


class TestLifecycleDispatch:
    async def test_hire_request(
        self, lifecycle, hire_service, buyer: Actor, student: Actor
    ) -> None:
        hire = await hire_service.create_hire_request(buyer, "svc-1")
        resp = await lifecycle.transition(hire.id, EntityKind.HIRE_REQUEST, "ACCEPTED", student)
        assert resp.status == "ACCEPTED"

    async def test_order(
        self, lifecycle, order_service, accepted_hire: HireRequest, buyer: Actor, state
    ) -> None:
        order = await order_service.create_order(accepted_hire.id, buyer)
        resp = await lifecycle.transition(order.id, "ORDER", "PAID", buyer)
        assert resp.status == "PAID"
        assert state.orders[order.id].paid_at is not None

    async def test_contract_completion(
        self,
        lifecycle,
        contract_service,
        accepted_hire: HireRequest,
        buyer: Actor,
        student: Actor,
    ) -> None:
        contract = await contract_service.create_contract(student, accepted_hire.id, ["Logo"], 7)
        await contract_service.sign_contract(contract.id, buyer, "B")
        await contract_service.sign_contract(contract.id, student, "S")
        resp = await lifecycle.transition(contract.id, "CONTRACT", "COMPLETED", buyer)
        assert resp.status == "COMPLETED"

    async def test_unknown_kind(self, lifecycle, buyer: Actor) -> None:
        with pytest.raises(ValidationError):
            await lifecycle.transition("x", "INVOICE", "PAID", buyer)

    async def test_target_from_another_machine(
        self, lifecycle, buyer: Actor, coordinator
    ) -> None:
        with pytest.raises(ValidationError):
            await lifecycle.transition("x", "HIRE_REQUEST", "PAID", buyer)
        # Rejected before any transaction was opened
        assert coordinator.runs == 0

    async def test_errors_from_owner_propagate(
        self, lifecycle, order_service, accepted_hire: HireRequest, buyer: Actor, student: Actor
    ) -> None:
        order = await order_service.create_order(accepted_hire.id, buyer)
        with pytest.raises(ForbiddenError):
            await lifecycle.transition(order.id, "ORDER", "PAID", student)
        with pytest.raises(InvalidTransitionError):
            await lifecycle.transition(order.id, "ORDER", "COMPLETED", buyer)
