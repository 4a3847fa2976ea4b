"""Tests for HireApplicationService."""

from collections.abc import Callable

import pytest

from src.ct_common.errors import (
    ForbiddenError,
    HireRequestNotFoundError,
    InvalidTransitionError,
    PendingHireExistsError,
    ServiceNotFoundError,
    ValidationError,
)
from src.ct_hire.domain.models import HireRequest, ServiceListing
from src.ct_lifecycle.domain.actor import Actor


class TestCreateHireRequest:
    async def test_defaults_to_service_price(self, hire_service, buyer: Actor, state) -> None:
        resp = await hire_service.create_hire_request(buyer, "svc-1", "Need a logo")
        assert resp.status == "PENDING"
        assert resp.price_cents == 6500
        assert resp.price_display == "$65.00"
        assert resp.student_id == "user-student"
        assert state.notified("user-student") == ["HIRE_REQUESTED"]

    async def test_negotiated_price(self, hire_service, buyer: Actor) -> None:
        resp = await hire_service.create_hire_request(buyer, "svc-1", price_cents=4000)
        assert resp.price_cents == 4000

    async def test_negative_price_rejected(self, hire_service, buyer: Actor) -> None:
        with pytest.raises(ValidationError):
            await hire_service.create_hire_request(buyer, "svc-1", price_cents=-5)

    async def test_free_listing_needs_a_negotiated_price(
        self, hire_service, buyer: Actor, state
    ) -> None:
        state.services["svc-free"] = ServiceListing(
            id="svc-free", owner_id="user-student", title="Free chat", price_cents=0,
            is_active=True,
        )
        with pytest.raises(ValidationError) as exc_info:
            await hire_service.create_hire_request(buyer, "svc-free")
        assert exc_info.value.details[0]["field"] == "price_cents"
        assert state.hires == {}

        resp = await hire_service.create_hire_request(buyer, "svc-free", price_cents=2500)
        assert resp.price_cents == 2500

    async def test_inactive_service_not_found(self, hire_service, buyer: Actor) -> None:
        with pytest.raises(ServiceNotFoundError):
            await hire_service.create_hire_request(buyer, "svc-off")

    async def test_cannot_hire_yourself(self, hire_service, student: Actor, state) -> None:
        with pytest.raises(ForbiddenError):
            await hire_service.create_hire_request(student, "svc-1")
        assert state.hires == {}

    async def test_one_pending_request_per_service(self, hire_service, buyer: Actor) -> None:
        await hire_service.create_hire_request(buyer, "svc-1")
        with pytest.raises(PendingHireExistsError):
            await hire_service.create_hire_request(buyer, "svc-1")


class TestHireTransitions:
    @pytest.fixture
    async def hire_id(self, hire_service, buyer: Actor) -> str:
        return (await hire_service.create_hire_request(buyer, "svc-1")).id

    async def test_student_accepts(self, hire_service, hire_id: str, student: Actor, state) -> None:
        resp = await hire_service.accept(hire_id, student)
        assert resp.status == "ACCEPTED"
        assert state.notified("user-buyer") == ["HIRE_ACCEPTED"]

    async def test_buyer_cannot_accept(
        self, hire_service, hire_id: str, buyer: Actor, state
    ) -> None:
        with pytest.raises(ForbiddenError):
            await hire_service.accept(hire_id, buyer)
        assert state.hires[hire_id].status == "PENDING"

    async def test_rejected_is_terminal(
        self, hire_service, hire_id: str, student: Actor, buyer: Actor
    ) -> None:
        await hire_service.reject(hire_id, student)
        with pytest.raises(InvalidTransitionError):
            await hire_service.accept(hire_id, student)
        with pytest.raises(InvalidTransitionError):
            await hire_service.cancel(hire_id, buyer)

    async def test_cancel_notifies_other_party(
        self, hire_service, hire_id: str, buyer: Actor, state
    ) -> None:
        await hire_service.cancel(hire_id, buyer)
        assert "HIRE_CANCELLED" in state.notified("user-student")
        assert "HIRE_CANCELLED" not in state.notified("user-buyer")

    async def test_outsider_forbidden(self, hire_service, hire_id: str, outsider: Actor) -> None:
        with pytest.raises(ForbiddenError):
            await hire_service.cancel(hire_id, outsider)

    async def test_unknown_hire(self, hire_service, student: Actor) -> None:
        with pytest.raises(HireRequestNotFoundError):
            await hire_service.accept("missing", student)

    async def test_accepted_unconsumed_can_be_cancelled(
        self, hire_service, accepted_hire: HireRequest, student: Actor
    ) -> None:
        assert (await hire_service.cancel(accepted_hire.id, student)).status == "CANCELLED"

    async def test_accepted_with_order_cannot_be_cancelled(
        self, hire_service, order_service, accepted_hire: HireRequest, buyer: Actor, state
    ) -> None:
        await order_service.create_order(accepted_hire.id, buyer)
        with pytest.raises(InvalidTransitionError):
            await hire_service.cancel(accepted_hire.id, buyer)
        assert state.hires[accepted_hire.id].status == "ACCEPTED"


class TestDeleteHireRequest:
    async def test_buyer_deletes_pending(self, hire_service, buyer: Actor, state) -> None:
        hire = await hire_service.create_hire_request(buyer, "svc-1")
        await hire_service.delete_hire_request(hire.id, buyer)
        assert hire.id not in state.hires

    async def test_student_cannot_delete(self, hire_service, buyer: Actor, student: Actor) -> None:
        hire = await hire_service.create_hire_request(buyer, "svc-1")
        with pytest.raises(ForbiddenError):
            await hire_service.delete_hire_request(hire.id, student)

    async def test_accepted_cannot_be_deleted(
        self, hire_service, accepted_hire: HireRequest, buyer: Actor
    ) -> None:
        with pytest.raises(InvalidTransitionError):
            await hire_service.delete_hire_request(accepted_hire.id, buyer)


class TestHireQueries:
    async def test_party_and_admin_can_read(
        self,
        hire_service,
        accepted_hire: HireRequest,
        student: Actor,
        admin: Actor,
        outsider: Actor,
    ) -> None:
        for reader in (student, admin):
            resp = await hire_service.get_hire_request(accepted_hire.id, reader)
            assert resp.id == accepted_hire.id
        with pytest.raises(ForbiddenError):
            await hire_service.get_hire_request(accepted_hire.id, outsider)

    async def test_list_filters_by_status(
        self, hire_service, make_hire: Callable[..., HireRequest], buyer: Actor
    ) -> None:
        make_hire(status="PENDING")
        make_hire(status="ACCEPTED")
        resp = await hire_service.list_hire_requests(buyer, "ACCEPTED", None, 20)
        assert [h.status for h in resp.items] == ["ACCEPTED"]

    async def test_list_unknown_status(self, hire_service, buyer: Actor) -> None:
        with pytest.raises(ValidationError):
            await hire_service.list_hire_requests(buyer, "ARCHIVED", None, 20)
