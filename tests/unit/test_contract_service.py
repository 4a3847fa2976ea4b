"""Tests for ContractApplicationService — drafting, signing, progress and completion."""

from collections.abc import Callable

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.ct_common.errors import (
    AlreadySignedError,
    ContractAlreadyExistsError,
    ContractNotFoundError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from src.ct_contract.application.schemas import ProgressUpdateRequest
from src.ct_hire.domain.models import HireRequest
from src.ct_lifecycle.domain.actor import Actor


async def _draft(contract_service, hire: HireRequest, student: Actor) -> str:
    resp = await contract_service.create_contract(student, hire.id, ["Logo", "Brand sheet"], 14)
    return resp.id


class TestCreateContract:
    async def test_student_drafts_from_accepted_hire(
        self, contract_service, accepted_hire: HireRequest, student: Actor, state
    ) -> None:
        resp = await contract_service.create_contract(
            student, accepted_hire.id, [" Logo ", "", "Brand sheet"], 14, "Two revisions"
        )
        assert resp.status == "DRAFT"
        assert resp.deliverables == ["Logo", "Brand sheet"]
        assert resp.title == "Logo design"
        assert resp.price_cents == 6500
        assert resp.platform_fee_cents == 650
        assert resp.student_payout_cents == 5850
        assert not resp.is_signed_by_buyer and not resp.is_signed_by_student
        assert state.notified("user-buyer") == ["CONTRACT_CREATED"]

    async def test_buyer_cannot_draft(
        self, contract_service, accepted_hire: HireRequest, buyer: Actor
    ) -> None:
        with pytest.raises(ForbiddenError):
            await contract_service.create_contract(buyer, accepted_hire.id, ["Logo"], 14)

    async def test_hire_must_be_accepted(
        self, contract_service, make_hire: Callable[..., HireRequest], student: Actor
    ) -> None:
        hire = make_hire(status="PENDING")
        with pytest.raises(InvalidTransitionError):
            await contract_service.create_contract(student, hire.id, ["Logo"], 14)

    async def test_one_contract_per_hire(
        self, contract_service, accepted_hire: HireRequest, student: Actor
    ) -> None:
        await _draft(contract_service, accepted_hire, student)
        with pytest.raises(ContractAlreadyExistsError):
            await _draft(contract_service, accepted_hire, student)

    @pytest.mark.parametrize(
        ("deliverables", "days"), [([], 14), (["  "], 14), (["Logo"], 0), (["Logo"], 366)]
    )
    async def test_terms_validated(
        self,
        contract_service,
        accepted_hire: HireRequest,
        student: Actor,
        deliverables: list[str],
        days: int,
    ) -> None:
        with pytest.raises(ValidationError):
            await contract_service.create_contract(student, accepted_hire.id, deliverables, days)


class TestSignContract:
    @pytest.fixture
    async def contract_id(
        self, contract_service, accepted_hire: HireRequest, student: Actor
    ) -> str:
        return await _draft(contract_service, accepted_hire, student)

    async def test_first_signature_keeps_draft(
        self, contract_service, contract_id: str, buyer: Actor, state
    ) -> None:
        resp = await contract_service.sign_contract(contract_id, buyer, "B. Buyer")
        assert resp.status == "DRAFT"
        assert resp.is_signed_by_buyer
        assert resp.signed_at is None
        assert "CONTRACT_SIGNED" in state.notified("user-student")

    async def test_second_signature_activates(
        self, contract_service, contract_id: str, buyer: Actor, student: Actor
    ) -> None:
        await contract_service.sign_contract(contract_id, student, "S. Student")
        resp = await contract_service.sign_contract(contract_id, buyer, "B. Buyer")
        assert resp.status == "ACTIVE"
        assert resp.signed_at is not None

    async def test_double_signing_conflicts(
        self, contract_service, contract_id: str, buyer: Actor
    ) -> None:
        await contract_service.sign_contract(contract_id, buyer, "B. Buyer")
        with pytest.raises(AlreadySignedError):
            await contract_service.sign_contract(contract_id, buyer, "B. Buyer")

    async def test_outsider_cannot_sign(
        self, contract_service, contract_id: str, outsider: Actor, admin: Actor
    ) -> None:
        for actor in (outsider, admin):
            with pytest.raises(ForbiddenError):
                await contract_service.sign_contract(contract_id, actor, "X")

    async def test_blank_signature(self, contract_service, contract_id: str, buyer: Actor) -> None:
        with pytest.raises(ValidationError):
            await contract_service.sign_contract(contract_id, buyer, " ")

    async def test_unknown_contract(self, contract_service, buyer: Actor) -> None:
        with pytest.raises(ContractNotFoundError):
            await contract_service.sign_contract("missing", buyer, "B")


class TestProgressAndCompletion:
    @pytest.fixture
    async def active_id(
        self, contract_service, accepted_hire: HireRequest, buyer: Actor, student: Actor
    ) -> str:
        contract_id = await _draft(contract_service, accepted_hire, student)
        await contract_service.sign_contract(contract_id, buyer, "B. Buyer")
        await contract_service.sign_contract(contract_id, student, "S. Student")
        return contract_id

    async def test_progress_on_draft_is_invalid(
        self, contract_service, accepted_hire: HireRequest, student: Actor
    ) -> None:
        contract_id = await _draft(contract_service, accepted_hire, student)
        with pytest.raises(InvalidTransitionError):
            await contract_service.update_progress(contract_id, student, "IN_PROGRESS", "Started")

    async def test_student_posts_progress(
        self, contract_service, active_id: str, student: Actor, state
    ) -> None:
        resp = await contract_service.update_progress(
            active_id, student, "SKETCHES", "First drafts", ["https://files/1.png"]
        )
        assert resp.status == "ACTIVE"
        assert resp.progress_status == "SKETCHES"
        assert [p.attachments for p in resp.progress_updates] == [["https://files/1.png"]]
        assert "PROGRESS_UPDATED" in state.notified("user-buyer")

    async def test_buyer_cannot_post_progress(
        self, contract_service, active_id: str, buyer: Actor
    ) -> None:
        with pytest.raises(ForbiddenError):
            await contract_service.update_progress(active_id, buyer, "X", "Y")

    async def test_student_completes_through_progress(
        self, contract_service, active_id: str, student: Actor, state
    ) -> None:
        resp = await contract_service.update_progress(
            active_id, student, "DONE", "All delivered",
            mark_as_completed=True, completion_notes="Final files uploaded",
        )
        assert resp.status == "COMPLETED"
        assert resp.completion_notes == "Final files uploaded"
        assert resp.completed_at is not None
        assert "CONTRACT_COMPLETED" in state.notified("user-buyer")

    async def test_buyer_completes(
        self, contract_service, active_id: str, buyer: Actor, state
    ) -> None:
        resp = await contract_service.complete_contract(active_id, buyer, "Thanks")
        assert resp.status == "COMPLETED"
        assert "CONTRACT_COMPLETED" in state.notified("user-student")

    async def test_student_cannot_use_complete_endpoint(
        self, contract_service, active_id: str, student: Actor
    ) -> None:
        with pytest.raises(ForbiddenError):
            await contract_service.complete_contract(active_id, student)

    async def test_completed_is_terminal(
        self, contract_service, active_id: str, buyer: Actor, student: Actor
    ) -> None:
        await contract_service.complete_contract(active_id, buyer)
        with pytest.raises(InvalidTransitionError):
            await contract_service.complete_contract(active_id, buyer)
        with pytest.raises(InvalidTransitionError):
            await contract_service.update_progress(active_id, student, "MORE", "Late extra")

    async def test_generic_transition_to_active_is_rejected(
        self, contract_service, coordinator, accepted_hire: HireRequest, student: Actor
    ) -> None:
        contract_id = await _draft(contract_service, accepted_hire, student)
        runs_before = coordinator.runs
        with pytest.raises(ValidationError):
            await contract_service.transition(contract_id, "ACTIVE", student)
        assert coordinator.runs == runs_before

    async def test_get_includes_progress(
        self, contract_service, active_id: str, student: Actor, buyer: Actor, outsider: Actor
    ) -> None:
        await contract_service.update_progress(active_id, student, "A", "one")
        await contract_service.update_progress(active_id, student, "B", "two")
        resp = await contract_service.get_contract(active_id, buyer)
        assert len(resp.progress_updates) == 2
        with pytest.raises(ForbiddenError):
            await contract_service.get_contract(active_id, outsider)


class TestProgressUpdateRequest:
    def test_completion_notes_require_completion(self) -> None:
        with pytest.raises(PydanticValidationError):
            ProgressUpdateRequest(status="X", notes="Y", completion_notes="done")

    def test_completion_notes_with_flag(self) -> None:
        body = ProgressUpdateRequest(
            status="X", notes="Y", mark_as_completed=True, completion_notes="done"
        )
        assert body.mark_as_completed
