"""Tests for ct_common.enums — values must match the ORM CHECK constraints."""

from src.ct_common.enums import (
    ContractStatus,
    DisputeResolution,
    DisputeStatus,
    EntityKind,
    HireStatus,
    OrderStatus,
    UserRole,
    WalletEntryType,
)
from src.ct_contract.infrastructure.db_models import ContractORM
from src.ct_hire.infrastructure.db_models import HireRequestORM
from src.ct_order.infrastructure.db_models import OrderORM


def _check_sql(model: type, name: str) -> str:
    for constraint in model.__table__.constraints:
        if constraint.name == name:
            return str(constraint.sqltext)
    raise AssertionError(f"{model.__name__} has no constraint {name}")


class TestAllEnumsAreStr:
    def test_order_status_is_str(self) -> None:
        assert isinstance(OrderStatus.PAID, str)
        assert OrderStatus.PAID == "PAID"

    def test_entity_kind_values(self) -> None:
        assert {k.value for k in EntityKind} == {"HIRE_REQUEST", "CONTRACT", "ORDER"}

    def test_user_roles(self) -> None:
        assert {r.value for r in UserRole} == {"BUYER", "STUDENT", "ADMIN"}


class TestStatusSets:
    def test_hire_statuses(self) -> None:
        assert {s.value for s in HireStatus} == {"PENDING", "ACCEPTED", "REJECTED", "CANCELLED"}

    def test_contract_statuses(self) -> None:
        assert {s.value for s in ContractStatus} == {"DRAFT", "ACTIVE", "COMPLETED"}

    def test_order_statuses(self) -> None:
        assert len(OrderStatus) == 7

    def test_dispute_values(self) -> None:
        assert {s.value for s in DisputeStatus} == {"OPEN", "UNDER_REVIEW", "RESOLVED"}
        assert {r.value for r in DisputeResolution} == {"RELEASE", "REFUND"}

    def test_wallet_entry_types(self) -> None:
        assert WalletEntryType.ADJUSTMENT == "ADJUSTMENT"


class TestCheckConstraintsMatchEnums:
    def test_order_status_check(self) -> None:
        sql = _check_sql(OrderORM, "ck_orders_status")
        for status in OrderStatus:
            assert f"'{status.value}'" in sql

    def test_hire_status_check(self) -> None:
        sql = _check_sql(HireRequestORM, "ck_hire_requests_status")
        for status in HireStatus:
            assert f"'{status.value}'" in sql

    def test_contract_status_check(self) -> None:
        sql = _check_sql(ContractORM, "ck_contracts_status")
        for status in ContractStatus:
            assert f"'{status.value}'" in sql
