"""LifecycleService — one entry point for status changes on any entity.

Dispatches ``transition(entity_id, entity_kind, target_state, actor)`` to the
owning module's service, which runs the state-machine check, the write and
any money or notification side effects inside one atomic unit.
"""

from pydantic import BaseModel

from src.ct_common.enums import EntityKind
from src.ct_common.errors import ValidationError
from src.ct_contract.application.service import ContractApplicationService
from src.ct_hire.application.service import HireApplicationService
from src.ct_lifecycle.domain.actor import Actor
from src.ct_lifecycle.domain.rules import CONTRACT_MACHINE, HIRE_REQUEST_MACHINE, ORDER_MACHINE
from src.ct_lifecycle.domain.state_machine import StateMachine, state_value
from src.ct_order.application.service import OrderApplicationService

_MACHINES: dict[str, StateMachine] = {
    EntityKind.HIRE_REQUEST.value: HIRE_REQUEST_MACHINE,
    EntityKind.CONTRACT.value: CONTRACT_MACHINE,
    EntityKind.ORDER.value: ORDER_MACHINE,
}


class LifecycleService:
    def __init__(
        self,
        hires: HireApplicationService,
        contracts: ContractApplicationService,
        orders: OrderApplicationService,
    ) -> None:
        self._hires = hires
        self._contracts = contracts
        self._orders = orders

    async def transition(
        self, entity_id: str, entity_kind: str, target_state: str, actor: Actor
    ) -> BaseModel:
        kind = state_value(entity_kind)
        machine = _MACHINES.get(kind)
        if machine is None:
            raise ValidationError("entity_kind", f"unknown entity kind {kind}")
        target = state_value(target_state)
        if target not in machine.states:
            raise ValidationError("target_state", f"{target} is not a {machine.entity} status")

        if kind == EntityKind.HIRE_REQUEST:
            return await self._hires.transition(entity_id, target, actor)
        if kind == EntityKind.CONTRACT:
            return await self._contracts.transition(entity_id, target, actor)
        return await self._orders.transition(entity_id, target, actor)
