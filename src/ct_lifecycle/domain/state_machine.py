"""Table-driven status lifecycle with actor guards.

A StateMachine is a set of edges (source, target, permitted party roles).
``check`` validates one requested transition:

  1. the edge must exist from the current state  → InvalidTransitionError
  2. the actor must hold a permitted party role  → ForbiddenError

The edge check runs first, so a terminal entity answers every request with
InvalidTransitionError no matter who asks.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from src.ct_common.enums import PartyRole
from src.ct_common.errors import ForbiddenError, InvalidTransitionError


def state_value(state: str) -> str:
    """Plain string for an enum member or a raw status string."""
    return state.value if isinstance(state, Enum) else state


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    actors: frozenset[PartyRole]


def edges(
    sources: Iterable[str], target: str, *actors: PartyRole
) -> list[Edge]:
    """Fan one target out over several source states."""
    return [Edge(state_value(s), state_value(target), frozenset(actors)) for s in sources]


class StateMachine:
    def __init__(self, entity: str, states: Iterable[str], transitions: Iterable[Edge]) -> None:
        self.entity = entity
        self.states = frozenset(state_value(s) for s in states)
        self._edges: dict[tuple[str, str], Edge] = {}
        for edge in transitions:
            edge = Edge(state_value(edge.source), state_value(edge.target), edge.actors)
            if edge.source not in self.states or edge.target not in self.states:
                raise ValueError(f"{entity}: edge {edge.source}->{edge.target} uses unknown state")
            self._edges[(edge.source, edge.target)] = edge

    @property
    def terminal_states(self) -> frozenset[str]:
        sources = {source for source, _ in self._edges}
        return frozenset(self.states - sources)

    def targets_from(self, current: str) -> frozenset[str]:
        current = state_value(current)
        return frozenset(t for (s, t) in self._edges if s == current)

    def edge(self, current: str, target: str) -> Edge:
        found = self._edges.get((state_value(current), state_value(target)))
        if found is None:
            raise InvalidTransitionError(self.entity, state_value(current), state_value(target))
        return found

    def check(self, current: str, target: str, roles: frozenset[PartyRole]) -> Edge:
        found = self.edge(current, target)
        if not roles & found.actors:
            raise ForbiddenError(
                f"Not permitted to move {self.entity} from {state_value(current)} to {state_value(target)}"
            )
        return found
