"""Actor — the authenticated caller of a lifecycle operation."""

from dataclasses import dataclass

from src.ct_common.enums import PartyRole, UserRole


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str  # UserRole value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def party_roles(self, buyer_id: str, student_id: str) -> frozenset[PartyRole]:
        """Roles this actor holds on an entity with the given parties.

        A user can only hold both BUYER and STUDENT on corrupt data (self-hire is
        rejected at creation), so no precedence is applied.
        """
        roles: set[PartyRole] = set()
        if self.user_id == buyer_id:
            roles.add(PartyRole.BUYER)
        if self.user_id == student_id:
            roles.add(PartyRole.STUDENT)
        if self.is_admin:
            roles.add(PartyRole.ADMIN)
        return frozenset(roles)
