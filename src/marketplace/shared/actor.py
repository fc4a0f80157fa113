"""The acting identity threaded through every command.

Authentication happens before a request reaches the domain; commands only
carry the already verified ``(actor_id, actor_role)`` pair.
"""

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    CLIENT = "client"
    SELLER = "seller"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_seller(self) -> bool:
        return self.role == Role.SELLER.value

    def owns(self, owner_id) -> bool:
        return owner_id is not None and str(owner_id) == str(self.id)

    def may_manage(self, owner_id) -> bool:
        """Owner-or-admin check used by every seller-authored mutation."""
        return self.is_admin or self.owns(owner_id)
