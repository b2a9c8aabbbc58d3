"""Pending invitation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from domain.entities.company import CompanyRole


@dataclass
class PendingInvitation:
    """An outstanding invite of an email address into a company.

    Once ``claimed_at`` is set the invitation is terminal.
    """

    email: str
    company_id: UUID
    role: CompanyRole = CompanyRole.MEMBER
    name: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    claimed_at: datetime | None = None
    claimed_by: UUID | None = None

    def __post_init__(self) -> None:
        self.email = self.email.lower().strip()

    @property
    def is_claimed(self) -> bool:
        """Check if the invitation has been redeemed."""
        return self.claimed_at is not None

    def claim(self, user_id: UUID) -> None:
        """Mark the invitation as claimed. No-op if already claimed."""
        if self.is_claimed:
            return
        self.claimed_at = datetime.utcnow()
        self.claimed_by = user_id
