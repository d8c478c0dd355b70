from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from bracketeer.utils.clock import utcnow

if TYPE_CHECKING:
    from bracketeer.models.event import Event


class RegistrationStatus(str, Enum):
    registered = "registered"
    confirmed = "confirmed"
    cancelled = "cancelled"
    no_show = "no_show"


# Registrations that count as bracket entrants
ACTIVE_REGISTRATION_STATUSES = (RegistrationStatus.registered.value, RegistrationStatus.confirmed.value)


class EventRegistration(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("event_id", "user_id", name="uq_event_registration_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    user_id: str  # Opaque participant id owned by the identity provider
    registered_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    status: str = Field(default=RegistrationStatus.registered.value)
    bracket_seed: Optional[int] = Field(default=None)  # 1-based rank (1=strongest)

    # Relationships
    event: "Event" = Relationship(back_populates="registrations")
