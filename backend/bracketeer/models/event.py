from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

from bracketeer.utils.clock import utcnow

if TYPE_CHECKING:
    from bracketeer.models.match import EventMatch
    from bracketeer.models.registration import EventRegistration


class EventStatus(str, Enum):
    draft = "draft"
    published = "published"
    registration_open = "registration_open"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


# Bracket generation is only offered while entrants are still being collected
# or once play has started (regeneration).
BRACKET_GENERATION_STATUSES = (EventStatus.registration_open.value, EventStatus.in_progress.value)


class Event(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    status: str = Field(default=EventStatus.draft.value, index=True)
    min_participants: int = Field(default=2)
    max_participants: Optional[int] = Field(default=None)

    # Champion (participant id) once the final is decided
    winner_id: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utcnow, sa_type=DateTime(timezone=True), sa_column_kwargs={"onupdate": utcnow}
    )

    # Relationships
    registrations: List["EventRegistration"] = Relationship(back_populates="event")
    matches: List["EventMatch"] = Relationship(back_populates="event")
