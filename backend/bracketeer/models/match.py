from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from bracketeer.utils.clock import utcnow

if TYPE_CHECKING:
    from bracketeer.models.event import Event


class MatchStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class MatchState(str, Enum):
    """Explicit lifecycle of a bracket match, derived from its slots and winner."""

    unscheduled = "unscheduled"  # both slots empty
    awaiting_opponent = "awaiting_opponent"  # one slot seated, other feeder undecided
    scheduled = "scheduled"  # both players known, no winner yet
    bye = "bye"  # single player, auto-completed
    decided = "decided"  # both players known, winner recorded


def derive_match_state(
    player1_id: Optional[str],
    player2_id: Optional[str],
    winner_id: Optional[str],
    status: str,
) -> MatchState:
    """Classify a match from its raw columns.

    A completed row whose winner is not one of its seated players is treated by
    its slots alone, so the both-empty "completed" data bug reads as unscheduled.
    """
    seated = [p for p in (player1_id, player2_id) if p is not None]
    if status == MatchStatus.completed.value and winner_id is not None and winner_id in seated:
        return MatchState.decided if len(seated) == 2 else MatchState.bye
    if not seated:
        return MatchState.unscheduled
    if len(seated) == 1:
        return MatchState.awaiting_opponent
    return MatchState.scheduled


class EventMatch(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("event_id", "round_number", "match_order", name="uq_event_round_order"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    round_number: int  # 1 = final, grows toward earlier rounds
    match_order: int  # 1-based, left to right within the round

    # Participant slots (nullable - empty until seeded or advanced; bye in first round)
    player1_id: Optional[str] = Field(default=None)
    player2_id: Optional[str] = Field(default=None)
    winner_id: Optional[str] = Field(default=None)

    player1_score: Optional[int] = Field(default=None)
    player2_score: Optional[int] = Field(default=None)
    scheduled_time: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    status: str = Field(default=MatchStatus.pending.value)  # "pending" | "in_progress" | "completed"
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    # Relationships
    event: "Event" = Relationship(back_populates="matches")

    @property
    def state(self) -> MatchState:
        return derive_match_state(self.player1_id, self.player2_id, self.winner_id, self.status)

    @property
    def effective_status(self) -> str:
        """Stored status, except that an empty match always reads as pending."""
        if self.state == MatchState.unscheduled:
            return MatchStatus.pending.value
        return self.status
