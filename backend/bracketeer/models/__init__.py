from bracketeer.models.event import Event, EventStatus
from bracketeer.models.match import EventMatch, MatchState, MatchStatus
from bracketeer.models.registration import EventRegistration, RegistrationStatus

__all__ = [
    "Event",
    "EventStatus",
    "EventMatch",
    "MatchState",
    "MatchStatus",
    "EventRegistration",
    "RegistrationStatus",
]
