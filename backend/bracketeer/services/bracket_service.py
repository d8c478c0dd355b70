"""
Persisted bracket generation and reads.

Generation replaces the full match set of an event in a single transaction:
every existing match is deleted, then the planned bracket (bye winners already
seated) is inserted. Regeneration discards prior results unconditionally.
"""
import logging
import random
from typing import Dict, List, Optional, Sequence

from sqlmodel import Session, select

from bracketeer.models.event import Event, EventStatus
from bracketeer.models.match import EventMatch, MatchStatus
from bracketeer.models.registration import ACTIVE_REGISTRATION_STATUSES, EventRegistration
from bracketeer.services import bracket_math
from bracketeer.services.bracket_errors import InsufficientParticipants
from bracketeer.services.bracket_tree import plan_bracket
from bracketeer.services.seeding import Participant

logger = logging.getLogger(__name__)


def load_participants(session: Session, event_id: int) -> List[Participant]:
    """Active registrations of an event as bracket participants (registration order)."""
    registrations = session.exec(
        select(EventRegistration)
        .where(
            EventRegistration.event_id == event_id,
            EventRegistration.status.in_(ACTIVE_REGISTRATION_STATUSES),
        )
        .order_by(EventRegistration.registered_at, EventRegistration.id)
    ).all()
    return [
        Participant(participant_id=r.user_id, registered_at=r.registered_at, seed=r.bracket_seed)
        for r in registrations
    ]


def _delete_event_matches(session: Session, event_id: int) -> int:
    existing = session.exec(select(EventMatch).where(EventMatch.event_id == event_id)).all()
    for match in existing:
        session.delete(match)
    # Deletes must reach the DB before inserts reuse (event_id, round_number, match_order)
    session.flush()
    return len(existing)


def generate_bracket(
    session: Session,
    event_id: int,
    participants: Sequence[Participant],
    seed_randomly: bool,
    rng: Optional[random.Random] = None,
) -> List[EventMatch]:
    """
    Generate (or regenerate) the bracket of an event.

    Raises:
        InsufficientParticipants if fewer than 2 participants
        DuplicateParticipant if a participant id repeats

    Returns:
        Inserted matches, first round played first, match_order ascending
    """
    try:
        plan = plan_bracket(participants, seed_randomly, rng)
        replaced = _delete_event_matches(session, event_id)
        rows = [
            EventMatch(
                event_id=event_id,
                round_number=node.round_number,
                match_order=node.match_order,
                player1_id=node.player1_id,
                player2_id=node.player2_id,
                winner_id=node.winner_id,
                status=node.status,
            )
            for node in plan.all_nodes()
        ]
        session.add_all(rows)
        session.commit()
    except Exception:
        session.rollback()
        raise

    for row in rows:
        session.refresh(row)

    logger.info(
        "Generated bracket for event %d: %d participants, %d rounds, %d byes, %d matches (replaced %d)",
        event_id,
        plan.participant_count,
        plan.total_rounds,
        plan.bye_count,
        len(rows),
        replaced,
    )
    return rows


def generate_event_bracket(
    session: Session,
    event: Event,
    seed_randomly: bool,
    rng: Optional[random.Random] = None,
) -> List[EventMatch]:
    """
    Generate the bracket of an event from its active registrations.

    Enforces max(2, event.min_participants), moves the event to in_progress
    and clears any previously recorded champion in the same transaction.
    """
    participants = load_participants(session, event.id)
    required = max(2, event.min_participants or 0)
    if len(participants) < required:
        raise InsufficientParticipants(len(participants), required)

    event.status = EventStatus.in_progress.value
    event.winner_id = None
    session.add(event)
    return generate_bracket(session, event.id, participants, seed_randomly, rng)


def wipe_bracket(session: Session, event_id: int) -> int:
    """Delete every match of an event. Returns the number of deleted matches."""
    deleted = _delete_event_matches(session, event_id)
    session.commit()
    logger.info("Wiped %d matches for event %d", deleted, event_id)
    return deleted


def load_bracket(session: Session, event_id: int) -> List[EventMatch]:
    """All matches of an event. Stable order: round_number desc, match_order asc."""
    return list(
        session.exec(
            select(EventMatch)
            .where(EventMatch.event_id == event_id)
            .order_by(EventMatch.round_number.desc(), EventMatch.match_order)
        ).all()
    )


def bracket_rounds(matches: Sequence[EventMatch]) -> List[Dict]:
    """
    Group matches into rounds for display.

    Returns a list of {"round_number", "name", "matches"} with the first round
    played first.
    """
    by_round: Dict[int, List[EventMatch]] = {}
    for match in matches:
        by_round.setdefault(match.round_number, []).append(match)

    return [
        {
            "round_number": round_number,
            "name": bracket_math.round_name(round_number),
            "matches": sorted(by_round[round_number], key=lambda m: m.match_order),
        }
        for round_number in sorted(by_round, reverse=True)
    ]


def champion_of(matches: Sequence[EventMatch]) -> Optional[str]:
    for match in matches:
        if match.round_number == 1 and match.status == MatchStatus.completed.value:
            return match.winner_id
    return None
