"""
Advancement Engine: record a match result and move the winner into the next round.

Only the targeted slot column of the destination match is written, guarded by
"slot is still empty", so two feeders of the same destination never overwrite
each other and a seated participant is never replaced. A second result for
the same match is rejected by the same kind of guard on winner_id.
"""
import logging
from typing import Dict, Optional

from sqlalchemy import or_, update
from sqlmodel import Session, select

from bracketeer.models.event import Event, EventStatus
from bracketeer.models.match import EventMatch, MatchState, MatchStatus
from bracketeer.services import bracket_math
from bracketeer.services.bracket_errors import (
    AdvancementConflict,
    InvalidWinner,
    MatchAlreadyDecided,
    MatchNotFound,
    MatchNotReady,
)
from bracketeer.services.bracket_service import champion_of, load_bracket
from bracketeer.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _slot_column(slot: int):
    return EventMatch.player1_id if slot == bracket_math.PLAYER1_SLOT else EventMatch.player2_id


def _seat_in_next_round(
    session: Session, event_id: int, round_number: int, match_order: int, winner_id: str
) -> bool:
    """
    Write winner_id into the parity slot of the next round's match.

    Returns True if the slot was newly filled, False if it already held winner_id.
    Raises AdvancementConflict if the slot holds someone else or the
    destination match does not exist. Does not commit.
    """
    next_round, next_order, slot = bracket_math.next_slot(round_number, match_order)
    column = _slot_column(slot)
    destination = (
        EventMatch.event_id == event_id,
        EventMatch.round_number == next_round,
        EventMatch.match_order == next_order,
    )

    result = session.connection().execute(
        update(EventMatch)
        .where(*destination, column.is_(None))
        .values({column.key: winner_id, "updated_at": utcnow()})
    )
    if result.rowcount == 1:
        return True

    row = session.exec(select(EventMatch.id, column).where(*destination)).first()
    if row is None:
        logger.error(
            "Advancement conflict in event %d: round %d match %d has no destination (round %d match %d)",
            event_id,
            round_number,
            match_order,
            next_round,
            next_order,
        )
        raise AdvancementConflict(
            f"Event {event_id} has no round {next_round} match {next_order} to receive the winner"
        )

    destination_id, current = row
    if current == winner_id:
        return False

    logger.error(
        "Advancement conflict in event %d: winner %r of round %d match %d cannot take slot %d "
        "of match %d (round %d match %d), already held by %r",
        event_id,
        winner_id,
        round_number,
        match_order,
        slot,
        destination_id,
        next_round,
        next_order,
        current,
    )
    raise AdvancementConflict(
        f"Match {destination_id} slot {slot} already holds {current!r}; cannot seat {winner_id!r}"
    )


def _crown_champion(session: Session, event_id: int, winner_id: str) -> None:
    event = session.get(Event, event_id)
    if event is None:
        return
    if event.winner_id != winner_id or event.status != EventStatus.completed.value:
        event.winner_id = winner_id
        event.status = EventStatus.completed.value
        session.add(event)
        logger.info("Event %d champion decided: %s", event_id, winner_id)


def advance_winner(session: Session, match: EventMatch) -> bool:
    """
    Propagate a decided match's winner (bye or recorded) one round forward.

    The final has nowhere to go; its winner is surfaced as the event champion.
    Returns True if a next-round slot was newly filled. Does not commit.
    """
    if match.winner_id is None:
        return False
    if match.round_number <= 1:
        _crown_champion(session, match.event_id, match.winner_id)
        return False
    return _seat_in_next_round(
        session, match.event_id, match.round_number, match.match_order, match.winner_id
    )


def record_result(
    session: Session,
    match_id: int,
    winner_id: str,
    player1_score: Optional[int] = None,
    player2_score: Optional[int] = None,
) -> EventMatch:
    """
    Record the winner of a match and advance them.

    Raises:
        MatchNotFound for an unknown match id
        MatchNotReady if either player slot is empty (byes are never recorded here)
        InvalidWinner if winner_id is not one of the two players (no mutation)
        MatchAlreadyDecided if a different winner is already recorded
        AdvancementConflict if the next-round slot holds someone else (rolled back)

    Recording the same winner again is idempotent; provided scores are updated.
    """
    match = session.get(EventMatch, match_id)
    if match is None:
        raise MatchNotFound(match_id)
    if match.player1_id is None or match.player2_id is None:
        raise MatchNotReady(match_id)
    if winner_id not in (match.player1_id, match.player2_id):
        raise InvalidWinner(match_id, winner_id)
    if match.winner_id is not None and match.winner_id != winner_id:
        logger.warning(
            "Rejected result for match %d: winner %r already recorded, got %r", match_id, match.winner_id, winner_id
        )
        raise MatchAlreadyDecided(match_id, match.winner_id)

    event_id = match.event_id
    round_number = match.round_number
    match_order = match.match_order

    values = {"winner_id": winner_id, "status": MatchStatus.completed.value, "updated_at": utcnow()}
    if player1_score is not None:
        values["player1_score"] = player1_score
    if player2_score is not None:
        values["player2_score"] = player2_score

    try:
        result = session.connection().execute(
            update(EventMatch)
            .where(
                EventMatch.id == match_id,
                or_(EventMatch.winner_id.is_(None), EventMatch.winner_id == winner_id),
            )
            .values(values)
        )
        if result.rowcount != 1:
            current = session.exec(select(EventMatch.winner_id).where(EventMatch.id == match_id)).first()
            logger.warning(
                "Rejected result for match %d: winner %r recorded concurrently, got %r", match_id, current, winner_id
            )
            raise MatchAlreadyDecided(match_id, current)

        if round_number == 1:
            _crown_champion(session, event_id, winner_id)
        else:
            _seat_in_next_round(session, event_id, round_number, match_order, winner_id)
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(match)
    return match


def start_match(session: Session, match_id: int) -> EventMatch:
    """Mark a scheduled match as in progress. Idempotent for a match already in progress."""
    match = session.get(EventMatch, match_id)
    if match is None:
        raise MatchNotFound(match_id)

    state = match.state
    if state in (MatchState.decided, MatchState.bye):
        raise MatchAlreadyDecided(match_id, match.winner_id)
    if state != MatchState.scheduled:
        raise MatchNotReady(match_id)

    if match.status != MatchStatus.in_progress.value:
        match.status = MatchStatus.in_progress.value
        match.updated_at = utcnow()
        session.add(match)
        session.commit()
        session.refresh(match)
    return match


def _count_unknown_slots(session: Session, event_id: int) -> int:
    return sum(
        1 for m in load_bracket(session, event_id) if m.player1_id is None or m.player2_id is None
    )


def repair_advancement(session: Session, event_id: int) -> Dict:
    """
    Re-run advancement for every decided match (byes included) of an event.

    Useful after recovering from an interrupted advancement or a manual data fix.

    Returns:
        Dict with:
        - matches_processed: number of decided matches processed
        - slots_filled: next-round slots that were empty and are now seated
        - unknown_before: matches with an empty slot before
        - unknown_after: matches with an empty slot after

    Guarantees:
        - Idempotent (safe to call multiple times)
        - Never overwrites a seated slot; a conflict rolls back the whole repair
    """
    matches = load_bracket(session, event_id)
    unknown_before = sum(1 for m in matches if m.player1_id is None or m.player2_id is None)
    decided = [m for m in matches if m.state in (MatchState.decided, MatchState.bye)]

    slots_filled = 0
    try:
        for match in decided:
            if advance_winner(session, match):
                slots_filled += 1
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.expire_all()
    unknown_after = _count_unknown_slots(session, event_id)

    logger.info(
        "Repaired advancement for event %d: %d decided matches, %d slots filled",
        event_id,
        len(decided),
        slots_filled,
    )
    return {
        "matches_processed": len(decided),
        "slots_filled": slots_filled,
        "unknown_before": unknown_before,
        "unknown_after": unknown_after,
    }


def simulate_bracket(session: Session, event_id: int) -> Dict:
    """
    DEV-ONLY: Play out the bracket assuming the upper slot (player1) always wins.

    Processes every playable match, first round played first, until no match
    with two seated players is left undecided.

    Returns:
        Dict with:
        - matches_simulated: number of results recorded
        - champion_id: winner of the final (None if the bracket is empty)
    """
    matches_simulated = 0
    while True:
        playable = [
            (m.id, m.player1_id)
            for m in load_bracket(session, event_id)
            if m.state == MatchState.scheduled
        ]
        if not playable:
            break
        for match_id, winner_id in playable:
            record_result(session, match_id, winner_id)
            matches_simulated += 1

    return {
        "matches_simulated": matches_simulated,
        "champion_id": champion_of(load_bracket(session, event_id)),
    }
