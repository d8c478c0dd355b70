"""
Bracket routes: generate/regenerate, read, wipe, and match runtime (start + result).
Recording a result advances the winner into the next round; recording the final
crowns the event champion.
"""
import random
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from bracketeer.database import get_session
from bracketeer.models.event import BRACKET_GENERATION_STATUSES, Event, EventStatus
from bracketeer.models.match import EventMatch, MatchState
from bracketeer.services.advancement_service import (
    record_result,
    repair_advancement,
    simulate_bracket,
    start_match,
)
from bracketeer.services.bracket_errors import (
    AdvancementConflict,
    BracketError,
    DuplicateParticipant,
    InsufficientParticipants,
    InvalidWinner,
    MatchAlreadyDecided,
    MatchNotFound,
    MatchNotReady,
)
from bracketeer.services.bracket_service import (
    bracket_rounds,
    champion_of,
    generate_event_bracket,
    load_bracket,
    wipe_bracket,
)

router = APIRouter()


class GenerateBracketRequest(BaseModel):
    seed_randomly: bool = True
    random_seed: Optional[int] = None  # Reproducible shuffle when set


class MatchResultRequest(BaseModel):
    winner_id: str
    player1_score: Optional[int] = None
    player2_score: Optional[int] = None

    @field_validator("winner_id")
    @classmethod
    def validate_winner(cls, v):
        if not v or not v.strip():
            raise ValueError("winner_id cannot be empty")
        return v.strip()


class MatchResponse(BaseModel):
    id: int
    event_id: int
    round_number: int
    match_order: int
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None
    winner_id: Optional[str] = None
    player1_score: Optional[int] = None
    player2_score: Optional[int] = None
    scheduled_time: Optional[datetime] = None
    status: str
    state: MatchState


class RoundResponse(BaseModel):
    round_number: int
    name: str
    matches: List[MatchResponse]


class BracketResponse(BaseModel):
    event_id: int
    total_rounds: int
    champion_id: Optional[str] = None
    rounds: List[RoundResponse]


class MatchResultResponse(BaseModel):
    match: MatchResponse
    champion_id: Optional[str] = None


class RepairAdvancementResponse(BaseModel):
    matches_processed: int
    slots_filled: int
    unknown_before: int
    unknown_after: int


class SimulateBracketResponse(BaseModel):
    matches_simulated: int
    champion_id: Optional[str] = None


def _match_to_response(m: EventMatch) -> MatchResponse:
    return MatchResponse(
        id=m.id,
        event_id=m.event_id,
        round_number=m.round_number,
        match_order=m.match_order,
        player1_id=m.player1_id,
        player2_id=m.player2_id,
        winner_id=m.winner_id,
        player1_score=m.player1_score,
        player2_score=m.player2_score,
        scheduled_time=m.scheduled_time,
        status=m.effective_status,
        state=m.state,
    )


def _bracket_response(event_id: int, matches: List[EventMatch]) -> BracketResponse:
    rounds = bracket_rounds(matches)
    return BracketResponse(
        event_id=event_id,
        total_rounds=len(rounds),
        champion_id=champion_of(matches),
        rounds=[
            RoundResponse(
                round_number=r["round_number"],
                name=r["name"],
                matches=[_match_to_response(m) for m in r["matches"]],
            )
            for r in rounds
        ],
    )


def _http_error(exc: BracketError) -> HTTPException:
    """Translate bracket errors into user-facing HTTP errors."""
    if isinstance(exc, MatchNotFound):
        return HTTPException(status_code=404, detail="Match not found")
    if isinstance(exc, (InsufficientParticipants, DuplicateParticipant)):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, InvalidWinner):
        return HTTPException(status_code=422, detail="Select one of the match players as the winner")
    if isinstance(exc, MatchNotReady):
        return HTTPException(status_code=409, detail="Both players must be known before this match can be played")
    if isinstance(exc, (MatchAlreadyDecided, AdvancementConflict)):
        return HTTPException(status_code=409, detail="This match already has a result")
    return HTTPException(status_code=400, detail=str(exc))


def _get_event_or_404(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _get_match_event(session: Session, match_id: int) -> Event:
    match = session.get(EventMatch, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return _get_event_or_404(session, match.event_id)


@router.post("/events/{event_id}/bracket", response_model=BracketResponse, status_code=201)
def generate_bracket_endpoint(
    event_id: int,
    payload: GenerateBracketRequest,
    session: Session = Depends(get_session),
) -> BracketResponse:
    """
    Generate (or regenerate) the event bracket from its active registrations.

    Destructive: any existing matches and results of the event are discarded.
    The event moves to in_progress.
    """
    event = _get_event_or_404(session, event_id)
    if event.status not in BRACKET_GENERATION_STATUSES:
        raise HTTPException(
            status_code=409,
            detail=f"Bracket can only be generated while the event is registration_open or in_progress (is {event.status})",
        )

    rng = random.Random(payload.random_seed) if payload.random_seed is not None else None
    try:
        matches = generate_event_bracket(session, event, payload.seed_randomly, rng)
    except BracketError as e:
        raise _http_error(e)

    return _bracket_response(event_id, matches)


@router.get("/events/{event_id}/bracket", response_model=BracketResponse)
def get_bracket(event_id: int, session: Session = Depends(get_session)) -> BracketResponse:
    """Bracket grouped by round, first round played first. Empty rounds if not generated yet."""
    _get_event_or_404(session, event_id)
    return _bracket_response(event_id, load_bracket(session, event_id))


@router.delete("/events/{event_id}/bracket", response_model=Dict[str, int])
def delete_bracket(event_id: int, session: Session = Depends(get_session)) -> Dict[str, int]:
    """Delete every match of the event."""
    _get_event_or_404(session, event_id)
    return {"deleted_matches": wipe_bracket(session, event_id)}


@router.get("/events/{event_id}/matches", response_model=List[MatchResponse])
def list_matches(event_id: int, session: Session = Depends(get_session)) -> List[MatchResponse]:
    """Flat match list. Stable order: round_number desc, match_order asc."""
    _get_event_or_404(session, event_id)
    return [_match_to_response(m) for m in load_bracket(session, event_id)]


@router.post("/matches/{match_id}/start", response_model=MatchResponse)
def start_match_endpoint(match_id: int, session: Session = Depends(get_session)) -> MatchResponse:
    """Mark a match with both players known as in progress."""
    event = _get_match_event(session, match_id)
    if event.status != EventStatus.in_progress.value:
        raise HTTPException(status_code=409, detail="Event is not in progress")

    try:
        match = start_match(session, match_id)
    except BracketError as e:
        raise _http_error(e)
    return _match_to_response(match)


@router.post("/matches/{match_id}/result", response_model=MatchResultResponse)
def record_result_endpoint(
    match_id: int,
    payload: MatchResultRequest,
    session: Session = Depends(get_session),
) -> MatchResultResponse:
    """Record the winner (and optional scores) and advance the winner to the next round."""
    event = _get_match_event(session, match_id)
    if event.status != EventStatus.in_progress.value:
        raise HTTPException(status_code=409, detail="Event is not in progress")
    try:
        match = record_result(
            session,
            match_id,
            payload.winner_id,
            player1_score=payload.player1_score,
            player2_score=payload.player2_score,
        )
    except BracketError as e:
        raise _http_error(e)

    # Event row is expired by the commit; this reloads the champion if the final was recorded
    return MatchResultResponse(match=_match_to_response(match), champion_id=event.winner_id)


@router.post(
    "/events/{event_id}/bracket/repair-advancement",
    response_model=RepairAdvancementResponse,
)
def repair_advancement_endpoint(
    event_id: int, session: Session = Depends(get_session)
) -> RepairAdvancementResponse:
    """
    Re-run advancement for every decided match of the event.

    Guarantees:
    - Idempotent (safe to call multiple times)
    - Never overwrites a seated slot
    """
    _get_event_or_404(session, event_id)
    try:
        result = repair_advancement(session, event_id)
    except BracketError as e:
        raise _http_error(e)
    return RepairAdvancementResponse(**result)


@router.post("/events/{event_id}/bracket/simulate", response_model=SimulateBracketResponse)
def simulate_bracket_endpoint(event_id: int, session: Session = Depends(get_session)) -> SimulateBracketResponse:
    """
    DEV-ONLY: Play out the bracket with the upper slot winning every match.

    WARNING: This records match results! Use only in development/testing.
    """
    event = _get_event_or_404(session, event_id)
    if event.status != EventStatus.in_progress.value:
        raise HTTPException(status_code=409, detail="Event is not in progress")
    try:
        result = simulate_bracket(session, event_id)
    except BracketError as e:
        raise _http_error(e)
    return SimulateBracketResponse(**result)

