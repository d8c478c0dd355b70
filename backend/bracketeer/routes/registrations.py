"""
Event registration routes: the participant source for bracket generation.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import func
from sqlmodel import Session, select

from bracketeer.database import get_session
from bracketeer.models.event import Event, EventStatus
from bracketeer.models.registration import (
    ACTIVE_REGISTRATION_STATUSES,
    EventRegistration,
    RegistrationStatus,
)
from bracketeer.utils.clock import utcnow

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class RegistrationCreate(BaseModel):
    user_id: str
    bracket_seed: Optional[int] = None

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v):
        if not v or not v.strip():
            raise ValueError("user_id cannot be empty")
        return v.strip()

    @field_validator("bracket_seed")
    @classmethod
    def validate_seed(cls, v):
        if v is not None and v < 1:
            raise ValueError("bracket_seed must be >= 1")
        return v


class RegistrationUpdate(BaseModel):
    bracket_seed: Optional[int] = None

    @field_validator("bracket_seed")
    @classmethod
    def validate_seed(cls, v):
        if v is not None and v < 1:
            raise ValueError("bracket_seed must be >= 1")
        return v


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    user_id: str
    registered_at: datetime
    status: RegistrationStatus
    bracket_seed: Optional[int] = None


def _get_event_or_404(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _get_registration(session: Session, event_id: int, user_id: str) -> Optional[EventRegistration]:
    return session.exec(
        select(EventRegistration).where(
            EventRegistration.event_id == event_id,
            EventRegistration.user_id == user_id,
        )
    ).first()


# ============================================================================
# Registration Endpoints
# ============================================================================


@router.get("/events/{event_id}/registrations", response_model=List[RegistrationResponse])
def list_registrations(
    event_id: int,
    include_cancelled: bool = False,
    session: Session = Depends(get_session),
):
    """Registrations of an event in registration order (active only unless include_cancelled)"""
    _get_event_or_404(session, event_id)

    query = select(EventRegistration).where(EventRegistration.event_id == event_id)
    if not include_cancelled:
        query = query.where(EventRegistration.status.in_(ACTIVE_REGISTRATION_STATUSES))
    return session.exec(query.order_by(EventRegistration.registered_at, EventRegistration.id)).all()


@router.post("/events/{event_id}/registrations", response_model=RegistrationResponse, status_code=201)
def register_participant(
    event_id: int,
    request: RegistrationCreate,
    session: Session = Depends(get_session),
):
    """
    Register a participant for an event.

    A cancelled registration is reactivated with a fresh registered_at.
    Constraints:
    - event must be registration_open
    - active registrations must stay within max_participants
    """
    event = _get_event_or_404(session, event_id)
    if event.status != EventStatus.registration_open.value:
        raise HTTPException(status_code=409, detail="Registration is not open for this event")

    existing = _get_registration(session, event_id, request.user_id)
    if existing and existing.status in ACTIVE_REGISTRATION_STATUSES:
        raise HTTPException(status_code=409, detail="Already registered for this event")

    if event.max_participants is not None:
        active_count = session.exec(
            select(func.count(EventRegistration.id)).where(
                EventRegistration.event_id == event_id,
                EventRegistration.status.in_(ACTIVE_REGISTRATION_STATUSES),
            )
        ).one()
        if active_count >= event.max_participants:
            raise HTTPException(status_code=409, detail="Event is full")

    if existing:
        existing.status = RegistrationStatus.registered.value
        existing.registered_at = utcnow()
        if request.bracket_seed is not None:
            existing.bracket_seed = request.bracket_seed
        registration = existing
    else:
        registration = EventRegistration(
            event_id=event_id,
            user_id=request.user_id,
            bracket_seed=request.bracket_seed,
        )

    session.add(registration)
    session.commit()
    session.refresh(registration)
    return registration


@router.patch("/events/{event_id}/registrations/{user_id}", response_model=RegistrationResponse)
def update_registration(
    event_id: int,
    user_id: str,
    request: RegistrationUpdate,
    session: Session = Depends(get_session),
):
    """Set or clear the bracket seed of a registration"""
    _get_event_or_404(session, event_id)
    registration = _get_registration(session, event_id, user_id)
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")

    registration.bracket_seed = request.bracket_seed
    session.add(registration)
    session.commit()
    session.refresh(registration)
    return registration


@router.delete("/events/{event_id}/registrations/{user_id}", response_model=RegistrationResponse)
def cancel_registration(event_id: int, user_id: str, session: Session = Depends(get_session)):
    """Cancel a registration (kept as a cancelled row so it can be reactivated)"""
    _get_event_or_404(session, event_id)
    registration = _get_registration(session, event_id, user_id)
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")

    registration.status = RegistrationStatus.cancelled.value
    session.add(registration)
    session.commit()
    session.refresh(registration)
    return registration
