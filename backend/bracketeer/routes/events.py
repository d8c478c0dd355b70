from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlmodel import Session, select

from bracketeer.database import get_session
from bracketeer.models.event import Event, EventStatus

router = APIRouter()


class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    status: EventStatus = EventStatus.draft
    min_participants: int = 2
    max_participants: Optional[int] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip()

    @field_validator("min_participants")
    @classmethod
    def validate_min_participants(cls, v):
        if v < 2:
            raise ValueError("min_participants must be >= 2")
        return v

    @model_validator(mode="after")
    def validate_capacity(self):
        if self.max_participants is not None and self.max_participants < self.min_participants:
            raise ValueError("max_participants must be >= min_participants")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[EventStatus] = None
    min_participants: Optional[int] = None
    max_participants: Optional[int] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and (not v or not v.strip()):
            raise ValueError("title cannot be empty")
        return v.strip() if v else v

    @field_validator("min_participants")
    @classmethod
    def validate_min_participants(cls, v):
        if v is not None and v < 2:
            raise ValueError("min_participants must be >= 2")
        return v


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: EventStatus
    min_participants: int
    max_participants: Optional[int] = None
    winner_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


@router.get("/events", response_model=List[EventResponse])
def list_events(status: Optional[EventStatus] = None, session: Session = Depends(get_session)):
    """List events, optionally filtered by status"""
    query = select(Event)
    if status is not None:
        query = query.where(Event.status == status.value)
    return session.exec(query.order_by(Event.id)).all()


@router.post("/events", response_model=EventResponse, status_code=201)
def create_event(event_data: EventCreate, session: Session = Depends(get_session)):
    """Create a new event"""
    data = event_data.model_dump()
    data["status"] = event_data.status.value
    event = Event(**data)
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: int, session: Session = Depends(get_session)):
    """Get a single event"""
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.patch("/events/{event_id}", response_model=EventResponse)
def update_event(event_id: int, event_data: EventUpdate, session: Session = Depends(get_session)):
    """Update an event (status transitions are not restricted here; the caller is an administrator)"""
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    update_data = event_data.model_dump(exclude_unset=True)
    if update_data.get("status") is not None:
        update_data["status"] = update_data["status"].value

    min_participants = update_data.get("min_participants", event.min_participants)
    max_participants = update_data.get("max_participants", event.max_participants)
    if max_participants is not None and max_participants < min_participants:
        raise HTTPException(status_code=422, detail="max_participants must be >= min_participants")

    for key, value in update_data.items():
        setattr(event, key, value)

    session.add(event)
    session.commit()
    session.refresh(event)
    return event
