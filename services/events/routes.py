# services/events/routes.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from packages.common.auth import get_session_subject
from services.gateway.dependencies import get_database, get_invalidator, get_resolver, respond
from .workflows import EventWorkflow, RECENT_LIMIT

router = APIRouter(prefix="/events", tags=["events"])


def get_workflow(db=Depends(get_database), resolver=Depends(get_resolver), invalidator=Depends(get_invalidator)) -> EventWorkflow:
    return EventWorkflow(db, resolver, invalidator)


@router.get("")
async def list_events(
    active_only: bool = Query(False, alias="activeOnly"),
    subject: Optional[str] = Depends(get_session_subject),
    wf: EventWorkflow = Depends(get_workflow),
):
    return respond(await wf.get_all_events(subject, active_only))


@router.get("/recent")
async def recent_events(limit: int = Query(RECENT_LIMIT, ge=1, le=50), wf: EventWorkflow = Depends(get_workflow)):
    return respond(await wf.get_recent_events(limit))


@router.get("/{event_id}")
async def read_event(event_id: str, subject: Optional[str] = Depends(get_session_subject), wf: EventWorkflow = Depends(get_workflow)):
    return respond(await wf.get_event(subject, event_id))


@router.post("")
async def create_event(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: EventWorkflow = Depends(get_workflow),
):
    return respond(await wf.create_event(subject, payload), status.HTTP_201_CREATED)


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: EventWorkflow = Depends(get_workflow),
):
    return respond(await wf.update_event(subject, event_id, payload))


@router.post("/{event_id}/toggle")
async def toggle_event(event_id: str, subject: Optional[str] = Depends(get_session_subject), wf: EventWorkflow = Depends(get_workflow)):
    return respond(await wf.toggle_event_status(subject, event_id))


@router.delete("/{event_id}")
async def delete_event(event_id: str, subject: Optional[str] = Depends(get_session_subject), wf: EventWorkflow = Depends(get_workflow)):
    return respond(await wf.delete_event(subject, event_id))
