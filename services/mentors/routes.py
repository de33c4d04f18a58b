# services/mentors/routes.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from packages.common.auth import get_session_subject
from services.gateway.dependencies import get_database, get_invalidator, get_resolver, respond
from .workflows import MentorMessageWorkflow, MentorWorkflow

router = APIRouter(prefix="/mentors", tags=["mentors"])


def get_workflow(db=Depends(get_database), resolver=Depends(get_resolver), invalidator=Depends(get_invalidator)) -> MentorWorkflow:
    return MentorWorkflow(db, resolver, invalidator)


def get_message_workflow(
    db=Depends(get_database), resolver=Depends(get_resolver), invalidator=Depends(get_invalidator)
) -> MentorMessageWorkflow:
    return MentorMessageWorkflow(db, resolver, invalidator)


@router.post("/applications")
async def apply(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: MentorWorkflow = Depends(get_workflow),
):
    return respond(await wf.apply_as_mentor(subject, payload), status.HTTP_201_CREATED)


@router.get("/status")
async def mentor_status(
    email: str = Query(..., min_length=3),
    subject: Optional[str] = Depends(get_session_subject),
    wf: MentorWorkflow = Depends(get_workflow),
):
    return respond(await wf.get_mentor_status(subject, email))


@router.get("")
async def list_mentors(
    approved_only: bool = Query(False, alias="approvedOnly"),
    subject: Optional[str] = Depends(get_session_subject),
    wf: MentorWorkflow = Depends(get_workflow),
):
    return respond(await wf.get_all_mentors(subject, approved_only))


@router.put("/{mentor_id}/status")
async def update_status(
    mentor_id: str,
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: MentorWorkflow = Depends(get_workflow),
):
    return respond(await wf.update_mentor_status(subject, mentor_id, payload.get("status")))


@router.delete("/{mentor_id}")
async def delete_mentor(mentor_id: str, subject: Optional[str] = Depends(get_session_subject), wf: MentorWorkflow = Depends(get_workflow)):
    return respond(await wf.delete_mentor(subject, mentor_id))


@router.post("/messages")
async def send_message(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: MentorMessageWorkflow = Depends(get_message_workflow),
):
    return respond(await wf.send_mentor_message(subject, payload), status.HTTP_201_CREATED)


@router.get("/{mentor_id}/messages")
async def list_messages(
    mentor_id: str,
    subject: Optional[str] = Depends(get_session_subject),
    wf: MentorMessageWorkflow = Depends(get_message_workflow),
):
    return respond(await wf.get_mentor_messages(subject, mentor_id))


@router.post("/messages/{message_id}/read")
async def mark_read(
    message_id: str,
    subject: Optional[str] = Depends(get_session_subject),
    wf: MentorMessageWorkflow = Depends(get_message_workflow),
):
    return respond(await wf.mark_message_as_read(subject, message_id))
