# services/internships/routes.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from packages.common.auth import get_session_subject
from services.gateway.dependencies import get_database, get_invalidator, get_resolver, respond
from .workflows import InternshipWorkflow

router = APIRouter(prefix="/internships", tags=["internships"])


def get_workflow(db=Depends(get_database), resolver=Depends(get_resolver), invalidator=Depends(get_invalidator)) -> InternshipWorkflow:
    return InternshipWorkflow(db, resolver, invalidator)


@router.get("")
async def list_internships(
    active_only: bool = Query(False, alias="activeOnly"),
    subject: Optional[str] = Depends(get_session_subject),
    wf: InternshipWorkflow = Depends(get_workflow),
):
    return respond(await wf.get_all_internships(subject, active_only))


@router.get("/{internship_id}")
async def read_internship(
    internship_id: str, subject: Optional[str] = Depends(get_session_subject), wf: InternshipWorkflow = Depends(get_workflow)
):
    return respond(await wf.get_internship(subject, internship_id))


@router.post("")
async def create_internship(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: InternshipWorkflow = Depends(get_workflow),
):
    return respond(await wf.create_internship(subject, payload), status.HTTP_201_CREATED)


@router.delete("/{internship_id}")
async def delete_internship(
    internship_id: str, subject: Optional[str] = Depends(get_session_subject), wf: InternshipWorkflow = Depends(get_workflow)
):
    return respond(await wf.delete_internship(subject, internship_id))
