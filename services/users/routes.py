# services/users/routes.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, status

from packages.common.auth import get_session_subject
from services.gateway.dependencies import get_invalidator, get_resolver, respond
from .workflows import UserWorkflow

router = APIRouter(prefix="/users", tags=["users"])


def get_workflow(resolver=Depends(get_resolver), invalidator=Depends(get_invalidator)) -> UserWorkflow:
    return UserWorkflow(resolver, invalidator)


@router.get("/me/role")
async def current_role(subject: Optional[str] = Depends(get_session_subject), wf: UserWorkflow = Depends(get_workflow)):
    return respond(await wf.get_current_role(subject))


@router.put("/me/role")
async def assign_role(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: UserWorkflow = Depends(get_workflow),
):
    return respond(await wf.assign_role(subject, payload.get("role")))


@router.put("/me/profile")
async def save_profile(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: UserWorkflow = Depends(get_workflow),
):
    return respond(await wf.save_profile(subject, payload))


@router.get("")
async def list_users(
    role: Optional[str] = None,
    subject: Optional[str] = Depends(get_session_subject),
    wf: UserWorkflow = Depends(get_workflow),
):
    if role:
        return respond(await wf.get_users_by_role(subject, role))
    return respond(await wf.get_all_users(subject))


@router.get("/analytics")
async def analytics(subject: Optional[str] = Depends(get_session_subject), wf: UserWorkflow = Depends(get_workflow)):
    return respond(await wf.get_analytics(subject))


@router.post("")
async def create_user(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: UserWorkflow = Depends(get_workflow),
):
    return respond(await wf.create_user(subject, payload), status.HTTP_201_CREATED)


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: UserWorkflow = Depends(get_workflow),
):
    return respond(await wf.update_user_profile(subject, user_id, payload))


@router.delete("/{user_id}")
async def delete_user(user_id: str, subject: Optional[str] = Depends(get_session_subject), wf: UserWorkflow = Depends(get_workflow)):
    return respond(await wf.delete_user(subject, user_id))
