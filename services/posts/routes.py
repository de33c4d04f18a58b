# services/posts/routes.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, status

from packages.common.auth import get_session_subject
from services.gateway.dependencies import get_database, get_invalidator, get_resolver, respond
from .workflows import PostWorkflow

router = APIRouter(prefix="/posts", tags=["posts"])


def get_workflow(db=Depends(get_database), resolver=Depends(get_resolver), invalidator=Depends(get_invalidator)) -> PostWorkflow:
    return PostWorkflow(db, resolver, invalidator)


@router.get("")
async def list_posts(subject: Optional[str] = Depends(get_session_subject), wf: PostWorkflow = Depends(get_workflow)):
    return respond(await wf.get_all_posts(subject))


@router.get("/by-user/{author_id}")
async def posts_by_user(author_id: str, subject: Optional[str] = Depends(get_session_subject), wf: PostWorkflow = Depends(get_workflow)):
    return respond(await wf.get_posts_by_user(subject, author_id))


@router.get("/{post_id}")
async def read_post(post_id: str, subject: Optional[str] = Depends(get_session_subject), wf: PostWorkflow = Depends(get_workflow)):
    return respond(await wf.get_post(subject, post_id))


@router.post("")
async def create_post(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: PostWorkflow = Depends(get_workflow),
):
    return respond(await wf.create_post(subject, payload), status.HTTP_201_CREATED)


@router.post("/{post_id}/like")
async def like_post(post_id: str, subject: Optional[str] = Depends(get_session_subject), wf: PostWorkflow = Depends(get_workflow)):
    return respond(await wf.like_post(subject, post_id))


@router.post("/{post_id}/comments")
async def add_comment(
    post_id: str,
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: PostWorkflow = Depends(get_workflow),
):
    return respond(await wf.add_comment(subject, post_id, payload), status.HTTP_201_CREATED)


@router.delete("/{post_id}")
async def delete_post(post_id: str, subject: Optional[str] = Depends(get_session_subject), wf: PostWorkflow = Depends(get_workflow)):
    return respond(await wf.delete_post(subject, post_id))
