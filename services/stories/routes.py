# services/stories/routes.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from packages.common.auth import get_session_subject
from services.gateway.dependencies import get_database, get_invalidator, get_resolver, respond
from .workflows import StoryWorkflow

router = APIRouter(prefix="/stories", tags=["stories"])


def get_workflow(db=Depends(get_database), resolver=Depends(get_resolver), invalidator=Depends(get_invalidator)) -> StoryWorkflow:
    return StoryWorkflow(db, resolver, invalidator)


@router.get("")
async def list_stories(
    published_only: bool = Query(False, alias="publishedOnly"),
    subject: Optional[str] = Depends(get_session_subject),
    wf: StoryWorkflow = Depends(get_workflow),
):
    return respond(await wf.get_all_stories(subject, published_only))


@router.get("/by-author")
async def stories_by_author(
    email: str = Query(..., min_length=3),
    subject: Optional[str] = Depends(get_session_subject),
    wf: StoryWorkflow = Depends(get_workflow),
):
    return respond(await wf.get_stories_by_author_email(subject, email))


@router.get("/{story_id}")
async def read_story(story_id: str, subject: Optional[str] = Depends(get_session_subject), wf: StoryWorkflow = Depends(get_workflow)):
    return respond(await wf.get_story(subject, story_id))


@router.post("")
async def submit_story(
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: StoryWorkflow = Depends(get_workflow),
):
    return respond(await wf.create_story(subject, payload), status.HTTP_201_CREATED)


@router.patch("/{story_id}")
async def update_story(
    story_id: str,
    payload: dict[str, Any] = Body(...),
    subject: Optional[str] = Depends(get_session_subject),
    wf: StoryWorkflow = Depends(get_workflow),
):
    return respond(await wf.update_story(subject, story_id, payload))


@router.post("/{story_id}/toggle-publish")
async def toggle_publish(story_id: str, subject: Optional[str] = Depends(get_session_subject), wf: StoryWorkflow = Depends(get_workflow)):
    return respond(await wf.toggle_story_publish(subject, story_id))


@router.delete("/{story_id}")
async def delete_story(story_id: str, subject: Optional[str] = Depends(get_session_subject), wf: StoryWorkflow = Depends(get_workflow)):
    return respond(await wf.delete_story(subject, story_id))
