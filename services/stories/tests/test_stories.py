"""Tests for the story lifecycle workflow."""

import pytest

from packages.common.errors import ErrorKind
from services.stories.workflows import StoryWorkflow


@pytest.fixture
def workflow(database, resolver, invalidator) -> StoryWorkflow:
    return StoryWorkflow(database, resolver, invalidator)


def story_payload(**overrides):
    body = {"title": "From campus to CERN", "content": "It started in the physics lab..."}
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_submitted_story_is_never_published(workflow, alumni) -> None:
    """A caller-asserted publication flag is ignored at submission."""
    res = await workflow.create_story(alumni, story_payload(isPublished=True))
    if not res.success or res.data["isPublished"] is not False:
        pytest.fail(f"Story must start unpublished, got {res}")
    if res.data["authorEmail"] != "a@x.com" or res.data["author"] != "Alex Alum":
        pytest.fail(f"Story must be attributed to the caller, got {res.data}")
    public = await workflow.get_all_stories(published_only=True)
    if public.data:
        pytest.fail("Unpublished stories must not be listed publicly")


@pytest.mark.asyncio
async def test_unassigned_caller_cannot_submit(workflow, newcomer) -> None:
    res = await workflow.create_story(newcomer, story_payload())
    if res.error is not ErrorKind.UNAUTHORIZED:
        pytest.fail(f"Expected unauthorized, got {res}")


@pytest.mark.asyncio
async def test_publish_toggle_is_admin_only_and_reversible(workflow, admin, alumni) -> None:
    story_id = (await workflow.create_story(alumni, story_payload())).data["id"]

    denied = await workflow.toggle_story_publish(alumni, story_id)
    if denied.error is not ErrorKind.UNAUTHORIZED:
        pytest.fail(f"Expected unauthorized, got {denied}")

    published = await workflow.toggle_story_publish(admin, story_id)
    if published.data["isPublished"] is not True:
        pytest.fail("Admin toggle should publish")
    public = await workflow.get_all_stories(published_only=True)
    if [s["id"] for s in public.data] != [story_id]:
        pytest.fail("Published story should be listed publicly")

    unpublished = await workflow.toggle_story_publish(admin, story_id)
    if unpublished.data["isPublished"] is not False:
        pytest.fail("Second toggle should unpublish")


@pytest.mark.asyncio
async def test_full_listing_and_edits_are_admin_only(workflow, admin, alumni, student) -> None:
    story_id = (await workflow.create_story(alumni, story_payload())).data["id"]
    if (await workflow.get_all_stories(student)).error is not ErrorKind.UNAUTHORIZED:
        pytest.fail("Only admins may list unpublished stories")
    listed = await workflow.get_all_stories(admin)
    if len(listed.data) != 1:
        pytest.fail(f"Admin should see the pending story, got {listed}")

    if (await workflow.update_story(alumni, story_id, {"title": "Edited"})).error is not ErrorKind.UNAUTHORIZED:
        pytest.fail("Only admins may edit stories")
    edited = await workflow.update_story(admin, story_id, {"title": "Edited"})
    if edited.data["title"] != "Edited" or edited.data["isPublished"] is not False:
        pytest.fail(f"Edit should change the title only, got {edited}")


@pytest.mark.asyncio
async def test_author_reads_own_stories_only(workflow, alumni, student, admin) -> None:
    story_id = (await workflow.create_story(alumni, story_payload())).data["id"]
    own = await workflow.get_stories_by_author_email(alumni, "A@X.com")
    if [s["id"] for s in own.data] != [story_id]:
        pytest.fail(f"Author should see their own story, got {own}")
    other = await workflow.get_stories_by_author_email(student, "a@x.com")
    if other.error is not ErrorKind.UNAUTHORIZED:
        pytest.fail("Students must not read another author's stories")
    hidden = await workflow.get_story(student, story_id)
    if hidden.error is not ErrorKind.NOT_FOUND:
        pytest.fail("Unpublished stories are invisible to other members")
    if not (await workflow.get_story(admin, story_id)).success:
        pytest.fail("Admins can read unpublished stories")


@pytest.mark.asyncio
async def test_delete_story_from_either_state(workflow, admin, alumni) -> None:
    first = (await workflow.create_story(alumni, story_payload())).data["id"]
    second = (await workflow.create_story(alumni, story_payload(title="Second"))).data["id"]
    await workflow.toggle_story_publish(admin, second)
    if (await workflow.delete_story(alumni, first)).error is not ErrorKind.UNAUTHORIZED:
        pytest.fail("Only admins may delete stories")
    for story_id in (first, second):
        if not (await workflow.delete_story(admin, story_id)).success:
            pytest.fail(f"Admin delete failed for {story_id}")
    if (await workflow.get_all_stories(admin)).data:
        pytest.fail("All stories should be gone")
