"""Tests for the operation dispatcher and its response envelopes."""

import logging

import pytest

from config.exceptions import DatabaseError, NotFoundError, UnknownOperationError
from models.schema import STORIES, STORY_ACTS, STORY_CHAPTERS, STORY_SCENES
from services.dispatcher import build_dispatcher
from services.identity import RequestContext
from services.validation import NO_OP_UPDATE_MESSAGE

ALL_OPERATIONS = {
    "createStory", "updateStory", "listStories",
    "createStoryAct", "updateStoryAct", "deleteStoryAct", "listStoryActs",
    "createStoryChapter", "updateStoryChapter", "deleteStoryChapter", "listStoryChapters",
    "createStoryScene", "updateStoryScene", "deleteStoryScene", "listStoryScenes",
}


async def _new_story(call, title="Novel A", context=None):
    return (await call("createStory", {"title": title}, context))["story"]


class TestRegistry:
    def test_all_operations_registered(self, dispatcher):
        assert set(dispatcher.operation_names()) == ALL_OPERATIONS

    def test_story_delete_not_exposed(self, dispatcher):
        with pytest.raises(UnknownOperationError):
            dispatcher.get_operation("deleteStory")


class TestEnvelopes:
    @pytest.mark.asyncio
    async def test_create_wraps_record(self, dispatcher, alice):
        envelope = await dispatcher.dispatch("createStory", {"title": "Novel A"}, alice)
        assert envelope["success"] is True
        story = envelope["data"]["story"]
        assert story["id"] == "id-1"
        assert story["userId"] == "user-alice"
        assert story["createdAt"] == "2024-01-01T12:00:00+00:00"

    @pytest.mark.asyncio
    async def test_list_payload(self, call):
        await _new_story(call)
        data = await call("listStories")
        assert data["total"] == len(data["items"]) == 1

    @pytest.mark.asyncio
    async def test_delete_has_no_data(self, dispatcher, call, alice, sample_story):
        act = (await call("createStoryAct", {"storyId": sample_story["id"]}))["act"]
        envelope = await dispatcher.dispatch(
            "deleteStoryAct", {"id": act["id"], "storyId": sample_story["id"]}, alice
        )
        assert envelope == {"success": True}

        remaining = await call("listStoryActs", {"storyId": sample_story["id"]})
        assert remaining == {"items": [], "total": 0}

    @pytest.mark.asyncio
    async def test_error_envelope(self, dispatcher, alice):
        envelope = await dispatcher.dispatch("listStoryActs", {"storyId": "missing"}, alice)
        assert envelope == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Story not found."},
        }

    @pytest.mark.asyncio
    async def test_unknown_operation(self, dispatcher, alice):
        envelope = await dispatcher.dispatch("dropTables", {}, alice)
        assert envelope["error"]["code"] == "BAD_REQUEST"
        assert envelope["error"]["details"] == {"operation": "dropTables"}

    @pytest.mark.asyncio
    async def test_execute_raises(self, dispatcher, alice):
        with pytest.raises(NotFoundError):
            await dispatcher.execute("deleteStoryScene", {"id": "x", "storyId": "y"}, alice)


class TestGateOrder:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", sorted(ALL_OPERATIONS))
    async def test_unauthorized_before_validation(self, dispatcher, store, anonymous, sample_story, operation):
        envelope = await dispatcher.dispatch(
            operation, {"id": "x", "storyId": sample_story["id"], "title": "T"}, anonymous
        )
        assert envelope["error"]["code"] == "UNAUTHORIZED"

        for table in (STORIES, STORY_ACTS, STORY_CHAPTERS, STORY_SCENES):
            rows = await store.select(table, {})
            assert len(rows) == (1 if table == STORIES else 0)
        [story] = await store.select(STORIES, {})
        assert story["title"] == "Novel A"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["createStoryAct", "createStoryChapter", "createStoryScene"])
    async def test_order_index_out_of_integer_range(self, dispatcher, alice, sample_story, operation):
        envelope = await dispatcher.dispatch(
            operation, {"storyId": sample_story["id"], "orderIndex": 2**63}, alice
        )
        assert envelope["success"] is False
        assert envelope["error"]["code"] == "BAD_REQUEST"
        assert envelope["error"]["details"]["errors"][0]["field"] == "orderIndex"

    @pytest.mark.asyncio
    async def test_largest_order_index_accepted(self, call, sample_story):
        act = (await call("createStoryAct", {"storyId": sample_story["id"], "orderIndex": 2**63 - 1}))["act"]
        assert act["orderIndex"] == 2**63 - 1

    @pytest.mark.asyncio
    async def test_missing_context_is_unauthorized(self, dispatcher):
        envelope = await dispatcher.dispatch("listStories")
        assert envelope["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_validation_before_ownership(self, dispatcher, bob):
        envelope = await dispatcher.dispatch("createStoryAct", {"storyId": "s", "orderIndex": "1"}, bob)
        assert envelope["error"]["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_no_op_update_story(self, dispatcher, call, alice):
        story = await _new_story(call)
        envelope = await dispatcher.dispatch("updateStory", {"id": story["id"]}, alice)
        assert envelope["success"] is False
        assert envelope["error"]["code"] == "BAD_REQUEST"
        assert envelope["error"]["message"] == NO_OP_UPDATE_MESSAGE


class TestOwnershipScenarios:
    @pytest.mark.asyncio
    async def test_other_user_cannot_update_act(self, dispatcher, call, bob):
        story = await _new_story(call)
        act = (await call("createStoryAct", {"storyId": story["id"], "orderIndex": 1}))["act"]
        assert act["orderIndex"] == 1

        envelope = await dispatcher.dispatch(
            "updateStoryAct", {"id": act["id"], "storyId": story["id"], "title": "Hijack"}, bob
        )
        assert envelope["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_chapter_cannot_link_act_from_other_story(self, dispatcher, call, alice):
        story_a = await _new_story(call, "A")
        story_b = await _new_story(call, "B")
        foreign_act = (await call("createStoryAct", {"storyId": story_b["id"]}))["act"]

        chapter = (await call("createStoryChapter", {"storyId": story_a["id"]}))["chapter"]
        assert chapter["actId"] is None
        assert chapter["orderIndex"] == 1

        envelope = await dispatcher.dispatch(
            "updateStoryChapter",
            {"id": chapter["id"], "storyId": story_a["id"], "actId": foreign_act["id"]},
            alice,
        )
        assert envelope["error"] == {"code": "NOT_FOUND", "message": "Act not found."}

    @pytest.mark.asyncio
    async def test_scene_cannot_link_chapter_from_other_story(self, dispatcher, call, alice):
        story_a = await _new_story(call, "A")
        story_b = await _new_story(call, "B")
        foreign = (await call("createStoryChapter", {"storyId": story_b["id"]}))["chapter"]
        scene = (await call("createStoryScene", {"storyId": story_a["id"]}))["scene"]

        envelope = await dispatcher.dispatch(
            "updateStoryScene",
            {"id": scene["id"], "storyId": story_a["id"], "chapterId": foreign["id"]},
            alice,
        )
        assert envelope["error"]["message"] == "Chapter not found."

    @pytest.mark.asyncio
    async def test_missing_and_foreign_look_the_same(self, dispatcher, call, bob):
        story = await _new_story(call)
        foreign = await dispatcher.dispatch("listStoryScenes", {"storyId": story["id"]}, bob)
        missing = await dispatcher.dispatch("listStoryScenes", {"storyId": "nope"}, bob)
        assert foreign == missing

    @pytest.mark.asyncio
    async def test_child_addressed_through_wrong_story(self, dispatcher, call, alice):
        story_a = await _new_story(call, "A")
        story_b = await _new_story(call, "B")
        act = (await call("createStoryAct", {"storyId": story_a["id"]}))["act"]

        envelope = await dispatcher.dispatch(
            "deleteStoryAct", {"id": act["id"], "storyId": story_b["id"]}, alice
        )
        assert envelope["error"]["message"] == "Act not found."

    @pytest.mark.asyncio
    async def test_users_see_only_their_stories(self, call, bob):
        await _new_story(call, "Alice's")
        await _new_story(call, "Bob's", context=bob)
        titles = [s["title"] for s in (await call("listStories", context=bob))["items"]]
        assert titles == ["Bob's"]


class TestPartialUpdates:
    @pytest.mark.asyncio
    async def test_one_field_update(self, call):
        created = (await call("createStory", {"title": "Draft", "genre": "Noir", "notes": "n"}))["story"]
        updated = (await call("updateStory", {"id": created["id"], "status": "outline"}))["story"]
        assert updated["status"] == "outline"
        for key in ("title", "genre", "notes", "createdAt"):
            assert updated[key] == created[key]
        assert updated["updatedAt"] > created["updatedAt"]

    @pytest.mark.asyncio
    async def test_scene_update_refreshes_updated_at(self, call, sample_story):
        sid = sample_story["id"]
        scene = (await call("createStoryScene", {"storyId": sid, "goal": "Escape"}))["scene"]
        updated = (await call(
            "updateStoryScene", {"id": scene["id"], "storyId": sid, "outcome": "Caught"}
        ))["scene"]
        assert updated["goal"] == "Escape"
        assert updated["createdAt"] == scene["createdAt"]
        assert updated["updatedAt"] > scene["updatedAt"]

    @pytest.mark.asyncio
    async def test_null_detaches_chapter(self, call):
        story = await _new_story(call)
        act = (await call("createStoryAct", {"storyId": story["id"]}))["act"]
        chapter = (await call(
            "createStoryChapter", {"storyId": story["id"], "actId": act["id"], "title": "One"}
        ))["chapter"]

        updated = (await call(
            "updateStoryChapter", {"id": chapter["id"], "storyId": story["id"], "actId": None}
        ))["chapter"]
        assert updated["actId"] is None
        assert updated["title"] == "One"


class TestListing:
    @pytest.mark.asyncio
    async def test_narrowing_subsets(self, call):
        story = await _new_story(call)
        sid = story["id"]
        chapter = (await call("createStoryChapter", {"storyId": sid}))["chapter"]
        await call("createStoryScene", {"storyId": sid, "chapterId": chapter["id"]})
        await call("createStoryScene", {"storyId": sid, "orderIndex": 2})

        everything = await call("listStoryScenes", {"storyId": sid})
        narrowed = await call("listStoryScenes", {"storyId": sid, "chapterId": chapter["id"]})

        assert everything["total"] == len(everything["items"]) == 2
        assert narrowed["total"] == len(narrowed["items"]) == 1
        assert narrowed["items"][0]["chapterId"] == chapter["id"]

    @pytest.mark.asyncio
    async def test_narrowing_by_foreign_act(self, dispatcher, call, alice):
        story_a = await _new_story(call, "A")
        story_b = await _new_story(call, "B")
        act = (await call("createStoryAct", {"storyId": story_b["id"]}))["act"]
        envelope = await dispatcher.dispatch(
            "listStoryChapters", {"storyId": story_a["id"], "actId": act["id"]}, alice
        )
        assert envelope["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_blank_act_lists_everything(self, call):
        story = await _new_story(call)
        await call("createStoryChapter", {"storyId": story["id"]})
        data = await call("listStoryChapters", {"storyId": story["id"], "actId": ""})
        assert data["total"] == 1


class _BrokenStore:
    async def insert(self, table, row):
        raise DatabaseError("Datastore operation failed", {"error": "disk I/O error"})

    async def select(self, table, where):
        return []

    async def update(self, table, row_id, changes):
        return None

    async def delete(self, table, where):
        return 0


class TestDatastoreFailures:
    @pytest.mark.asyncio
    async def test_database_error_becomes_envelope(self, caplog):
        dispatcher = build_dispatcher(_BrokenStore())
        with caplog.at_level(logging.ERROR, logger="services.dispatcher"):
            envelope = await dispatcher.dispatch(
                "createStory", {"title": "x"}, RequestContext.for_user("u1")
            )
        assert envelope["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert "createStory" in caplog.text
