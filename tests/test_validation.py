"""Tests for operation input contracts."""

import pytest

from config.exceptions import ValidationError
from services.validation import (
    NO_OP_UPDATE_MESSAGE,
    CreateActInput,
    CreateChapterInput,
    CreateSceneInput,
    CreateStoryInput,
    EntityKeyInput,
    ListChaptersInput,
    ListStoriesInput,
    UpdateActInput,
    UpdateChapterInput,
    UpdateSceneInput,
    UpdateStoryInput,
    validate_input,
)


class TestCreateContracts:
    def test_story_requires_title(self):
        with pytest.raises(ValidationError) as exc:
            validate_input(CreateStoryInput, {"logline": "x"})
        assert exc.value.details["errors"][0]["field"] == "title"

    def test_story_rejects_empty_title(self):
        with pytest.raises(ValidationError):
            validate_input(CreateStoryInput, {"title": ""})

    def test_camel_case_and_snake_case_accepted(self):
        camel = validate_input(CreateStoryInput, {"title": "A", "targetAudience": "YA"})
        snake = validate_input(CreateStoryInput, {"title": "A", "target_audience": "YA"})
        assert camel.target_audience == snake.target_audience == "YA"

    def test_unknown_keys_ignored(self):
        data = validate_input(CreateStoryInput, {"title": "A", "userId": "someone-else"})
        assert not hasattr(data, "user_id")

    def test_order_index_defaults_to_one(self):
        assert validate_input(CreateActInput, {"storyId": "s1"}).order_index == 1
        assert validate_input(CreateChapterInput, {"storyId": "s1"}).order_index == 1
        assert validate_input(CreateSceneInput, {"storyId": "s1"}).order_index == 1

    @pytest.mark.parametrize("value", [1.5, "2", True])
    def test_order_index_must_be_integer(self, value):
        with pytest.raises(ValidationError):
            validate_input(CreateActInput, {"storyId": "s1", "orderIndex": value})

    @pytest.mark.parametrize("value", [2**63, -2**63 - 1])
    def test_order_index_bounded_to_64_bits(self, value):
        with pytest.raises(ValidationError):
            validate_input(CreateSceneInput, {"storyId": "s1", "orderIndex": value})
        with pytest.raises(ValidationError):
            validate_input(UpdateChapterInput, {"id": "c1", "storyId": "s1", "orderIndex": value})

    def test_ancestor_defaults_to_absent(self):
        assert validate_input(CreateChapterInput, {"storyId": "s1"}).act_id is None
        assert validate_input(CreateSceneInput, {"storyId": "s1"}).chapter_id is None

    def test_blank_ancestor_is_absent(self):
        assert validate_input(CreateChapterInput, {"storyId": "s1", "actId": ""}).act_id is None
        assert validate_input(ListChaptersInput, {"storyId": "s1", "actId": ""}).act_id is None

    def test_story_id_required(self):
        with pytest.raises(ValidationError):
            validate_input(CreateSceneInput, {"setting": "Harbour"})

    def test_text_fields_must_be_strings(self):
        with pytest.raises(ValidationError):
            validate_input(CreateSceneInput, {"storyId": "s1", "goal": 42})


class TestUpdateContracts:
    def test_no_fields_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_input(UpdateStoryInput, {"id": "s1"})
        assert exc.value.message == NO_OP_UPDATE_MESSAGE

    def test_keys_do_not_count_as_changes(self):
        with pytest.raises(ValidationError, match="At least one field"):
            validate_input(UpdateActInput, {"id": "a1", "storyId": "s1"})

    def test_unknown_keys_do_not_count_as_changes(self):
        with pytest.raises(ValidationError, match="At least one field"):
            validate_input(UpdateSceneInput, {"id": "x1", "storyId": "s1", "mood": "grim"})

    def test_changes_contains_only_supplied_fields(self):
        data = validate_input(UpdateChapterInput, {"id": "c1", "storyId": "s1", "title": "New"})
        assert data.changes() == {"title": "New"}

    def test_null_clears_optional_text(self):
        data = validate_input(UpdateStoryInput, {"id": "s1", "notes": None})
        assert data.changes() == {"notes": None}

    def test_null_title_rejected(self):
        with pytest.raises(ValidationError):
            validate_input(UpdateStoryInput, {"id": "s1", "title": None})

    def test_null_order_index_rejected(self):
        with pytest.raises(ValidationError):
            validate_input(UpdateActInput, {"id": "a1", "storyId": "s1", "orderIndex": None})

    def test_null_ancestor_means_detach(self):
        data = validate_input(UpdateChapterInput, {"id": "c1", "storyId": "s1", "actId": None})
        assert data.changes() == {"act_id": None}

    def test_empty_ancestor_rejected_on_update(self):
        with pytest.raises(ValidationError):
            validate_input(UpdateSceneInput, {"id": "x1", "storyId": "s1", "chapterId": ""})

    def test_update_requires_ids(self):
        with pytest.raises(ValidationError):
            validate_input(UpdateActInput, {"storyId": "s1", "title": "x"})


class TestValidateInput:
    def test_none_is_empty_object(self):
        assert isinstance(validate_input(ListStoriesInput, None), ListStoriesInput)

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError, match="must be an object"):
            validate_input(EntityKeyInput, ["a1", "s1"])

    def test_errors_listed_per_field(self):
        with pytest.raises(ValidationError) as exc:
            validate_input(EntityKeyInput, {})
        fields = {e["field"] for e in exc.value.details["errors"]}
        assert fields == {"id", "storyId"}
