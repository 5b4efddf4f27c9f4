"""Input contracts for every operation, and their validation entry point.

Contracts accept the camelCase wire names (``storyId``) as well as the
Python attribute names (``story_id``). Unknown keys are ignored.

Update contracts distinguish "not provided" from "provided as null":
only provided fields are applied. A null ancestor reference detaches the
entity from its act/chapter; a null title or orderIndex is rejected.
"""

from typing import Annotated, Any, ClassVar, Mapping, Optional, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from config.exceptions import ValidationError

NO_OP_UPDATE_MESSAGE = "At least one field must be provided to update."

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
Text = Optional[StrictStr]
# SQLite INTEGER range
OrderIndex = Annotated[StrictInt, Field(ge=-2**63, le=2**63 - 1)]


def _reject_null(value):
    if value is None:
        raise PydanticCustomError("not_nullable", "Field may not be null")
    return value


def _blank_ref_is_absent(value):
    # Falsy ancestor ids on create/list mean "no ancestor"
    if value == "":
        return None
    return value


class InputContract(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class UpdateContract(InputContract):
    """Base for partial updates: at least one mutable field must be set."""

    key_fields: ClassVar[frozenset[str]] = frozenset({"id", "story_id"})

    @model_validator(mode="after")
    def require_change(self):
        if not self.changes():
            raise PydanticCustomError("no_op_update", NO_OP_UPDATE_MESSAGE)
        return self

    def changes(self) -> dict:
        """Mutable fields the caller actually supplied, by attribute name."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name not in self.key_fields
        }


class _ChildUpdate(UpdateContract):
    id: NonEmptyStr
    story_id: NonEmptyStr
    order_index: Optional[OrderIndex] = None

    order_index_not_null = field_validator("order_index")(_reject_null)


# ---- Stories ----

class CreateStoryInput(InputContract):
    title: NonEmptyStr
    logline: Text = None
    genre: Text = None
    target_audience: Text = None
    status: Text = None
    notes: Text = None


class UpdateStoryInput(UpdateContract):
    key_fields: ClassVar[frozenset[str]] = frozenset({"id"})

    id: NonEmptyStr
    title: Optional[NonEmptyStr] = None
    logline: Text = None
    genre: Text = None
    target_audience: Text = None
    status: Text = None
    notes: Text = None

    title_not_null = field_validator("title")(_reject_null)


class ListStoriesInput(InputContract):
    pass


# ---- Acts ----

class CreateActInput(InputContract):
    story_id: NonEmptyStr
    order_index: OrderIndex = 1
    title: Text = None
    summary: Text = None


class UpdateActInput(_ChildUpdate):
    title: Text = None
    summary: Text = None


class EntityKeyInput(InputContract):
    """Identifies one child entity within a story (deletes)."""
    id: NonEmptyStr
    story_id: NonEmptyStr


class StoryScopeInput(InputContract):
    story_id: NonEmptyStr


# ---- Chapters ----

class CreateChapterInput(InputContract):
    story_id: NonEmptyStr
    act_id: Text = None
    order_index: OrderIndex = 1
    title: Text = None
    pov_character: Text = None
    summary: Text = None

    act_ref_blank_is_absent = field_validator("act_id")(_blank_ref_is_absent)


class UpdateChapterInput(_ChildUpdate):
    act_id: Optional[NonEmptyStr] = None
    title: Text = None
    pov_character: Text = None
    summary: Text = None


class ListChaptersInput(StoryScopeInput):
    act_id: Text = None

    act_ref_blank_is_absent = field_validator("act_id")(_blank_ref_is_absent)


# ---- Scenes ----

class CreateSceneInput(InputContract):
    story_id: NonEmptyStr
    chapter_id: Text = None
    order_index: OrderIndex = 1
    setting: Text = None
    goal: Text = None
    conflict: Text = None
    outcome: Text = None
    content: Text = None

    chapter_ref_blank_is_absent = field_validator("chapter_id")(_blank_ref_is_absent)


class UpdateSceneInput(_ChildUpdate):
    chapter_id: Optional[NonEmptyStr] = None
    setting: Text = None
    goal: Text = None
    conflict: Text = None
    outcome: Text = None
    content: Text = None


class ListScenesInput(StoryScopeInput):
    chapter_id: Text = None

    chapter_ref_blank_is_absent = field_validator("chapter_id")(_blank_ref_is_absent)


C = TypeVar("C", bound=InputContract)


def validate_input(contract: type[C], raw: Any) -> C:
    """Validate raw operation input against ``contract``.

    ``None`` is treated as an empty object.

    Raises:
        ValidationError: with per-field errors in ``details["errors"]``.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValidationError("Input must be an object.", {"received": type(raw).__name__})
    try:
        return contract.model_validate(dict(raw))
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        message = "; ".join(
            f"{err['field']}: {err['message']}" if err["field"] else err["message"]
            for err in errors
        )
        raise ValidationError(message, {"errors": errors}) from e
