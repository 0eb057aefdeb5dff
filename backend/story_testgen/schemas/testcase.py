from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, conint, constr, field_validator
from pydantic.alias_generators import to_camel


# Conventional categories; the model may return others and they are accepted.
TEST_CASE_CATEGORIES: tuple[str, ...] = (
    "Positive",
    "Negative",
    "Edge",
    "Authorization",
    "Non-Functional",
)


class CamelModel(BaseModel):
    """
    Base model for wire payloads.

    Attributes are snake_case in Python and camelCase on the wire. Both
    spellings are accepted on input; responses are serialized by alias.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def _require_text(value: str, message: str) -> str:
    if not value:
        raise ValueError(message)
    return value


class GenerateRequest(CamelModel):
    """
    A single user story typed in by the user.
    """

    story_title: str = Field(..., description="Title of the user story.")
    acceptance_criteria: str = Field(
        ...,
        description="Acceptance criteria, free text (usually one criterion per line).",
    )
    description: Optional[str] = Field(
        default=None,
        description="Optional longer description of the story.",
    )
    additional_info: Optional[str] = Field(
        default=None,
        description="Optional extra context for the model (environments, roles, constraints).",
    )

    @field_validator("story_title")
    @classmethod
    def _story_title_required(cls, value: str) -> str:
        return _require_text(value, "Story title is required")

    @field_validator("acceptance_criteria")
    @classmethod
    def _acceptance_criteria_required(cls, value: str) -> str:
        return _require_text(value, "Acceptance criteria is required")


class UserStory(CamelModel):
    """
    A story record as returned by the issue tracker.

    ``description`` must be present but may be empty.
    """

    id: constr(min_length=1)
    key: constr(min_length=1)
    title: constr(min_length=1)
    description: str


class GenerateMultiRequest(CamelModel):
    stories: List[UserStory] = Field(
        ...,
        description="Stories to cover, in display order. Duplicate ids are allowed.",
    )
    additional_info: Optional[str] = None

    @field_validator("stories")
    @classmethod
    def _at_least_one_story(cls, value: List[UserStory]) -> List[UserStory]:
        if not value:
            raise ValueError("At least one story is required")
        return value


class TestCase(CamelModel):
    """
    One generated test case.

    ``id`` follows the ``TC-001`` convention requested in the prompt; it is
    not pattern-checked because the model owns the numbering.
    """

    __test__ = False  # not a pytest test class

    id: constr(min_length=1)
    title: constr(min_length=1)
    steps: List[str] = Field(..., description="Ordered, imperative steps.")
    test_data: Optional[str] = None
    expected_result: constr(min_length=1)
    category: constr(min_length=1) = Field(
        ...,
        description="Usually one of Positive, Negative, Edge, Authorization, Non-Functional.",
    )
    story_name: Optional[str] = Field(
        default=None,
        description="Title of the source story when generated from a multi-story batch.",
    )


class GenerateResponse(CamelModel):
    cases: List[TestCase]
    model: Optional[str] = None
    prompt_tokens: conint(ge=0)
    completion_tokens: conint(ge=0)


class ExportRequest(CamelModel):
    """Payload for the CSV / XLSX export endpoints."""

    story_title: constr(min_length=1) = Field(
        ...,
        description="Shown in the sheet header and used for the download filename.",
    )
    cases: List[TestCase]


class ErrorResponse(BaseModel):
    error: str
