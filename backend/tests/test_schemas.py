import json

import pytest
from pydantic import ValidationError

from story_testgen.core.errors import format_validation_errors
from story_testgen.schemas.jira import JiraConnectionRequest, JiraSprintsRequest
from story_testgen.schemas.testcase import (
    GenerateMultiRequest,
    GenerateRequest,
    GenerateResponse,
    UserStory,
)

from conftest import make_case


def _errors(exc_info) -> str:
    return format_validation_errors(exc_info.value.errors())


class TestGenerateRequest:
    def test_accepts_camel_case_wire_payload(self):
        req = GenerateRequest.model_validate(
            {
                "storyTitle": "Login",
                "acceptanceCriteria": "User can log in",
                "additionalInfo": "Chrome only",
            }
        )
        assert req.story_title == "Login"
        assert req.description is None
        assert req.additional_info == "Chrome only"

    def test_empty_story_title_cites_field(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerateRequest.model_validate({"storyTitle": "", "acceptanceCriteria": "x"})
        message = _errors(exc_info)
        assert message.startswith("storyTitle:")
        assert "Story title is required" in message

    def test_missing_fields_are_all_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerateRequest.model_validate({})
        message = _errors(exc_info)
        assert "storyTitle" in message
        assert "acceptanceCriteria" in message

    def test_empty_acceptance_criteria_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerateRequest.model_validate({"storyTitle": "Login", "acceptanceCriteria": ""})
        assert "Acceptance criteria is required" in _errors(exc_info)


class TestGenerateMultiRequest:
    def _story(self, **overrides):
        story = {"id": "10001", "key": "APP-1", "title": "Login", "description": ""}
        story.update(overrides)
        return story

    def test_empty_stories_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerateMultiRequest.model_validate({"stories": []})
        assert "At least one story is required" in _errors(exc_info)

    def test_duplicate_story_ids_accepted(self):
        req = GenerateMultiRequest.model_validate(
            {"stories": [self._story(), self._story(key="APP-2", title="Logout")]}
        )
        assert [s.id for s in req.stories] == ["10001", "10001"]

    def test_story_description_must_be_present_but_may_be_empty(self):
        story = self._story()
        del story["description"]
        with pytest.raises(ValidationError) as exc_info:
            GenerateMultiRequest.model_validate({"stories": [story]})
        assert "stories.0.description" in _errors(exc_info)

    @pytest.mark.parametrize("field", ["id", "key", "title"])
    def test_story_identity_fields_must_be_non_empty(self, field):
        with pytest.raises(ValidationError) as exc_info:
            UserStory.model_validate(self._story(**{field: ""}))
        assert field in _errors(exc_info)


class TestGenerateResponse:
    def test_wire_round_trip(self):
        original = GenerateResponse.model_validate(
            {
                "cases": [
                    make_case("TC-001", storyName="Login"),
                    make_case("TC-002", testData=None, category="Edge"),
                ],
                "model": "gpt-4o-mini",
                "promptTokens": 10,
                "completionTokens": 20,
            }
        )
        decoded = GenerateResponse.model_validate(json.loads(json.dumps(original.to_wire())))
        assert decoded == original

    def test_wire_uses_camel_case_and_omits_missing_optionals(self):
        response = GenerateResponse.model_validate(
            {"cases": [make_case(testData=None)], "promptTokens": 1, "completionTokens": 2}
        )
        wire = response.to_wire()
        assert set(wire) == {"cases", "promptTokens", "completionTokens"}
        assert "expectedResult" in wire["cases"][0]
        assert "testData" not in wire["cases"][0]

    def test_negative_token_counts_rejected(self):
        with pytest.raises(ValidationError):
            GenerateResponse.model_validate(
                {"cases": [], "promptTokens": -1, "completionTokens": 0}
            )

    def test_category_is_an_open_string(self):
        response = GenerateResponse.model_validate(
            {"cases": [make_case(category="Usability")], "promptTokens": 0, "completionTokens": 0}
        )
        assert response.cases[0].category == "Usability"


class TestJiraRequests:
    def test_connection_request_validates_url_and_email(self):
        with pytest.raises(ValidationError) as exc_info:
            JiraConnectionRequest.model_validate(
                {"baseUrl": "not a url", "email": "nobody", "apiKey": ""}
            )
        message = _errors(exc_info)
        assert "baseUrl: Invalid Jira base URL" in message
        assert "email: Invalid email" in message
        assert "apiKey: API key is required" in message

    def test_sprints_request_requires_project_key(self):
        with pytest.raises(ValidationError) as exc_info:
            JiraSprintsRequest.model_validate(
                {"baseUrl": "https://acme.atlassian.net", "email": "qa@acme.io", "apiKey": "k"}
            )
        assert "projectKey" in _errors(exc_info)
