from __future__ import annotations

from typing import Optional, Sequence

from story_testgen.schemas.testcase import GenerateRequest, UserStory


SYSTEM_PROMPT = """
You are a senior QA engineer with expertise in creating comprehensive test cases from user stories. Your task is to analyze user stories and generate detailed test cases.

CRITICAL: You must return ONLY valid JSON matching this exact schema:

{
  "cases": [
    {
      "id": "TC-001",
      "title": "string",
      "steps": ["string", "..."],
      "testData": "string (optional)",
      "expectedResult": "string",
      "category": "string (e.g., Positive|Negative|Edge|Authorization|Non-Functional)",
      "storyName": "string (optional - the story this test case belongs to)"
    }
  ],
  "model": "string (optional)",
  "promptTokens": 0,
  "completionTokens": 0
}

Guidelines:
- Generate test case IDs like TC-001, TC-002, etc.
- Write concise, imperative steps (e.g., "Click login button", "Enter valid email")
- Include Positive, Negative, and Edge test cases where relevant
- Categories: Positive, Negative, Edge, Authorization, Non-Functional
- Steps should be actionable and specific
- Expected results should be clear and measurable
- If multiple stories, include the story name/title in the storyName field so test cases are tracked with their source

Return ONLY the JSON object, no additional text or formatting.
""".strip()

COVERAGE_DIRECTIVE = (
    "positive scenarios, negative scenarios, edge cases, and any authorization "
    "or non-functional requirements as applicable"
)


def _section(label: str, body: str) -> str:
    return f"\n{label}:\n{body}\n"


def build_prompt(request: GenerateRequest) -> str:
    """
    Render the user instruction for a single typed-in story.

    Description and additional info sections are emitted only when present.
    """
    prompt = (
        "Generate comprehensive test cases for the following user story:\n\n"
        f"Story Title: {request.story_title}\n"
        f"{_section('Acceptance Criteria', request.acceptance_criteria)}"
    )
    if request.description:
        prompt += _section("Description", request.description)
    if request.additional_info:
        prompt += _section("Additional Information", request.additional_info)

    prompt += (
        f"\nGenerate test cases covering {COVERAGE_DIRECTIVE}. "
        "Return only the JSON response."
    )
    return prompt


def build_multi_prompt(
    stories: Sequence[UserStory],
    additional_info: Optional[str] = None,
) -> str:
    """
    Render the user instruction for a batch of tracker stories.

    Stories are numbered ``Story 1`` .. ``Story N`` in input order. The
    closing directive asks for every story to be covered, for ``storyName``
    to carry the source story title, and for ids unique across the batch.
    """
    blocks = [
        f"Story {index}:\n"
        f"Key: {story.key}\n"
        f"Title: {story.title}\n"
        f"Description: {story.description}\n"
        for index, story in enumerate(stories, start=1)
    ]
    prompt = (
        f"Generate comprehensive test cases for the following {len(stories)} user stories:\n\n"
        + "\n".join(blocks)
        + "\n"
    )
    if additional_info:
        prompt += _section("Additional Information", additional_info)

    prompt += f"""
IMPORTANT: Generate comprehensive test cases for ALL the above user stories, covering {COVERAGE_DIRECTIVE}.

For EACH test case generated, set the "storyName" field to the story's title so test cases are correctly associated with their source stories. This is critical for multi-story test generation.

Ensure test case IDs are unique across all stories (TC-001, TC-002, etc.). Return only the JSON response."""
    return prompt
