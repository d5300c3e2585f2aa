"""
Hint and resource generation with the Anthropic API.

Each hint stage has its own prompt and a hard output budget that is enforced
after the call, regardless of what the model returns:

- first:     at most `first_hint_max_chars` characters
- second:    at most `second_hint_max_words` words
- resources: a JSON list of topics, or the keyword fallback
"""

import json
import logging
from collections.abc import Iterable, Sequence
from enum import Enum

from anthropic import AsyncAnthropic
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from homework_helper.config import get_settings
from homework_helper.errors import AIGenerationFailed
from homework_helper.schemas.resources import ResourceTopic
from homework_helper.services.resource_fallback import fallback_resources

logger = logging.getLogger(__name__)
settings = get_settings()

ELLIPSIS = "..."


class HintStage(str, Enum):
    FIRST = "first"
    SECOND = "second"
    RESOURCES = "resources"


SYSTEM_PROMPT = (
    "You are a patient homework helper for students. You guide students toward "
    "the answer with hints and never hand out complete solutions."
)

_STAGE_INSTRUCTIONS = {
    HintStage.FIRST: (
        "You are a homework helper that only provides small hints, not full solutions. "
        "Give a brief, subtle hint that points the student in the right direction without "
        "revealing too much. Your hint MUST be UNDER 100 CHARACTERS total - be very concise and brief."
    ),
    HintStage.SECOND: (
        "You are a homework helper providing a follow-up hint. Since this is the second hint, "
        "provide a more detailed explanation that helps the student understand the core concepts "
        "needed to solve the problem, but still leave the final solution for them to discover. "
        "YOUR HINT MUST BE UNDER 200 WORDS TOTAL."
    ),
}

_CLOSING_DIRECTIVES = {
    HintStage.FIRST: (
        "Please give me a very small, subtle hint (under 100 characters) that will guide me "
        "in the right direction without revealing too much."
    ),
    HintStage.SECOND: (
        "This is my second hint request, so please provide more guidance than before "
        "(under 200 words), but still let me solve it on my own."
    ),
}

LATEX_DIRECTIVE = (
    "When your answer includes mathematical expressions or equations, use proper LaTeX "
    "formatting with $ for inline math and $$ for display math. Make your response "
    "visually clear and well-formatted."
)

RESOURCES_PROMPT = """I'm trying to understand the following homework problem or topic better:

"{question}"

Please provide 3-4 educational resources that would help me learn the fundamental concepts needed to understand this topic.

1. Group resources by clear, specific subject topics (like "Trigonometric Equations", "Linear Algebra", etc.)
2. Provide actual working URLs to reliable educational websites
3. Add a one-sentence snippet explaining how each resource helps with this problem

Respond with ONLY a JSON array, no other text, following this structure exactly:
[
  {{
    "topic": "Specific Subject Topic Name",
    "links": [
      {{
        "title": "Resource Name",
        "url": "https://specific-working-url.com/specific-page",
        "snippet": "How this resource helps."
      }}
    ]
  }}
]"""

_RESOURCES_ADAPTER = TypeAdapter(list[ResourceTopic])


# =============================================================================
# PROMPTS AND POST-PROCESSING
# =============================================================================


def build_prompt(stage: HintStage, problem: str, follow_up: str | None = None) -> str:
    """Assemble the user turn for a hint stage."""
    if stage not in _STAGE_INSTRUCTIONS:
        raise ValueError(f"No hint prompt for stage {stage!r}")

    parts = [_STAGE_INSTRUCTIONS[stage], f"Problem: {problem}"]
    if follow_up and follow_up.strip() != problem.strip():
        parts.append(f"Follow-up from the student: {follow_up}")
    parts.append(LATEX_DIRECTIVE)
    parts.append(_CLOSING_DIRECTIVES[stage])
    return "\n\n".join(parts)


def trim_hint(stage: HintStage, text: str) -> str:
    """Enforce the stage's output budget."""
    text = text.strip()
    if stage is HintStage.FIRST:
        limit = settings.first_hint_max_chars
        if len(text) > limit:
            logger.warning("First hint was too long (%d chars), truncating", len(text))
            text = text[: limit - len(ELLIPSIS)] + ELLIPSIS
    elif stage is HintStage.SECOND:
        limit = settings.second_hint_max_words
        words = text.split()
        if len(words) > limit:
            logger.warning("Second hint exceeded word limit (%d words), truncating", len(words))
            text = " ".join(words[:limit]) + ELLIPSIS
    return text


def to_model_history(messages: Iterable[dict]) -> list[dict]:
    """
    Map stored messages onto Anthropic turns.

    Anthropic requires alternating roles, so consecutive messages with the
    same role are merged into one turn.
    """
    turns: list[dict] = []
    for message in messages:
        role = "user" if message["role"] == "user" else "assistant"
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += "\n\n" + message["content"]
        else:
            turns.append({"role": role, "content": message["content"]})
    return turns


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```") and stripped.endswith("```") and len(stripped) > 6:
        body = stripped[3:-3]
        # Drop an optional language tag on the opening fence
        first_newline = body.find("\n")
        if first_newline != -1 and body[:first_newline].strip().isalpha():
            body = body[first_newline + 1:]
        return body.strip()
    return stripped


def parse_resources(text: str) -> list[ResourceTopic] | None:
    """
    Decode the model's resource list.

    The response must be a JSON array of topics (optionally wrapped in one
    markdown code fence). Returns None when it is anything else.
    """
    try:
        topics = _RESOURCES_ADAPTER.validate_json(_strip_code_fence(text))
    except (SchemaError, json.JSONDecodeError, ValueError):
        return None
    return topics or None


def format_resources_message(topics: Sequence[ResourceTopic]) -> str:
    """Render topics as the markdown body of a resource message."""
    lines = ["## Educational Resources for Your Problem", ""]
    for topic in topics:
        lines.append(f"### {topic.topic}")
        for link in topic.links:
            entry = f"- **[{link.title}]({link.url})**"
            if link.snippet:
                entry += f" - {link.snippet}"
            lines.append(entry)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def _response_text(message) -> str:
    return "".join(
        block.text for block in message.content if getattr(block, "type", None) == "text"
    )


# =============================================================================
# SERVICE
# =============================================================================


class HintGenerator:
    """Calls the model for hints and resources."""

    def __init__(self, client: AsyncAnthropic | None = None):
        """Initialize Anthropic client."""
        self.client = client or AsyncAnthropic(api_key=settings.anthropic_api_key)

    async def generate_hint(
        self,
        stage: HintStage,
        problem: str,
        history: Sequence[dict],
        follow_up: str | None = None,
    ) -> str:
        """
        Generate a hint for the first or second stage.

        Args:
            stage: HintStage.FIRST or HintStage.SECOND
            problem: The original problem statement
            history: Prior messages (dicts with 'role' and 'content')
            follow_up: Newly submitted student text, if any

        Returns:
            The hint, trimmed to the stage's budget

        Raises:
            AIGenerationFailed: the call failed or returned no text. Not retried.
        """
        prompt = build_prompt(stage, problem, follow_up)
        messages = to_model_history([*history, {"role": "user", "content": prompt}])

        try:
            response = await self.client.messages.create(
                model=settings.llm_model,
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_hint_temperature,
                system=SYSTEM_PROMPT,
                messages=messages,
            )
        except Exception as e:
            logger.exception("Error generating %s hint", stage.value)
            raise AIGenerationFailed() from e

        text = _response_text(response)
        if not text.strip():
            logger.error("Model returned an empty %s hint", stage.value)
            raise AIGenerationFailed("The model returned an empty hint")
        return trim_hint(stage, text)

    async def generate_resources(self, question: str) -> list[ResourceTopic]:
        """
        Suggest learning resources for a question.

        Never raises: any failure to call the model or to decode its answer
        falls back to the keyword-based resource set.
        """
        prompt = RESOURCES_PROMPT.format(question=question[:500])
        try:
            response = await self.client.messages.create(
                model=settings.llm_model,
                max_tokens=settings.llm_resources_max_tokens,
                temperature=settings.llm_resources_temperature,
                messages=[{"role": "user", "content": prompt}],
            )
            text = _response_text(response)
        except Exception:
            logger.exception("Resource generation failed, using fallback resources")
            return fallback_resources(question)

        topics = parse_resources(text)
        if topics is None:
            logger.warning("Could not parse resources from model response, using fallback resources")
            return fallback_resources(question)
        return topics


# Singleton instance
hint_generator = HintGenerator()
