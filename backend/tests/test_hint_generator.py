"""Tests for prompt building, output budgets, and resource parsing."""

import json

import pytest

from homework_helper.errors import AIGenerationFailed
from homework_helper.services.hint_generator import (
    LATEX_DIRECTIVE,
    HintStage,
    build_prompt,
    format_resources_message,
    parse_resources,
    to_model_history,
    trim_hint,
)
from homework_helper.services.resource_fallback import fallback_resources

VALID_RESOURCES = [
    {
        "topic": "Linear Equations",
        "links": [
            {
                "title": "Khan Academy - One-step equations",
                "url": "https://www.khanacademy.org/math/algebra/one-variable-linear-equations",
                "snippet": "Practice isolating a variable.",
            }
        ],
    }
]


# =============================================================================
# PROMPTS
# =============================================================================


def test_first_prompt_contains_instruction_problem_latex_and_closing():
    prompt = build_prompt(HintStage.FIRST, "Solve 2x+3=7")

    assert prompt.startswith("You are a homework helper that only provides small hints")
    assert "Problem: Solve 2x+3=7" in prompt
    assert LATEX_DIRECTIVE in prompt
    assert prompt.rstrip().endswith("without revealing too much.")


def test_second_prompt_mentions_word_budget():
    prompt = build_prompt(HintStage.SECOND, "Solve 2x+3=7")

    assert "UNDER 200 WORDS" in prompt
    assert "second hint request" in prompt


def test_follow_up_included_only_when_different():
    assert "Follow-up" not in build_prompt(HintStage.SECOND, "Solve 2x+3=7", "Solve 2x+3=7")
    prompt = build_prompt(HintStage.SECOND, "Solve 2x+3=7", "What do I subtract?")
    assert "Follow-up from the student: What do I subtract?" in prompt


def test_resources_stage_has_no_hint_prompt():
    with pytest.raises(ValueError):
        build_prompt(HintStage.RESOURCES, "Solve 2x+3=7")


def test_history_merges_consecutive_roles():
    history = to_model_history(
        [
            {"role": "user", "content": "a"},
            {"role": "assistant", "content": "b"},
            {"role": "assistant", "content": "c"},
            {"role": "user", "content": "d"},
        ]
    )

    assert history == [
        {"role": "user", "content": "a"},
        {"role": "assistant", "content": "b\n\nc"},
        {"role": "user", "content": "d"},
    ]


# =============================================================================
# BUDGETS
# =============================================================================


def test_long_first_hint_truncated_to_97_chars_plus_ellipsis():
    raw = "x" * 500

    hint = trim_hint(HintStage.FIRST, raw)

    assert len(hint) == 100
    assert hint == raw[:97] + "..."


def test_short_first_hint_untouched():
    assert trim_hint(HintStage.FIRST, "  Subtract 3 from both sides.\n") == "Subtract 3 from both sides."


def test_exactly_100_chars_is_within_budget():
    raw = "y" * 100
    assert trim_hint(HintStage.FIRST, raw) == raw


def test_long_second_hint_cut_to_200_words():
    raw = " ".join(f"word{i}" for i in range(350))

    hint = trim_hint(HintStage.SECOND, raw)

    words = hint.split()
    assert len(words) == 200
    assert words[-1] == "word199..."


def test_second_hint_within_budget_untouched():
    raw = "Think about inverse operations.\n\nWhat undoes addition?"
    assert trim_hint(HintStage.SECOND, raw) == raw


# =============================================================================
# RESOURCE PARSING
# =============================================================================


def test_parse_resources_plain_json():
    topics = parse_resources(json.dumps(VALID_RESOURCES))

    assert topics is not None
    assert topics[0].topic == "Linear Equations"
    assert topics[0].links[0].snippet == "Practice isolating a variable."


def test_parse_resources_accepts_code_fence():
    text = "```json\n" + json.dumps(VALID_RESOURCES) + "\n```"
    assert parse_resources(text) is not None


@pytest.mark.parametrize(
    "text",
    [
        "Here are some resources: Khan Academy",
        "[]",
        json.dumps([{"topic": "Algebra", "links": []}]),
        json.dumps([{"topic": "Algebra", "links": [{"title": "Bad", "url": "ftp://example.com"}]}]),
        "Sure! " + json.dumps(VALID_RESOURCES),
    ],
)
def test_parse_resources_rejects_anything_else(text):
    assert parse_resources(text) is None


def test_resource_message_markdown():
    content = format_resources_message(fallback_resources("Solve 2x+3=7"))

    assert content.startswith("## Educational Resources for Your Problem")
    assert "### Mathematics" in content
    assert "- **[Wolfram Alpha](https://www.wolframalpha.com)** - " in content


# =============================================================================
# MODEL CALLS
# =============================================================================


async def test_generate_hint_sends_history_and_prompt(generator, fake_llm):
    fake_llm.messages.replies.append("Subtract 3 from both sides.")
    history = [
        {"role": "user", "content": "Solve 2x+3=7"},
        {"role": "assistant", "content": "Undo the +3."},
    ]

    hint = await generator.generate_hint(HintStage.SECOND, "Solve 2x+3=7", history)

    assert hint == "Subtract 3 from both sides."
    sent = fake_llm.messages.calls[0]["messages"]
    assert [turn["role"] for turn in sent] == ["user", "assistant", "user"]
    assert "Problem: Solve 2x+3=7" in sent[-1]["content"]


async def test_generate_hint_enforces_budget_on_engineered_response(generator, fake_llm):
    fake_llm.messages.replies.append("z" * 500)

    hint = await generator.generate_hint(HintStage.FIRST, "Solve 2x+3=7", [])

    assert len(hint) == 100
    assert hint.endswith("...")


async def test_generate_hint_failure_raises(generator, fake_llm):
    fake_llm.messages.replies.append(RuntimeError("connection reset"))

    with pytest.raises(AIGenerationFailed):
        await generator.generate_hint(HintStage.FIRST, "Solve 2x+3=7", [])
    assert len(fake_llm.messages.calls) == 1


async def test_generate_hint_empty_response_raises(generator, fake_llm):
    fake_llm.messages.replies.append("   ")

    with pytest.raises(AIGenerationFailed):
        await generator.generate_hint(HintStage.FIRST, "Solve 2x+3=7", [])


async def test_generate_resources_uses_model_output(generator, fake_llm):
    fake_llm.messages.replies.append(json.dumps(VALID_RESOURCES))

    topics = await generator.generate_resources("Solve 2x+3=7")

    assert [t.topic for t in topics] == ["Linear Equations"]


async def test_generate_resources_falls_back_on_unparseable_output(generator, fake_llm):
    fake_llm.messages.replies.append("I recommend Khan Academy.")

    topics = await generator.generate_resources("Solve 2x+3=7")

    assert topics == fallback_resources("Solve 2x+3=7")


async def test_generate_resources_falls_back_on_model_error(generator, fake_llm):
    fake_llm.messages.replies.append(RuntimeError("overloaded"))

    topics = await generator.generate_resources("Explain the causes of the French revolution")

    assert topics == fallback_resources("Explain the causes of the French revolution")
