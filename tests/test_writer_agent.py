from agents.detail_agent import build_detailed_prompt
from agents.summary_agent import build_summary_prompt
from agents.writer_agent import DEFAULT_TITLE, format_review, render_inline_comment
from models import InlineComment


def test_format_review_rewrites_protocol_lines():
    review = "Summary line\nCode Suggestion: x := 1\nReasoning: avoid shadowing\nFile: a.go"
    assert format_review(review) == (
        "## Review Ranger Code Review\n\n"
        "Summary line\n"
        "**Code Suggestion:**\n```suggestion\nx := 1\n```\n\n"
        "**Reasoning:** avoid shadowing\n\n"
        "File: a.go\n"
    )


def test_format_review_passes_other_lines_through():
    review = "### High-Level Summary\n  indented text\n\n- bullet"
    formatted = format_review(review)
    assert formatted.startswith(DEFAULT_TITLE + "\n\n")
    assert formatted[len(DEFAULT_TITLE) + 2:] == "### High-Level Summary\n  indented text\n\n- bullet\n"


def test_format_review_matches_indented_prefixes():
    formatted = format_review("   Reasoning:   spaced out  ")
    assert "**Reasoning:** spaced out\n\n" in formatted


def test_format_review_custom_title():
    assert format_review("", title="# Title").startswith("# Title\n\n")


def test_render_inline_comment():
    comment = InlineComment(file="a.go", line=3, suggestion="x := 1", reasoning="shorter")
    assert render_inline_comment(comment) == "**Code Suggestion:**\n```suggestion\nx := 1\n```\n\n**Reasoning:** shorter"


def test_detailed_prompt_names_protocol_and_ends_with_chunk():
    chunk = "diff --git a/x b/x\n+new line\n"
    prompt = build_detailed_prompt(chunk)
    for marker in ("InlineComment:\n", "File: ", "Line: ", "Code Suggestion: ", "Reasoning: "):
        assert marker in prompt
    assert "aggregated summary at the top" in prompt
    assert prompt.endswith(chunk)


def test_summary_prompt():
    prompt = build_summary_prompt("+x")
    assert prompt.startswith("Provide a high-level summary of the following code changes")
    assert "recommendations" in prompt
    assert prompt.endswith(":\n\n+x")


def test_prompts_are_deterministic():
    assert build_detailed_prompt("abc") == build_detailed_prompt("abc")
    assert build_summary_prompt("abc") == build_summary_prompt("abc")
