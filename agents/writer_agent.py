# agents/writer_agent.py
from models import InlineComment

DEFAULT_TITLE = "## Review Ranger Code Review"

SUGGESTION_PREFIX = "Code Suggestion:"
REASONING_PREFIX = "Reasoning:"


def _suggestion_block(suggestion: str) -> str:
    return "**Code Suggestion:**\n```suggestion\n" + suggestion + "\n```\n\n"


def format_review(review: str, title: str = DEFAULT_TITLE) -> str:
    """
    Rewrite the aggregated review for a PR comment or check run.

    Code Suggestion lines become GitHub suggestion blocks and Reasoning lines
    get a bold label; every other line passes through unchanged. Prefixes are
    matched on the stripped line, the same way the inline comment parser
    reads them.
    """
    out = [title + "\n\n"]
    for line in review.split("\n"):
        stripped = line.strip()
        if stripped.startswith(SUGGESTION_PREFIX):
            suggestion = stripped[len(SUGGESTION_PREFIX):].strip()
            out.append(_suggestion_block(suggestion))
        elif stripped.startswith(REASONING_PREFIX):
            reasoning = stripped[len(REASONING_PREFIX):].strip()
            out.append("**Reasoning:** " + reasoning + "\n\n")
        else:
            out.append(line + "\n")
    return "".join(out)


def render_inline_comment(comment: InlineComment) -> str:
    """Body of a single inline review comment."""
    return _suggestion_block(comment.suggestion) + "**Reasoning:** " + comment.reasoning
