from typing import Dict, List, Optional, Union

from models import InlineComment

BLOCK_MARKER = "InlineComment:"

# prefix -> InlineComment field
FIELD_PREFIXES = (
    ("File:", "file"),
    ("Line:", "line"),
    ("Code Suggestion:", "suggestion"),
    ("Reasoning:", "reasoning"),
)


def _parse_line_number(value: str) -> Optional[int]:
    # optional sign, then ASCII digits only
    digits = value[1:] if value[:1] in ("+", "-") else value
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(value)


def parse_inline_comments(review: str) -> List[InlineComment]:
    """
    Extract inline comments from the aggregated review text.

    A block opens on a line that is exactly "InlineComment:" and is flushed
    when the next marker or the end of the text is reached, so a block that
    never got its Reasoning line is still returned (with that field empty).
    Lines are stripped before matching; prefixes are case-sensitive.
    Recognised prefixes repeated inside one block overwrite the earlier value,
    and a non-numeric Line leaves the line at 0.
    """
    comments: List[InlineComment] = []
    current: Optional[Dict[str, Union[str, int]]] = None

    for raw in review.split("\n"):
        line = raw.strip()
        if line == BLOCK_MARKER:
            if current is not None:
                comments.append(InlineComment(**current))
            current = {}
            continue
        if current is None:
            continue
        for prefix, field in FIELD_PREFIXES:
            if not line.startswith(prefix):
                continue
            value = line[len(prefix):].strip()
            if field == "line":
                number = _parse_line_number(value)
                if number is not None:
                    current[field] = number
            else:
                current[field] = value
            break

    if current is not None:
        comments.append(InlineComment(**current))
    return comments
