from unidiff import PatchSet
from unidiff.errors import UnidiffParseError
from typing import Dict, List, Optional, Set
from models import DiffHunk


def split_into_chunks(diff_text: str, max_size: int) -> List[str]:
    """
    Split a diff into line-aligned chunks of at most max_size characters.

    A line longer than max_size is never cut; it becomes its own oversized
    chunk. Joining the chunks gives back the diff, plus at most one trailing
    newline.
    """
    if max_size <= 0:
        raise ValueError("max_size must be positive")
    if len(diff_text) <= max_size:
        return [diff_text]

    chunks: List[str] = []
    current: List[str] = []
    current_len = 0
    for line in diff_text.split("\n"):
        if current and current_len + len(line) + 1 > max_size:
            chunks.append("".join(current))
            current = []
            current_len = 0
        current.append(line + "\n")
        current_len += len(line) + 1

    if current:
        chunks.append("".join(current))
    return chunks


def parse_unified_diff(diff_text: str) -> List[DiffHunk]:
    patch = PatchSet(diff_text.splitlines(keepends=True))
    hunks = []
    for patched_file in patch:
        file_path = patched_file.path
        for hunk in patched_file:
            target = [line.target_line_no for line in hunk if line.target_line_no is not None]
            hunks.append(DiffHunk(file_path=file_path, target_lines=target))
    return hunks


def commentable_lines(diff_text: str) -> Optional[Dict[str, Set[int]]]:
    """
    Map each file path to the target-side line numbers present in the diff.

    Returns None when the text is not a parseable unified diff (or holds no
    hunks), in which case callers cannot tell which lines are addressable.
    """
    try:
        hunks = parse_unified_diff(diff_text)
    except UnidiffParseError:
        return None
    if not hunks:
        return None
    lines: Dict[str, Set[int]] = {}
    for h in hunks:
        lines.setdefault(h.file_path, set()).update(h.target_lines)
    return lines
