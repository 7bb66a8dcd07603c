from typing import Optional

INLINE_COMMENT_PROTOCOL = (
    "InlineComment:\n"
    "File: <file path>\n"
    "Line: <line number>\n"
    "Code Suggestion: <your suggested code change>\n"
    "Reasoning: <explanation for the suggestion>\n"
)


def build_detailed_prompt(diff_chunk: str) -> str:
    return (
        "Perform a detailed, line-by-line review of the following code changes. "
        "For each changed line, output your review in the following format (each on a separate line):\n"
        + INLINE_COMMENT_PROTOCOL
        + "\nThen, provide an aggregated summary at the top.\n\n"
        + diff_chunk
    )


async def detail_agent(client, model: str, diff_chunk: str, timeout: Optional[float] = None) -> str:
    return await client.review(model, build_detailed_prompt(diff_chunk), timeout)
