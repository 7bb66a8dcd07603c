from typing import Optional


def build_summary_prompt(diff_text: str) -> str:
    prompt = """Provide a high-level summary of the following code changes, including overall impact, potential issues, and recommendations:"""
    return prompt + "\n\n" + diff_text


async def summary_agent(client, model: str, diff_text: str, timeout: Optional[float] = None) -> str:
    """Ask for the overall impact/risk summary. Callers truncate oversized diffs first."""
    return await client.review(model, build_summary_prompt(diff_text), timeout)
