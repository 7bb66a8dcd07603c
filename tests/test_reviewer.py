import asyncio

import pytest

from agents.detail_agent import build_detailed_prompt
from agents.summary_agent import build_summary_prompt
from diff_parser import split_into_chunks
from errors import ApiError
from reviewer import aggregate_sections, review_diff

from conftest import FakeReviewClient


def chunk_tag(prompt: str) -> str:
    """Answer with the first diff line found in the prompt so reviews can be traced to chunks."""
    if prompt.startswith("Provide a high-level summary"):
        return "summary"
    for line in prompt.split("\n"):
        if line.startswith("+chunk"):
            return f"review of {line[1:].split()[0]}"
    return "summary"


def large_diff() -> str:
    # three 40-char lines per marker, so every chunk of 130 chars starts with a marker line
    lines = []
    for n in (1, 2, 3):
        lines.append(f"+chunk{n} ".ljust(40, "a"))
        lines.append("+".ljust(40, "b"))
        lines.append("+".ljust(40, "c"))
    return "\n".join(lines)


@pytest.mark.asyncio
async def test_empty_diff_is_noop(fake_client):
    assert await review_diff("  \n\t\n", client=fake_client, model="gpt-4") is None
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_small_diff_single_call(fake_client, sample_diff):
    fake_client.responder = lambda prompt: "InlineComment:\nFile: a.py\n"
    review = await review_diff(sample_diff, client=fake_client, model="gpt-4", timeout=12.0)

    assert len(fake_client.calls) == 1
    model, prompt, timeout = fake_client.calls[0]
    assert model == "gpt-4"
    assert timeout == 12.0
    assert prompt == build_detailed_prompt(sample_diff.strip())
    assert review.text == "InlineComment:\nFile: a.py\n"
    assert review.summary is None
    assert review.chunk_count == 1


@pytest.mark.asyncio
async def test_large_diff_summary_then_chunks_in_order():
    diff = large_diff()
    client = FakeReviewClient(responder=chunk_tag)
    review = await review_diff(diff, client=client, model="gpt-4", max_chunk_size=130)

    chunks = split_into_chunks(diff, 130)
    assert len(chunks) == 3
    assert len(client.calls) == 4
    assert client.calls[0][1] == build_summary_prompt(diff[:130])
    assert [c[1] for c in client.calls[1:]] == [build_detailed_prompt(c) for c in chunks]

    assert review.chunk_count == 3
    assert review.summary == "summary"
    assert review.details == ["review of chunk1", "review of chunk2", "review of chunk3"]
    assert review.text == (
        "### High-Level Summary\nsummary\n\n"
        "### Detailed Review\nreview of chunk1\n\nreview of chunk2\n\nreview of chunk3"
    )


@pytest.mark.asyncio
async def test_concurrent_chunks_keep_diff_order():
    # call 1 is chunk1 (after the summary at index 0); make it the slowest
    client = FakeReviewClient(responder=chunk_tag, delays={1: 0.2, 2: 0.1})
    review = await review_diff(large_diff(), client=client, model="gpt-4", max_chunk_size=130, concurrency=3)
    assert review.details == ["review of chunk1", "review of chunk2", "review of chunk3"]


@pytest.mark.asyncio
async def test_summary_failure_aborts_before_chunks():
    def responder(prompt):
        raise ApiError("summary down", attempts=3)

    client = FakeReviewClient(responder=responder)
    with pytest.raises(ApiError):
        await review_diff(large_diff(), client=client, model="gpt-4", max_chunk_size=130)
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_chunk_failure_aborts_run():
    def responder(prompt):
        if "+chunk2" in prompt and "line-by-line" in prompt:
            raise ApiError("chunk down", attempts=3)
        return chunk_tag(prompt)

    client = FakeReviewClient(responder=responder)
    with pytest.raises(ApiError):
        await review_diff(large_diff(), client=client, model="gpt-4", max_chunk_size=130)
    # summary, chunk1, chunk2; chunk3 is never requested
    assert len(client.calls) == 3


@pytest.mark.asyncio
async def test_concurrent_failure_cancels_pending_chunks():
    finished = []

    class SlowClient:
        async def review(self, model, prompt, timeout=None):
            if "line-by-line" not in prompt:
                return "summary"
            if "+chunk1" in prompt:
                raise ApiError("chunk1 down", attempts=1)
            await asyncio.sleep(1)
            finished.append(prompt)
            return "late"

    with pytest.raises(ApiError):
        await review_diff(large_diff(), client=SlowClient(), model="gpt-4", max_chunk_size=130, concurrency=3)
    await asyncio.sleep(0)
    assert finished == []


def test_aggregate_sections_format():
    assert aggregate_sections("S", ["a", "b"]) == "### High-Level Summary\nS\n\n### Detailed Review\na\n\nb"
