import asyncio
import logging
from typing import List, Optional

from agents.detail_agent import detail_agent
from agents.summary_agent import summary_agent
from config import DEFAULT_MAX_CHUNK_SIZE
from diff_parser import split_into_chunks
from models import AggregatedReview

SUMMARY_HEADER = "### High-Level Summary"
DETAIL_HEADER = "### Detailed Review"


def aggregate_sections(summary: str, details: List[str]) -> str:
    return f"{SUMMARY_HEADER}\n{summary}\n\n{DETAIL_HEADER}\n" + "\n\n".join(details)


async def _review_chunks(
    client,
    model: str,
    chunks: List[str],
    timeout: Optional[float],
    concurrency: int,
    log: logging.Logger,
) -> List[str]:
    async def review_chunk(index: int, chunk: str) -> str:
        log.info("Reviewing chunk", extra={"chunk": index + 1, "total": len(chunks), "size": len(chunk)})
        return await detail_agent(client, model, chunk, timeout)

    if concurrency <= 1:
        details = []
        for i, chunk in enumerate(chunks):
            details.append(await review_chunk(i, chunk))
        return details

    semaphore = asyncio.Semaphore(concurrency)

    async def bounded(index: int, chunk: str) -> str:
        async with semaphore:
            return await review_chunk(index, chunk)

    # gather keeps results in chunk order whatever order the calls finish in
    tasks = [asyncio.ensure_future(bounded(i, c)) for i, c in enumerate(chunks)]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def review_diff(
    diff_text: str,
    *,
    client,
    model: str,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    timeout: Optional[float] = None,
    concurrency: int = 1,
    logger: Optional[logging.Logger] = None,
) -> Optional[AggregatedReview]:
    """
    Run the review for one diff.

    Returns None when the trimmed diff is empty (nothing is sent). A diff that
    fits in max_chunk_size gets a single detailed review; a larger one gets a
    summary of its first max_chunk_size characters followed by one detailed
    review per chunk, in diff order. Any failed call propagates and no partial
    review is returned.
    """
    log = logger or logging.getLogger(__name__)
    diff = diff_text.strip()
    if not diff:
        return None

    if len(diff) <= max_chunk_size:
        log.debug("Diff size is within limits", extra={"diff_size": len(diff)})
        text = await detail_agent(client, model, diff, timeout)
        return AggregatedReview(text=text, details=[text], chunk_count=1)

    log.info("Large diff detected; performing multi-step review", extra={"diff_size": len(diff)})
    summary = await summary_agent(client, model, diff[:max_chunk_size], timeout)
    log.debug("High-level summary obtained")

    chunks = split_into_chunks(diff, max_chunk_size)
    details = await _review_chunks(client, model, chunks, timeout, concurrency, log)
    return AggregatedReview(
        text=aggregate_sections(summary, details),
        summary=summary,
        details=details,
        chunk_count=len(chunks),
    )
