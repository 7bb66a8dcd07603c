"""
GitHub Action entrypoint.

Runs the diff command, reviews the output and publishes the result through
whichever reporting channels are enabled. Failures before a review exists
end the run with exit code 1; reporting failures are logged per channel and
never change the exit code.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from agents.llm_client import ReviewClient
from agents.writer_agent import format_review
from config import Settings
from diff_parser import commentable_lines
from errors import ApiError, ConfigurationError, DiffExecutionError, ReportingError
from logging_config import configure_logging
from models import InlineComment, PullRequestEvent
from review_parser import parse_inline_comments
from reviewer import review_diff
from utils.diff_runner import run_diff_command
from utils.github_client import GitHubClient


def load_pull_request_event(event_path: Optional[str]) -> PullRequestEvent:
    if not event_path:
        raise ReportingError("GITHUB_EVENT_PATH not set")
    try:
        data = Path(event_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ReportingError(f"error reading GITHUB_EVENT_PATH: {e}") from e
    try:
        event = PullRequestEvent.model_validate_json(data)
    except ValueError as e:
        raise ReportingError(f"error parsing GitHub event payload: {e}") from e
    if event.pull_request.number <= 0:
        raise ReportingError("event payload has no pull request number")
    return event


def append_output(path: str, name: str, value: str) -> None:
    """Append a multi-line step output in the GITHUB_OUTPUT heredoc format."""
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"{name}<<EOF\n{value}\nEOF\n")
    except OSError as e:
        raise ReportingError(f"error writing GITHUB_OUTPUT file: {e}") from e


def select_inline_comments(comments: List[InlineComment], diff_text: str, log: logging.Logger) -> List[InlineComment]:
    """Keep complete comments whose file/line appears on the target side of the diff."""
    complete = [c for c in comments if c.is_complete]
    if len(complete) < len(comments):
        log.debug("Skipping incomplete inline comments", extra={"skipped": len(comments) - len(complete)})

    anchors = commentable_lines(diff_text)
    if anchors is None:
        return complete
    anchored = [c for c in complete if c.line in anchors.get(c.file, ())]
    if len(anchored) < len(complete):
        log.info("Skipping inline comments outside the diff", extra={"skipped": len(complete) - len(anchored)})
    return anchored


async def publish(
    settings: Settings,
    github: Optional[GitHubClient],
    formatted: str,
    aggregated: str,
    diff_text: str,
    log: logging.Logger,
) -> None:
    if settings.github_output:
        try:
            append_output(settings.github_output, "review", formatted)
        except ReportingError as e:
            log.error("Failed to write GitHub Action output: %s", e)

    if github is None:
        log.debug("GitHub token not provided; skipping PR comment, check run and inline comments")
        return

    if settings.post_pr_comment:
        try:
            event = load_pull_request_event(settings.github_event_path)
            await github.post_issue_comment(event.repository.full_name, event.pull_request.number, formatted)
            log.info("PR comment posted successfully")
        except ReportingError as e:
            log.error("Failed to post PR comment: %s", e)
    else:
        log.debug("PR comment posting is disabled")

    if settings.use_checks:
        try:
            await github.create_check_run(settings.github_repository, settings.github_sha, formatted)
            log.info("GitHub Check Run created successfully")
        except ReportingError as e:
            log.error("Failed to create GitHub Check Run: %s", e)
    else:
        log.debug("GitHub Check Run creation is disabled")

    if settings.inline_comments:
        comments = select_inline_comments(parse_inline_comments(aggregated), diff_text, log)
        if not comments:
            log.debug("No inline comments found in the aggregated review")
            return
        try:
            event = load_pull_request_event(settings.github_event_path)
            posted = await github.post_inline_comments(
                event.repository.full_name, event.pull_request.number, settings.github_sha, comments
            )
            log.info("Inline comments posted successfully", extra={"count": posted})
        except ReportingError as e:
            log.error("Failed to post inline comments: %s", e, extra={"comments": len(comments)})
    else:
        log.debug("Inline comment posting is disabled")


async def run(
    settings: Settings,
    *,
    review_client: Optional[ReviewClient] = None,
    github: Optional[GitHubClient] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    log = logger or logging.getLogger(__name__)
    client = review_client or ReviewClient.from_settings(settings, logger=log)
    if github is None and settings.github_token:
        github = GitHubClient(settings.github_token, settings.github_api_url)

    log.info("Executing diff command", extra={"command": settings.diff_command, "timeout": settings.diff_timeout})
    try:
        diff_text = await run_diff_command(settings.diff_command, settings.diff_timeout)
    except DiffExecutionError as e:
        log.error("Failed to execute diff command: %s", e)
        return 1

    try:
        review = await review_diff(
            diff_text,
            client=client,
            model=settings.model,
            max_chunk_size=settings.max_chunk_size,
            timeout=settings.api_timeout,
            concurrency=settings.review_concurrency,
            logger=log,
        )
    except ApiError as e:
        log.error("Failed during API call: %s", e, extra={"attempts": e.attempts})
        return 1

    if review is None:
        log.info("No code changes detected")
        return 0

    log.debug("Review output generated successfully", extra={"chunks": review.chunk_count})
    formatted = format_review(review.text)
    await publish(settings, github, formatted, review.text, diff_text, log)
    return 0


def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    log = configure_logging(settings.log_level)
    try:
        settings.validate()
    except ConfigurationError as e:
        log.error("Missing required inputs: %s", e)
        sys.exit(1)
    sys.exit(asyncio.run(run(settings, logger=log)))


if __name__ == "__main__":
    main()
