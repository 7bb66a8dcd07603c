# utils/github_client.py

from typing import Any, Dict, List, Optional

import httpx

from agents.writer_agent import render_inline_comment
from errors import ReportingError
from models import InlineComment

GITHUB_API_BASE = "https://api.github.com"
CHECK_RUN_NAME = "Review Ranger Code Review"

# base request headers
HEADERS = {
    "Accept": "application/vnd.github+json",
    "User-Agent": "Review-Ranger-Action/2.0",
}


class GitHubClient:
    """Reporting channels for a finished review. Every failure surfaces as ReportingError."""

    def __init__(
        self,
        token: str,
        api_base_url: str = GITHUB_API_BASE,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.headers = dict(HEADERS)
        self.headers["Authorization"] = f"Bearer {token}"

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.api_base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout, headers=self.headers, transport=self.transport) as client:
            try:
                resp = await client.post(url, json=payload)
            except httpx.HTTPError as e:
                raise ReportingError(f"request to {url} failed: {e}") from e

            # Raise HTTP errors with full body description
            if not resp.is_success:
                raise ReportingError(
                    f"GitHub returned {resp.status_code}: {resp.text}",
                    status_code=resp.status_code,
                )
            try:
                return resp.json()
            except ValueError:
                return {}

    # -----------------------------------------------------------
    # Post the aggregated review as a PR conversation comment
    # -----------------------------------------------------------
    async def post_issue_comment(self, repo_full_name: str, pr_number: int, body: str) -> Dict[str, Any]:
        if not repo_full_name:
            raise ReportingError("repository full name not found in event payload")
        if pr_number <= 0:
            raise ReportingError("pull request number not found in event payload")
        return await self._post(f"/repos/{repo_full_name}/issues/{pr_number}/comments", {"body": body})

    # -----------------------------------------------------------
    # Check run carrying the review as its output text
    # -----------------------------------------------------------
    async def create_check_run(self, repo_full_name: Optional[str], head_sha: Optional[str], review: str) -> Dict[str, Any]:
        if not repo_full_name or not head_sha:
            raise ReportingError("GITHUB_REPOSITORY or GITHUB_SHA not set")
        payload = {
            "name": CHECK_RUN_NAME,
            "head_sha": head_sha,
            "status": "completed",
            "conclusion": "success",
            "output": {
                "title": CHECK_RUN_NAME,
                "summary": "The following is the aggregated review output from Review Ranger:",
                "text": review,
            },
        }
        return await self._post(f"/repos/{repo_full_name}/check-runs", payload)

    # -----------------------------------------------------------
    # Inline review comments anchored to target-side lines
    # -----------------------------------------------------------
    async def post_inline_comment(
        self, repo_full_name: str, pr_number: int, commit_id: Optional[str], comment: InlineComment
    ) -> Dict[str, Any]:
        if not repo_full_name or pr_number <= 0 or not commit_id:
            raise ReportingError("required PR details not found in environment")
        payload = {
            "body": render_inline_comment(comment),
            "commit_id": commit_id,
            "path": comment.file,
            "line": comment.line,
            "side": "RIGHT",
        }
        return await self._post(f"/repos/{repo_full_name}/pulls/{pr_number}/comments", payload)

    async def post_inline_comments(
        self, repo_full_name: str, pr_number: int, commit_id: Optional[str], comments: List[InlineComment]
    ) -> int:
        """Post comments in order and stop at the first failure. Returns how many were posted."""
        posted = 0
        for comment in comments:
            await self.post_inline_comment(repo_full_name, pr_number, commit_id, comment)
            posted += 1
        return posted
