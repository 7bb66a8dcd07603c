# agents/llm_client.py
import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from errors import ApiError
from models import ChatCompletionResponse, ReviewRequest

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TIMEOUT = 30.0

SYSTEM_PROMPT = (
    "You are an expert code reviewer. "
    "Analyze the code changes and provide detailed, actionable feedback."
)


class ResponseError(Exception):
    """One attempt got an unusable answer: non-2xx status or a malformed body."""


class ReviewClient:
    """
    Chat-completion client used for every review call.

    Each attempt runs under its own timeout. Failed attempts are retried after
    a fixed delay; the delay is an asyncio sleep, so cancelling the caller
    aborts a pending retry as well.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "",
        *,
        retry_count: int = 2,
        retry_delay: float = 3.0,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.api_key = api_key
        self.endpoint = base_url or DEFAULT_ENDPOINT
        self.retry_count = max(0, retry_count)
        self.retry_delay = retry_delay
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.transport = transport
        self.log = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings, transport=None, logger=None) -> "ReviewClient":
        return cls(
            settings.api_key,
            settings.api_url,
            retry_count=settings.retry_count,
            retry_delay=settings.retry_delay,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.api_timeout,
            transport=transport,
            logger=logger,
        )

    async def review(self, model: str, prompt: str, timeout: Optional[float] = None) -> str:
        request = ReviewRequest(
            model=model,
            prompt=prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        attempt_timeout = self.timeout if timeout is None else timeout
        attempts = self.retry_count + 1
        last_err: Optional[Exception] = None

        async with httpx.AsyncClient(transport=self.transport, timeout=attempt_timeout) as client:
            for attempt in range(attempts):
                if attempt > 0:
                    self.log.debug("Retrying API call", extra={"attempt": attempt, "delay": self.retry_delay})
                    await asyncio.sleep(self.retry_delay)
                try:
                    return await asyncio.wait_for(self._send(client, request), attempt_timeout)
                except asyncio.TimeoutError:
                    last_err = TimeoutError(f"API call timed out after {attempt_timeout}s")
                except (httpx.HTTPError, ResponseError) as e:
                    last_err = e
                self.log.warning("API call failed (attempt %d/%d): %s", attempt + 1, attempts, last_err)

        raise ApiError(
            f"API call failed after {attempts} attempts: {last_err}",
            attempts=attempts,
            last_error=last_err,
        ) from last_err

    async def _send(self, client: httpx.AsyncClient, request: ReviewRequest) -> str:
        payload = request.to_chat_request(SYSTEM_PROMPT)
        resp = await client.post(
            self.endpoint,
            json=payload.model_dump(),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        if not resp.is_success:
            raise ResponseError(f"API returned status code {resp.status_code}: {resp.text}")

        try:
            parsed = ChatCompletionResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise ResponseError(f"failed to decode response: {e}") from e

        if not parsed.choices:
            raise ResponseError("no choices returned in API response")
        return parsed.choices[0].message.content or ""
