import os
from dataclasses import dataclass
from typing import Mapping, Optional

from errors import ConfigurationError

DEFAULT_DIFF_COMMAND = "git --no-pager diff HEAD~1 HEAD"
DEFAULT_MAX_CHUNK_SIZE = 10000  # characters per diff chunk

_TRUE_VALUES = {"1", "t", "true"}
_FALSE_VALUES = {"0", "f", "false"}


def get_env_as_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name, "")
    if value:
        try:
            return int(value.strip())
        except ValueError:
            pass
    return default


def get_env_as_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name, "")
    if value:
        try:
            return float(value.strip())
        except ValueError:
            pass
    return default


def get_env_as_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name, "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class Settings:
    """Inputs for one run, read from the GitHub Actions INPUT_* environment."""

    api_key: str
    model: str
    api_url: str = ""
    diff_command: str = DEFAULT_DIFF_COMMAND
    diff_timeout: float = 30.0
    api_timeout: float = 30.0
    post_pr_comment: bool = True
    use_checks: bool = False
    inline_comments: bool = False
    github_token: str = ""
    temperature: float = 0.7
    max_tokens: int = 2000
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    retry_count: int = 2
    retry_delay: float = 3.0
    review_concurrency: int = 1
    log_level: str = "info"
    github_api_url: str = "https://api.github.com"
    github_event_path: Optional[str] = None
    github_repository: Optional[str] = None
    github_sha: Optional[str] = None
    github_output: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get("INPUT_API_KEY", ""),
            model=env.get("INPUT_MODEL", ""),
            api_url=env.get("INPUT_API_URL", ""),
            diff_command=env.get("INPUT_DIFF_COMMAND") or DEFAULT_DIFF_COMMAND,
            diff_timeout=get_env_as_float(env, "INPUT_DIFF_TIMEOUT", 30.0),
            api_timeout=get_env_as_float(env, "INPUT_API_TIMEOUT", 30.0),
            post_pr_comment=get_env_as_bool(env, "INPUT_POST_PR_COMMENT", True),
            use_checks=get_env_as_bool(env, "INPUT_USE_CHECKS", False),
            inline_comments=get_env_as_bool(env, "INPUT_INLINE_COMMENTS", False),
            github_token=env.get("INPUT_GITHUB_TOKEN", ""),
            temperature=get_env_as_float(env, "INPUT_TEMPERATURE", 0.7),
            max_tokens=get_env_as_int(env, "INPUT_MAX_TOKENS", 2000),
            max_chunk_size=get_env_as_int(env, "INPUT_MAX_CHUNK_SIZE", DEFAULT_MAX_CHUNK_SIZE),
            retry_count=get_env_as_int(env, "INPUT_RETRY_COUNT", 2),
            retry_delay=get_env_as_float(env, "INPUT_RETRY_DELAY", 3.0),
            review_concurrency=get_env_as_int(env, "INPUT_REVIEW_CONCURRENCY", 1),
            log_level=env.get("LOG_LEVEL") or "info",
            github_api_url=env.get("GITHUB_API_URL") or "https://api.github.com",
            github_event_path=env.get("GITHUB_EVENT_PATH") or None,
            github_repository=env.get("GITHUB_REPOSITORY") or None,
            github_sha=env.get("GITHUB_SHA") or None,
            github_output=env.get("GITHUB_OUTPUT") or None,
        )

    def validate(self) -> "Settings":
        missing = [name for name, value in (("api_key", self.api_key), ("model", self.model)) if not value]
        if missing:
            raise ConfigurationError(f"Missing required inputs: {', '.join(missing)}")
        if self.max_chunk_size <= 0:
            raise ConfigurationError("max_chunk_size must be positive")
        if self.retry_count < 0:
            raise ConfigurationError("retry_count must not be negative")
        if self.review_concurrency < 1:
            raise ConfigurationError("review_concurrency must be at least 1")
        return self
