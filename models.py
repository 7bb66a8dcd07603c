from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class DiffHunk(BaseModel):
    file_path: str
    # target-side line numbers a review comment can be anchored to
    target_lines: List[int] = Field(default_factory=list)


class InlineComment(BaseModel):
    file: str = ""
    line: int = 0
    suggestion: str = ""
    reasoning: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.file and self.line > 0 and self.suggestion and self.reasoning)


class ReviewRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    prompt: str
    temperature: float
    max_tokens: int

    def to_chat_request(self, system_prompt: str) -> "ChatCompletionRequest":
        return ChatCompletionRequest(
            model=self.model,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=self.prompt),
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )


# Wire schemas for the chat-completion endpoint

class ChatMessage(BaseModel):
    role: str
    content: str


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    temperature: float
    max_tokens: int


class ResponseMessage(BaseModel):
    # content is null on refusals and tool-call turns; some proxies omit role
    role: Optional[str] = None
    content: Optional[str] = None


class Choice(BaseModel):
    index: int = 0
    message: ResponseMessage
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[Choice]


class AggregatedReview(BaseModel):
    """Output of one pipeline run; `text` is what the parser and formatter both read."""

    text: str
    summary: Optional[str] = None
    details: List[str] = Field(default_factory=list)
    chunk_count: int = 1


# GitHub Actions event payload (only the fields the reporter needs)

class PullRequestRef(BaseModel):
    number: int = 0


class RepositoryRef(BaseModel):
    full_name: str = ""


class PullRequestEvent(BaseModel):
    pull_request: PullRequestRef = Field(default_factory=PullRequestRef)
    repository: RepositoryRef = Field(default_factory=RepositoryRef)


class ReviewResponse(BaseModel):
    review_summary: str
    review: str = ""
    aggregated: str = ""
    comments: List[InlineComment] = Field(default_factory=list)
    chunk_count: int = 0
