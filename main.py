import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from agents.llm_client import ReviewClient
from agents.writer_agent import format_review
from config import Settings
from errors import ApiError, ConfigurationError
from models import ReviewResponse
from review_parser import parse_inline_comments
from reviewer import review_diff

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, review_client: Optional[ReviewClient] = None) -> FastAPI:
    app = FastAPI(title="Review Ranger")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def current_settings() -> Settings:
        nonlocal settings
        if settings is None:
            load_dotenv()
            settings = Settings.from_env()
        try:
            return settings.validate()
        except ConfigurationError as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/review-diff", response_model=ReviewResponse, summary="Review a unified diff (plain text)")
    async def review_diff_endpoint(diff_text: str = Body(..., media_type="text/plain", description="Paste the full unified diff here (plain text).")):
        cfg = current_settings()
        client = review_client or ReviewClient.from_settings(cfg, logger=logger)
        try:
            review = await review_diff(
                diff_text,
                client=client,
                model=cfg.model,
                max_chunk_size=cfg.max_chunk_size,
                timeout=cfg.api_timeout,
                concurrency=cfg.review_concurrency,
                logger=logger,
            )
        except ApiError as e:
            raise HTTPException(status_code=502, detail=f"Review endpoint failed: {e}")

        if review is None:
            return ReviewResponse(review_summary="No code changes detected")

        comments = parse_inline_comments(review.text)
        return ReviewResponse(
            review_summary=f"{len(comments)} comments generated",
            review=format_review(review.text),
            aggregated=review.text,
            comments=comments,
            chunk_count=review.chunk_count,
        )

    @app.get("/")
    def root():
        cfg = settings or Settings.from_env()
        return {
            "status": "Review Ranger running",
            "configured": bool(cfg.api_key and cfg.model),
        }

    return app


app = create_app()
