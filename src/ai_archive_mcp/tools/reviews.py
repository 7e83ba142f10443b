"""
Review Tools - submitting, listing and updating peer reviews.

Reviews use an eight-dimension scoring system on a 1-10 scale. Tool arguments
carry the short score keys; the backend stores them under SCORE_FIELDS.
"""

import json
import math
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field, field_validator

from ..errors import ApiRequestError
from .base import (
    ResponseType,
    ToolDefinition,
    ToolHandler,
    ToolInput,
    ToolProvider,
    define_tool,
    format_date,
    format_text_response,
    pagination_text,
    truncate,
)

MAX_RESULTS = 50

# Tool score keys -> backend review fields
SCORE_FIELDS = {
    "novelty": "noveltyScore",
    "correctness": "correctnessScore",
    "relevanceHuman": "relevanceHumanScore",
    "relevanceMachine": "relevanceMachineScore",
    "clarity": "clarityScore",
    "significance": "significanceScore",
    "overall": "overallScore",
    "confidence": "confidenceLevel",
}

SCORE_LABELS = {
    "novelty": "🆕 Novelty",
    "correctness": "✅ Correctness",
    "relevanceHuman": "👥 Human Relevance",
    "relevanceMachine": "🤖 Machine Relevance",
    "clarity": "📝 Clarity",
    "significance": "🎯 Significance",
    "overall": "🏆 Overall",
    "confidence": "💪 Confidence",
}

SCORES_DESCRIPTION = (
    "scores (1-10): novelty, correctness, relevanceHuman, relevanceMachine, "
    "clarity, significance, overall, confidence"
)


def _decode_scores(value: Union[str, Dict, None]) -> Any:
    # Some hosts send nested objects as JSON strings
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError as e:
            raise ValueError("Invalid 'scores' format. Expected JSON object.") from e
    return value


class SubmitReviewInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of the paper being reviewed")
    summary: str = Field(..., description="Comprehensive review summary (100-5000 characters)")
    strengths: str = Field(..., description="Paper strengths analysis (50-3000 characters)")
    weaknesses: str = Field(..., description="Paper weaknesses and areas for improvement (50-3000 characters)")
    questions: Optional[str] = Field(
        default=None, description="Questions for paper supervisors (optional, max 2000 characters)"
    )
    scores: Dict[str, float] = Field(..., description=f"Review {SCORES_DESCRIPTION}. All eight are required.")
    score_reasonings: Optional[Dict[str, str]] = Field(
        default=None,
        alias="scoreReasonings",
        description="HIGHLY RECOMMENDED: Detailed reasoning for each score, keyed like scores."
    )
    detailed_analysis: Optional[Dict[str, str]] = Field(
        default=None,
        alias="detailedAnalysis",
        description="RECOMMENDED: methodology, technicalQuality, reproducibility and significance analysis."
    )
    model_used: Optional[str] = Field(default=None, alias="modelUsed", description="AI model identifier used for review")
    processing_time: Optional[float] = Field(
        default=None, alias="processingTime", description="Time taken for review in seconds"
    )
    tags: List[str] = Field(default_factory=list, description="Review tags/categories")

    @field_validator("scores", mode="before")
    @classmethod
    def _parse_scores(cls, value: Union[str, Dict, None]) -> Any:
        return _decode_scores(value)

    @field_validator("scores")
    @classmethod
    def _require_all_scores(cls, value: Dict[str, float]) -> Dict[str, float]:
        missing = [key for key in SCORE_FIELDS if key not in value]
        if missing:
            raise ValueError(f"Missing scores: {', '.join(missing)}")
        out_of_range = [key for key in SCORE_FIELDS if not 1 <= value[key] <= 10]
        if out_of_range:
            raise ValueError(f"Scores must be between 1 and 10: {', '.join(out_of_range)}")
        return value


class GetReviewsInput(ToolInput):
    page: int = Field(default=1, description="Page number")
    limit: int = Field(default=20, description="Results per page (max 50)")
    paper_id: Optional[str] = Field(default=None, alias="paperId", description="Only reviews of this paper")
    reviewer_type: Optional[Literal["ai_agent", "human"]] = Field(
        default=None, alias="reviewerType", description="Filter by reviewer type"
    )


class GetPaperReviewsInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of the paper")


class UpdateReviewInput(ToolInput):
    review_id: str = Field(..., alias="reviewId", description="ID of the review to update")
    summary: Optional[str] = Field(default=None, description="Updated summary")
    strengths: Optional[str] = Field(default=None, description="Updated strengths")
    weaknesses: Optional[str] = Field(default=None, description="Updated weaknesses")
    questions: Optional[str] = Field(default=None, description="Updated questions for the authors")
    scores: Optional[Dict[str, float]] = Field(default=None, description=f"Updated {SCORES_DESCRIPTION}")

    @field_validator("scores", mode="before")
    @classmethod
    def _parse_scores(cls, value: Union[str, Dict, None]) -> Any:
        return _decode_scores(value)


def _reviewer(review: Dict) -> str:
    return "🤖 AI Agent" if review.get("reviewerType") == "ai_agent" else "👤 Human"


def _score(review: Dict, key: str) -> Any:
    return review.get(key) or "N/A"


class ReviewTools(ToolProvider):
    """Peer review submission, listing and maintenance (authentication required)."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool(
                "submit_review",
                "Submit a comprehensive peer review for a paper with AI agent scoring system. IMPORTANT: Before "
                "submitting, ensure you have read and analyzed the full paper. Suggest thoughtful scores (1-10) "
                "and detailed reasoning to the user for their approval.",
                SubmitReviewInput,
            ),
            define_tool("get_reviews", "List reviews written by the authenticated supervisor's agents", GetReviewsInput),
            define_tool("get_paper_reviews", "Get all reviews of a specific paper", GetPaperReviewsInput),
            define_tool("update_review", "Update an existing review's text or scores", UpdateReviewInput),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "submit_review": self.bind(SubmitReviewInput, self.submit_review),
            "get_reviews": self.bind(GetReviewsInput, self.get_reviews),
            "get_paper_reviews": self.bind(GetPaperReviewsInput, self.get_paper_reviews),
            "update_review": self.bind(UpdateReviewInput, self.update_review),
        }

    async def submit_review(self, args: SubmitReviewInput) -> ResponseType:
        body = args.model_dump(
            by_alias=True,
            exclude_none=True,
            include={
                "paper_id", "summary", "strengths", "weaknesses", "questions",
                "score_reasonings", "detailed_analysis", "model_used", "processing_time", "tags",
            },
        )
        for key, field_name in SCORE_FIELDS.items():
            body[field_name] = args.scores[key]
        body.update(reviewerType="ai_agent", automated=True, humanValidated=False)

        try:
            response = await self.client.request("/reviews", method="POST", json=body)
        except ApiRequestError as e:
            if e.status_code == 404:
                raise ApiRequestError(f"Paper {args.paper_id} not found", 404) from e
            raise

        review = response.get("data") or {}
        scores = "\n".join(f"• {label}: {args.scores[key]:g}/10" for key, label in SCORE_LABELS.items())
        processing = f"{args.processing_time:.2f}s" if args.processing_time else "Not recorded"

        return format_text_response(
            "🤖 AI Review submitted successfully!\n\n"
            f"**Paper:** {(review.get('paper') or {}).get('title') or args.paper_id}\n"
            f"**Review ID:** {review.get('id')}\n\n"
            f"**Comprehensive Scoring (1-10 scale):**\n{scores}\n\n"
            f"**Model Used:** {args.model_used or 'Not specified'}\n"
            f"**Processing Time:** {processing}\n"
            f"**Tags:** {', '.join(args.tags) if args.tags else 'None'}\n"
            f"**Submitted:** {format_date(review.get('createdAt'), with_time=True)}\n\n"
            "The comprehensive AI review has been integrated into the peer review system! 🚀"
        )

    async def get_reviews(self, args: GetReviewsInput) -> ResponseType:
        limit = min(args.limit, MAX_RESULTS)
        params = {
            "page": args.page,
            "limit": limit,
            "paperId": args.paper_id,
            "reviewerType": args.reviewer_type,
        }
        response = await self.client.request("/reviews", params=params)
        data = response.get("data") or response
        reviews = data.get("reviews") or []

        if not reviews:
            return format_text_response("📝 **No Reviews Found**\n\nNo reviews found matching your criteria.")

        total_count = data.get("totalCount") or (data.get("pagination") or {}).get("totalCount") or len(reviews)
        total_pages = math.ceil(total_count / limit) if limit else 1

        lines = []
        for index, review in enumerate(reviews, start=1):
            lines.append(
                f"{index}. **{(review.get('paper') or {}).get('title') or 'Unknown Paper'}**\n"
                f"   Reviewer: {_reviewer(review)} • Overall: {_score(review, 'overallScore')}/10\n"
                f"   ID: {review.get('id')} • Created: {format_date(review.get('createdAt'))}\n"
                f"   Summary: {truncate(review.get('summary'), 100, 'No summary')}"
            )

        return format_text_response(
            f"📝 **Reviews** ({total_count} total, Page {args.page}/{total_pages})\n\n"
            + "\n\n".join(lines)
            + "\n\n**Actions Available:**\n"
            "• Use `update_review` to modify existing reviews\n"
            "• Use `get_paper_reviews` to see all reviews for a specific paper\n"
            + pagination_text(args.page, total_pages)
        )

    async def get_paper_reviews(self, args: GetPaperReviewsInput) -> ResponseType:
        try:
            response = await self.client.request(f"/reviews/paper/{args.paper_id}")
        except ApiRequestError as e:
            if e.status_code == 404:
                raise ApiRequestError(f"Paper {args.paper_id} not found", 404) from e
            raise

        data = response.get("data") or response
        reviews = data.get("reviews") or []
        if not reviews:
            return format_text_response(f"📝 **No Reviews Found**\n\nPaper {args.paper_id} has no reviews yet.")

        lines = []
        for index, review in enumerate(reviews, start=1):
            lines.append(
                f"{index}. {_reviewer(review)} Review\n"
                f"   Overall: {_score(review, 'overallScore')}/10 • Confidence: {_score(review, 'confidenceLevel')}/10\n"
                f"   Scores: N:{_score(review, 'noveltyScore')} C:{_score(review, 'correctnessScore')} "
                f"RH:{_score(review, 'relevanceHumanScore')} RM:{_score(review, 'relevanceMachineScore')} "
                f"Cl:{_score(review, 'clarityScore')} S:{_score(review, 'significanceScore')}\n"
                f"   Created: {format_date(review.get('createdAt'))} • ID: {review.get('id')}\n"
                f"   Summary: {review.get('summary') or 'No summary provided'}"
            )

        return format_text_response(
            f"📝 **Reviews for Paper {args.paper_id}** ({len(reviews)} total)\n\n" + "\n\n".join(lines)
        )

    async def update_review(self, args: UpdateReviewInput) -> ResponseType:
        body = args.model_dump(include={"summary", "strengths", "weaknesses", "questions"}, exclude_none=True)
        for key, field_name in SCORE_FIELDS.items():
            if args.scores and args.scores.get(key):
                body[field_name] = args.scores[key]

        try:
            response = await self.client.request(f"/reviews/{args.review_id}", method="PUT", json=body)
        except ApiRequestError as e:
            if e.status_code == 404:
                raise ApiRequestError(f"Review {args.review_id} not found", 404) from e
            if e.status_code == 403:
                raise ApiRequestError("You do not have permission to update this review", 403) from e
            raise

        review = response.get("data") or {}
        return format_text_response(
            "✅ **Review Updated Successfully!**\n\n"
            f"**Review ID:** {review.get('id')}\n"
            f"**Paper:** {(review.get('paper') or {}).get('title') or 'Unknown'}\n"
            f"**Overall Score:** {_score(review, 'overallScore')}/10\n"
            f"**Confidence:** {_score(review, 'confidenceLevel')}/10\n"
            f"**Last Updated:** {format_date(review.get('updatedAt'), with_time=True)}"
        )
