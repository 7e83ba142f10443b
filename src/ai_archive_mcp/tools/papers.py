"""
Paper Management Tools - retrieval, metadata, pending reviews, pipeline status and deletion.
"""

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

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
)

MAX_RESULTS = 50


class GetPaperInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of the paper to retrieve")
    format: Literal["json", "bibtex", "apa", "mla", "chicago"] = Field(
        default="json",
        description="Output format: raw JSON metadata or a formatted citation"
    )


class GetPaperMetadataInput(ToolInput):
    paper_ids: List[str] = Field(..., alias="paperIds", description="IDs of the papers to describe")
    include_metrics: bool = Field(default=False, alias="includeMetrics", description="Include citation statistics")
    include_reviews: bool = Field(default=False, alias="includeReviews", description="Include published reviews")


class PaperIdInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of the paper")


class GetUserPapersInput(ToolInput):
    page: int = Field(default=1, description="Page number")
    limit: int = Field(default=20, description="Results per page (max 50)")
    status: Optional[str] = Field(default=None, description="Filter by paper status (e.g. UNDER_REVIEW)")
    paper_type: Optional[str] = Field(default=None, alias="paperType", description="Filter by paper type")


def _data(response: Any) -> Any:
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response


class PaperTools(ToolProvider):
    """Tools for reading and managing papers on the platform."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool("get_paper", "Get a paper's full metadata as JSON, or a formatted citation for it", GetPaperInput),
            define_tool("get_paper_metadata", "Get structured metadata for one or more papers, optionally with metrics and reviews", GetPaperMetadataInput),
            define_tool("check_pending_reviews", "Check whether a paper has pending review requests before creating a new version", PaperIdInput),
            define_tool("get_user_papers", "List papers submitted by the authenticated supervisor", GetUserPapersInput),
            define_tool("delete_paper", "Permanently delete a paper owned by the authenticated supervisor", PaperIdInput),
            define_tool("get_pipeline_status", "Get the processing pipeline status of a submitted paper", PaperIdInput),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "get_paper": self.bind(GetPaperInput, self.get_paper),
            "get_paper_metadata": self.bind(GetPaperMetadataInput, self.get_paper_metadata),
            "check_pending_reviews": self.bind(PaperIdInput, self.check_pending_reviews),
            "get_user_papers": self.bind(GetUserPapersInput, self.get_user_papers),
            "delete_paper": self.bind(PaperIdInput, self.delete_paper),
            "get_pipeline_status": self.bind(PaperIdInput, self.get_pipeline_status),
        }

    async def get_paper(self, args: GetPaperInput) -> ResponseType:
        if args.format == "json":
            paper = await self.client.request(f"/papers/{args.paper_id}", require_auth=False)
            return format_text_response(json.dumps(paper, indent=2))

        citation = await self.client.request(
            f"/citations/{args.paper_id}", params={"format": args.format}, require_auth=False
        )
        citations = citation.get("citations") or [citation.get("citation")]
        return format_text_response(citations[0] or f"No {args.format} citation available for {args.paper_id}")

    async def get_paper_metadata(self, args: GetPaperMetadataInput) -> ResponseType:
        metadata = []
        for paper_id in args.paper_ids:
            paper = _data(await self.client.request(f"/papers/{paper_id}", require_auth=False)) or {}
            entry = {
                "id": paper.get("id"),
                "title": paper.get("title"),
                "authors": paper.get("authors"),
                "abstract": paper.get("abstract"),
                "categories": paper.get("categories"),
                "archive_id": paper.get("archive_id") or paper.get("archiveId"),
                "created_at": paper.get("created_at") or paper.get("createdAt"),
                "updated_at": paper.get("updated_at") or paper.get("updatedAt"),
                "status": paper.get("status"),
            }

            if args.include_metrics:
                entry["metrics"] = _data(
                    await self.client.request(f"/citations/{paper_id}/stats", require_auth=False)
                )

            if args.include_reviews:
                reviews = _data(await self.client.request(f"/reviews/paper/{paper_id}", require_auth=False)) or {}
                entry["reviews"] = reviews.get("reviews") or []

            metadata.append(entry)

        return format_text_response(json.dumps(metadata, indent=2))

    async def check_pending_reviews(self, args: PaperIdInput) -> ResponseType:
        response = await self.client.request(f"/papers/{args.paper_id}/pending-reviews")
        data = _data(response) or {}
        pending = data.get("pendingReviews") or []

        if not data.get("hasPendingReviews") or not pending:
            return format_text_response(
                f"✅ No pending reviews found for paper {args.paper_id}. "
                "You can create a new version without conflicts."
            )

        lines = []
        for index, review in enumerate(pending, start=1):
            agent = (review.get("agent") or {}).get("name") or "Unknown Agent"
            requester = review.get("requester") or {}
            deadline = f" • Deadline: {format_date(review.get('deadline'))}" if review.get("deadline") else ""
            lines.append(
                f"{index}. **{agent}** (Status: {review.get('status')})\n"
                f"   Requested by: {requester.get('firstName', '')} {requester.get('lastName', '')} "
                f"(@{requester.get('username', 'unknown')})\n"
                f"   Created: {format_date(review.get('createdAt'))}{deadline}"
            )

        plural = "s" if len(pending) > 1 else ""
        return format_text_response(
            "⚠️ **Pending Review Requests Found**\n\n"
            f"This paper has {len(pending)} pending review request{plural}:\n\n"
            + "\n\n".join(lines)
            + "\n\n**Next Steps:**\n"
            "To create a new version, decide how to handle these reviews:\n"
            "• **Terminate** - Cancel all pending reviews (reviewers will be notified)\n"
            "• **Transfer** - Move reviews to the new version"
        )

    async def get_user_papers(self, args: GetUserPapersInput) -> ResponseType:
        params = {
            "page": args.page,
            "limit": min(args.limit, MAX_RESULTS),
            "status": args.status,
            "paperType": args.paper_type,
        }
        data = _data(await self.client.request("/users/me/papers", params=params)) or {}
        papers = data.get("papers") or []

        if not papers:
            status_text = f' with status "{args.status}"' if args.status else ""
            return format_text_response(
                "📄 **No Papers Found**\n\n"
                f"You haven't submitted any papers yet{status_text}."
            )

        lines = []
        for index, paper in enumerate(papers, start=1):
            counts = paper.get("_count") or {}
            paper_type = f" • Type: {paper['paperType']}" if paper.get("paperType") else ""
            lines.append(
                f"{index}. **{paper.get('title')}**\n"
                f"   Status: {paper.get('status')}{paper_type}\n"
                f"   ID: {paper.get('id')} • Archive: {paper.get('archiveId') or 'Pending'}\n"
                f"   Created: {format_date(paper.get('createdAt'))}\n"
                f"   Reviews: {counts.get('reviews', 0)} • Citations: {counts.get('citations', 0)}"
            )

        total_pages = data.get("totalPages")
        return format_text_response(
            f"📄 **Your Papers** ({data.get('totalCount', len(papers))} total, Page {args.page}/{total_pages or 1})\n\n"
            + "\n\n".join(lines)
            + "\n\n**Actions Available:**\n"
            "• Use `get_paper` to view detailed paper information\n"
            "• Use `get_pipeline_status` to check processing status\n"
            "• Use `delete_paper` to remove papers\n"
            + pagination_text(args.page, total_pages)
        )

    async def delete_paper(self, args: PaperIdInput) -> ResponseType:
        try:
            await self.client.request(f"/papers/{args.paper_id}", method="DELETE")
        except ApiRequestError as e:
            if e.status_code == 404:
                raise ApiRequestError(f"Paper {args.paper_id} not found or not owned by you", 404) from e
            if e.status_code == 403:
                raise ApiRequestError("You do not have permission to delete this paper", 403) from e
            raise

        return format_text_response(
            "🗑️ **Paper Deleted Successfully**\n\n"
            f"Paper {args.paper_id} has been permanently deleted.\n\n"
            "**Note:** This action cannot be undone. All associated reviews, citations, and files have been removed."
        )

    async def get_pipeline_status(self, args: PaperIdInput) -> ResponseType:
        status = _data(await self.client.request(f"/papers/{args.paper_id}/pipeline-status")) or {}

        completed = "\n".join(f"✅ {stage}" for stage in status.get("completedStages") or []) or "None"
        remaining = "\n".join(f"⏳ {stage}" for stage in status.get("remainingStages") or []) or "None"
        errors = status.get("errors") or []
        errors_text = ("**Errors:**\n" + "\n".join(f"❌ {err}" for err in errors) + "\n\n") if errors else ""

        return format_text_response(
            f"⚙️ **Pipeline Status for Paper {args.paper_id}**\n\n"
            f"**Current Stage:** {status.get('currentStage') or 'Unknown'}\n"
            f"**Status:** {status.get('status') or 'Unknown'}\n"
            f"**Progress:** {status.get('progress') or 0}%\n"
            f"**Last Updated:** {format_date(status.get('lastUpdated'), with_time=True)}\n\n"
            f"**Completed Stages:**\n{completed}\n\n"
            f"**Remaining Stages:**\n{remaining}\n\n"
            + errors_text
            + ("Processing failed and can be retried." if status.get("canRetry") else "Pipeline is processing normally.")
        )
