"""
Citation Analysis Tools - citations, references, citation graphs and statistics.

All citation endpoints are public.
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field, model_validator

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
GRAPH_NODES_SHOWN = 10


class GetCitationsInput(ToolInput):
    """Either paperId (single) or paperIds (multiple) must be provided."""
    paper_id: Optional[str] = Field(default=None, alias="paperId", description="Single paper ID to cite")
    paper_ids: Optional[List[str]] = Field(
        default=None, alias="paperIds", description="List of paper IDs to cite (alternative to paperId)"
    )
    format: Literal["bibtex", "apa", "mla", "chicago", "harvard", "ieee"] = Field(
        default="bibtex", description="Citation format"
    )

    @model_validator(mode="after")
    def _require_ids(self):
        if not self.paper_id and not self.paper_ids:
            raise ValueError("Either paperId or paperIds must be provided")
        return self

    def ids(self) -> List[str]:
        return [self.paper_id] if self.paper_id else list(self.paper_ids or [])


class PagedPaperInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of the paper")
    page: int = Field(default=1, description="Page number")
    limit: int = Field(default=20, description="Results per page (max 50)")


class CitationGraphInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of paper to get citation graph for")
    depth: int = Field(default=2, description="Graph depth")


class CitationStatsInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of paper to get citation stats for")


def _not_found(paper_id: str, error: ApiRequestError) -> ApiRequestError:
    if error.status_code == 404:
        return ApiRequestError(f"Paper {paper_id} not found", 404)
    return error


def _paper_list(papers: List[Dict]) -> str:
    lines = []
    for index, paper in enumerate(papers, start=1):
        authors = ", ".join(paper.get("authors") or []) or "Unknown"
        lines.append(
            f"{index}. **{paper.get('title')}**\n"
            f"   Authors: {authors}\n"
            f"   ID: {paper.get('id')} • Published: {format_date(paper.get('createdAt'))}"
        )
    return "\n\n".join(lines)


class CitationTools(ToolProvider):
    """Citation formatting and citation-network analysis."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool("get_citations", "Get citation data for papers in various formats", GetCitationsInput),
            define_tool("get_citing_papers", "Get papers that cite a specific paper", PagedPaperInput),
            define_tool("get_paper_references", "Get papers referenced by a specific paper", PagedPaperInput),
            define_tool("get_citation_graph", "Get citation network graph for a paper", CitationGraphInput),
            define_tool("get_citation_stats", "Get detailed citation statistics for a paper", CitationStatsInput),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "get_citations": self.bind(GetCitationsInput, self.get_citations),
            "get_citing_papers": self.bind(PagedPaperInput, self.get_citing_papers),
            "get_paper_references": self.bind(PagedPaperInput, self.get_paper_references),
            "get_citation_graph": self.bind(CitationGraphInput, self.get_citation_graph),
            "get_citation_stats": self.bind(CitationStatsInput, self.get_citation_stats),
        }

    async def get_citations(self, args: GetCitationsInput) -> ResponseType:
        citations = []
        for paper_id in args.ids():
            # One failing paper does not abort the batch
            try:
                response = await self.client.request(
                    f"/citations/{paper_id}", params={"format": args.format}, require_auth=False
                )
                citations.append(str(response.get("citation")))
            except ApiRequestError as e:
                citations.append(f"Error getting citation for paper {paper_id}: {e}")

        return format_text_response(
            f"Citations in {args.format.upper()} format:\n\n" + "\n\n".join(citations)
        )

    async def _paged(self, args: PagedPaperInput, kind: str) -> Dict:
        params = {"page": args.page, "limit": min(args.limit, MAX_RESULTS)}
        try:
            response = await self.client.request(
                f"/citations/{args.paper_id}/{kind}", params=params, require_auth=False
            )
        except ApiRequestError as e:
            raise _not_found(args.paper_id, e) from e
        return response.get("data") or {}

    async def get_citing_papers(self, args: PagedPaperInput) -> ResponseType:
        data = await self._paged(args, "citing")
        papers = data.get("papers") or []
        if not papers:
            return format_text_response(
                f"📄 **No Citing Papers Found**\n\nNo papers currently cite paper {args.paper_id}."
            )

        return format_text_response(
            f"📄 **Papers Citing {args.paper_id}** "
            f"({data.get('totalCount', len(papers))} total, Page {args.page}/{data.get('totalPages') or 1})\n\n"
            + _paper_list(papers)
            + "\n\n"
            + pagination_text(args.page, data.get("totalPages"))
        )

    async def get_paper_references(self, args: PagedPaperInput) -> ResponseType:
        data = await self._paged(args, "references")
        papers = data.get("papers") or []
        if not papers:
            return format_text_response(
                f"📄 **No References Found**\n\nPaper {args.paper_id} has no references in our database."
            )

        return format_text_response(
            f"📄 **References from {args.paper_id}** "
            f"({data.get('totalCount', len(papers))} total, Page {args.page}/{data.get('totalPages') or 1})\n\n"
            + _paper_list(papers)
            + "\n\n"
            + pagination_text(args.page, data.get("totalPages"))
        )

    async def get_citation_graph(self, args: CitationGraphInput) -> ResponseType:
        try:
            response = await self.client.request(
                f"/citations/{args.paper_id}/graph", params={"depth": args.depth}, require_auth=False
            )
        except ApiRequestError as e:
            raise _not_found(args.paper_id, e) from e

        graph = response.get("data") or {}
        nodes = graph.get("nodes") or []
        key_papers = "\n".join(
            f"{index}. {node.get('title')} ({node.get('citationCount') or 0} citations)"
            for index, node in enumerate(nodes[:GRAPH_NODES_SHOWN], start=1)
        ) or "No papers found"

        return format_text_response(
            f"🕸️ **Citation Graph for Paper {args.paper_id}**\n\n"
            "**Graph Statistics:**\n"
            f"• Nodes: {len(nodes)} papers\n"
            f"• Edges: {len(graph.get('edges') or [])} citations\n"
            f"• Depth: {args.depth} levels\n\n"
            f"**Key Papers in Network:**\n{key_papers}\n\n"
            "**Citation Patterns:**\n"
            f"• Most cited: {(graph.get('mostCited') or {}).get('title') or 'Unknown'}\n"
            f"• Most citing: {(graph.get('mostCiting') or {}).get('title') or 'Unknown'}\n"
            f"• Cluster size: {graph.get('clusterSize') or 0} papers"
        )

    async def get_citation_stats(self, args: CitationStatsInput) -> ResponseType:
        try:
            response = await self.client.request(f"/citations/{args.paper_id}/stats", require_auth=False)
        except ApiRequestError as e:
            raise _not_found(args.paper_id, e) from e

        stats = response.get("data") or {}
        first = format_date(stats["firstCitation"]) if stats.get("firstCitation") else "None"
        latest = format_date(stats["latestCitation"]) if stats.get("latestCitation") else "None"

        return format_text_response(
            f"📊 **Citation Statistics for Paper {args.paper_id}**\n\n"
            "**Citation Counts:**\n"
            f"• Total Citations: {stats.get('totalCitations') or 0}\n"
            f"• Direct Citations: {stats.get('directCitations') or 0}\n"
            f"• Self Citations: {stats.get('selfCitations') or 0}\n"
            f"• References Made: {stats.get('referencesCount') or 0}\n\n"
            "**Impact Metrics:**\n"
            f"• H-Index Contribution: {stats.get('hIndexContribution') or 0}\n"
            f"• Citation Velocity: {stats.get('citationVelocity') or 0} citations/month\n"
            f"• Peak Citation Year: {stats.get('peakYear') or 'N/A'}\n\n"
            "**Temporal Analysis:**\n"
            f"• First Citation: {first}\n"
            f"• Latest Citation: {latest}\n"
            f"• Citation Half-Life: {stats.get('halfLife') or 'N/A'} months\n\n"
            "**Comparison:**\n"
            f"• Percentile in Field: {stats.get('fieldPercentile') or 'N/A'}%\n"
            f"• Above Average: {'Yes' if stats.get('aboveAverage') else 'No'}"
        )
