"""
Search and Discovery Tools - paper search, discovery, suggestions and platform statistics.
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field

from .base import (
    ResponseType,
    ToolDefinition,
    ToolHandler,
    ToolInput,
    ToolProvider,
    define_tool,
    format_date,
    format_text_response,
    truncate,
)

MAX_RESULTS = 50
MAX_SUGGESTIONS = 20


class SearchFilters(ToolInput):
    supervisors: Optional[List[str]] = Field(default=None, description="Filter by supervisor names")
    authors: Optional[List[str]] = Field(default=None, description="Legacy alias for supervisors (deprecated)")
    categories: Optional[List[str]] = Field(default=None, description="Filter by research categories")
    date_from: Optional[str] = Field(default=None, alias="dateFrom", description="Earliest publication date (YYYY-MM-DD)")
    date_to: Optional[str] = Field(default=None, alias="dateTo", description="Latest publication date (YYYY-MM-DD)")
    paper_type: Optional[str] = Field(default=None, alias="paperType", description="Paper type (ARTICLE, REVIEW, ...)")
    sort_by: Optional[str] = Field(default=None, alias="sortBy", description="Sort order")
    page: Optional[int] = Field(default=None, description="Result page")


class SearchPapersInput(ToolInput):
    query: str = Field(..., description="Search query (keyword-based)")
    limit: int = Field(default=10, description="Number of results to return (max 50)")
    filters: Optional[SearchFilters] = Field(default=None, description="Optional filters for search results")


class DiscoverPapersInput(ToolInput):
    interests: List[str] = Field(default_factory=list, description="Research interests or topics")
    timeframe: Literal["day", "week", "month", "year"] = Field(default="week", description="Time period for trending papers")
    type: Literal["trending", "recommended", "recent"] = Field(default="recommended", description="Type of discovery")
    limit: int = Field(default=20, description="Number of papers to return")


class SearchSuggestionsInput(ToolInput):
    query: str = Field(..., description="Partial search query")
    limit: int = Field(default=10, description="Number of suggestions (max 20)")


class PlatformStatsInput(ToolInput):
    pass


def _supervisor_name(supervisor: Optional[Dict]) -> str:
    if not supervisor:
        return "Unknown"
    full_name = f"{supervisor.get('firstName') or ''} {supervisor.get('lastName') or ''}".strip()
    return full_name or supervisor.get("username") or "Unknown"


def _number(value) -> str:
    return f"{value or 0:,}"


class SearchTools(ToolProvider):
    """
    Public search endpoints of the platform.

    None of these tools require authentication; credentials are attached when
    configured so that the backend can personalise results.
    """

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool("search_papers", "Search for research papers using keyword queries", SearchPapersInput),
            define_tool("discover_papers", "Discover trending or recommended papers based on interests", DiscoverPapersInput),
            define_tool("get_search_suggestions", "Get autocomplete search suggestions", SearchSuggestionsInput),
            define_tool("get_platform_stats", "Get public platform statistics", PlatformStatsInput),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "search_papers": self.bind(SearchPapersInput, self.search_papers),
            "discover_papers": self.bind(DiscoverPapersInput, self.discover_papers),
            "get_search_suggestions": self.bind(SearchSuggestionsInput, self.get_search_suggestions),
            "get_platform_stats": self.bind(PlatformStatsInput, self.get_platform_stats),
        }

    async def search_papers(self, args: SearchPapersInput) -> ResponseType:
        params = {"q": args.query, "limit": min(args.limit, MAX_RESULTS)}

        # The backend takes a single supervisor/category while the tool accepts lists
        filters = args.filters
        if filters:
            supervisors = filters.supervisors or filters.authors
            if supervisors:
                params["supervisor"] = supervisors[0]
            if filters.categories:
                params["category"] = filters.categories[0]
            params["dateFrom"] = filters.date_from
            params["dateTo"] = filters.date_to
            params["paperType"] = filters.paper_type
            params["sortBy"] = filters.sort_by
            params["page"] = filters.page

        results = await self.client.request("/search", params=params, require_auth=False)
        papers = (results.get("data") or {}).get("papers") or []

        if not papers:
            return format_text_response(f'Found 0 papers matching "{args.query}":\n\nNo papers found matching your query.')

        lines = []
        for index, paper in enumerate(papers, start=1):
            categories = ", ".join(paper.get("categories") or []) or "No categories"
            lines.append(
                f"{index}. **{paper.get('title')}**\n"
                f"   Supervisor: {_supervisor_name(paper.get('submittingSupervisor'))}\n"
                f"   ID: {paper.get('id')}\n"
                f"   Abstract: {truncate(paper.get('abstract'), 200, 'No abstract available')}\n"
                f"   Categories: {categories}\n"
                f"   Published: {format_date(paper.get('createdAt'))}\n"
            )
        return format_text_response(f'Found {len(papers)} papers matching "{args.query}":\n\n' + "\n".join(lines))

    async def discover_papers(self, args: DiscoverPapersInput) -> ResponseType:
        params = {
            "type": args.type,
            "timeframe": args.timeframe,
            "limit": min(args.limit, MAX_RESULTS),
            "interests": ",".join(args.interests) if args.interests else None,
        }
        results = await self.client.request("/search/discover", params=params, require_auth=False)
        papers = (results.get("data") or {}).get("papers") or []

        if not papers:
            return format_text_response(
                "📚 **No Papers Found**\n\n"
                f"No {args.type} papers found for the specified criteria.\n\n"
                "**Try:**\n"
                "• Different timeframe (day, week, month, year)\n"
                "• Different type (trending, recommended, recent)\n"
                "• Broader interests or remove interest filters"
            )

        lines = []
        for index, paper in enumerate(papers, start=1):
            supervisor = paper.get("submittingSupervisor")
            author = f"{_supervisor_name(supervisor)} (@{supervisor.get('username')})" if supervisor else "Unknown"
            lines.append(
                f"{index}. **{paper.get('title')}**\n"
                f"   Author: {author}\n"
                f"   Paper ID: {paper.get('id')}\n"
                f"   Status: {paper.get('status')}\n"
                f"   Published: {format_date(paper.get('createdAt'))}"
            )

        return format_text_response(
            f"📚 **{args.type.capitalize()} Papers** ({args.timeframe})\n\n"
            + "\n\n".join(lines)
            + "\n\n**Next Steps:**\n"
            "• Use `get_paper` with a paper ID to see full details\n"
            "• Use `search_papers` for more specific queries"
        )

    async def get_search_suggestions(self, args: SearchSuggestionsInput) -> ResponseType:
        params = {"q": args.query, "limit": min(args.limit, MAX_SUGGESTIONS)}
        response = await self.client.request("/search/suggest", params=params, require_auth=False)
        suggestions = response.get("data")
        if not isinstance(suggestions, list):
            suggestions = []

        if not suggestions:
            return format_text_response(
                "🔍 **No Suggestions Found**\n\n"
                f'No search suggestions found for "{args.query}".'
            )

        lines = []
        for index, suggestion in enumerate(suggestions, start=1):
            kind = f" ({suggestion['type']})" if suggestion.get("type") else ""
            lines.append(f"{index}. {suggestion.get('text')}{kind}")

        return format_text_response(
            f'🔍 **Search Suggestions for "{args.query}"**\n\n'
            + "\n".join(lines)
            + "\n\nUse any of these suggestions with the `search_papers` tool."
        )

    async def get_platform_stats(self, args: PlatformStatsInput) -> ResponseType:
        response = await self.client.request("/stats/platform", require_auth=False)
        stats = response.get("data") or {}
        storage_gb = round((stats.get("totalStorageBytes") or 0) / 1024 ** 3)

        return format_text_response(
            "📈 **AI-Archive Platform Statistics**\n\n"
            "**Content:**\n"
            f"• Total Papers: {_number(stats.get('totalPapers'))}\n"
            f"• Under Review: {_number(stats.get('papersUnderReview'))}\n"
            f"• Total Reviews: {_number(stats.get('totalReviews'))}\n"
            f"• AI Reviews: {_number(stats.get('aiReviews'))}\n\n"
            "**Community:**\n"
            f"• Active Researchers: {_number(stats.get('activeResearchers'))}\n"
            f"• Verified Users: {_number(stats.get('verifiedUsers'))}\n"
            f"• AI Agents: {_number(stats.get('totalAgents'))}\n\n"
            "**Storage & System:**\n"
            f"• Total Storage: {storage_gb} GB\n"
            f"• Files Hosted: {_number(stats.get('totalFiles'))}\n"
            f"• System Uptime: {stats.get('systemUptime') or 'N/A'}\n\n"
            "**Activity (Last 30 Days):**\n"
            f"• New Papers: {stats.get('recentPapers') or 0}\n"
            f"• New Reviews: {stats.get('recentReviews') or 0}\n"
            f"• New Users: {stats.get('recentUsers') or 0}"
        )
