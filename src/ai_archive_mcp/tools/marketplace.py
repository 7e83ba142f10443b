"""
Marketplace Tools - browsing reviewer agents, review requests and analytics.

Only the read side of the marketplace is exposed; creating requests and
responding to them happens on the platform.
"""

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

RequestStatus = Literal["PENDING", "ACCEPTED", "REJECTED", "IN_PROGRESS", "COMPLETED", "CANCELLED", "EXPIRED"]

STATUS_EMOJI = {
    "PENDING": "⏳",
    "ACCEPTED": "✅",
    "REJECTED": "❌",
    "IN_PROGRESS": "🔄",
    "COMPLETED": "✔️",
    "CANCELLED": "🚫",
    "EXPIRED": "⏱️",
}

PRIORITY_LABELS = {"urgent": "🔴 URGENT", "low": "🟢 Low"}


class SearchReviewersInput(ToolInput):
    specialization: Optional[str] = Field(
        default=None,
        description="Filter by agent specialization (e.g., 'computer vision', 'NLP', 'machine learning')"
    )
    max_price: Optional[float] = Field(
        default=None, alias="maxPrice", description="Maximum price per review (filters out more expensive agents)"
    )
    is_free: Optional[bool] = Field(default=None, alias="isFree", description="Filter for free agents only")
    page: int = Field(default=1, description="Page number for pagination (default: 1)")
    limit: int = Field(default=20, description="Number of results per page (default: 20, max: 50)")


class ReviewerDetailsInput(ToolInput):
    agent_id: str = Field(..., alias="agentId", description="ID of the agent to get details for")


class ReviewRequestsInput(ToolInput):
    type: Literal["incoming", "outgoing", "both"] = Field(
        default="both", description="Type of requests to retrieve (default: both)"
    )
    status: Optional[RequestStatus] = Field(default=None, description="Filter by request status")
    page: int = Field(default=1, description="Page number for pagination (default: 1)")
    limit: int = Field(default=20, description="Number of results per page (default: 20, max: 50)")


class MarketplaceAnalyticsInput(ToolInput):
    agent_id: Optional[str] = Field(
        default=None, alias="agentId", description="Specific agent ID (optional, shows all agents if omitted)"
    )
    timeframe: Literal["week", "month", "quarter", "year"] = Field(default="month", description="Analytics timeframe")


class IncomingRequestsInput(ToolInput):
    agent_id: Optional[str] = Field(default=None, alias="agentId", description="Filter by specific agent")
    status: Optional[RequestStatus] = Field(default=None, description="Filter by status")
    priority: Optional[Literal["urgent", "normal", "low"]] = Field(default=None, description="Filter by urgency")
    min_price: Optional[float] = Field(default=None, alias="minPrice", description="Minimum offered price")
    page: int = Field(default=1, description="Page number")
    limit: int = Field(default=20, description="Results per page")


def _price(profile: Dict) -> str:
    if profile.get("isFree"):
        return "Free"
    return f"${profile.get('pricePerReview')} {profile.get('currency') or ''}".rstrip()


def _rating(profile: Dict) -> Optional[str]:
    rating = profile.get("averageRating")
    if rating is None:
        return None
    return f"{float(rating):.1f}"


def _percent(value: Any, digits: int = 1) -> str:
    if not value:
        return "N/A"
    return f"{float(value) * 100:.{digits}f}%"


def _status_suffix(status: Optional[str]) -> str:
    return f" with status {status}" if status else ""


class MarketplaceTools(ToolProvider):
    """Reviewer agent marketplace, read-only (authentication required)."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool(
                "search_reviewers",
                "Search for available reviewer agents by specialization, price, and performance stats",
                SearchReviewersInput,
            ),
            define_tool(
                "get_reviewer_details",
                "Get detailed information about a specific reviewer agent including stats and sample reviews",
                ReviewerDetailsInput,
            ),
            define_tool(
                "get_review_requests",
                "Get review requests (incoming requests to your agents or outgoing requests from you)",
                ReviewRequestsInput,
            ),
            define_tool(
                "get_marketplace_analytics",
                "Get marketplace analytics for your agents (earnings, performance, etc.)",
                MarketplaceAnalyticsInput,
            ),
            define_tool(
                "get_incoming_requests",
                "Get incoming review requests for your agents with enhanced filtering",
                IncomingRequestsInput,
            ),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "search_reviewers": self.bind(SearchReviewersInput, self.search_reviewers),
            "get_reviewer_details": self.bind(ReviewerDetailsInput, self.get_reviewer_details),
            "get_review_requests": self.bind(ReviewRequestsInput, self.get_review_requests),
            "get_marketplace_analytics": self.bind(MarketplaceAnalyticsInput, self.get_marketplace_analytics),
            "get_incoming_requests": self.bind(IncomingRequestsInput, self.get_incoming_requests),
        }

    async def search_reviewers(self, args: SearchReviewersInput) -> ResponseType:
        params = {
            "page": args.page,
            "limit": min(args.limit, MAX_RESULTS),
            "specialization": args.specialization,
            "maxPrice": args.max_price,
            "isFree": args.is_free,
        }
        data = (await self.client.request("/marketplace/agents", params=params)).get("data") or {}
        agents = data.get("agents") or []

        if not agents:
            return format_text_response(
                "🔍 No reviewers found matching your criteria.\n\n"
                "Try adjusting your search filters:\n"
                "• Remove or broaden specialization requirements\n"
                "• Increase maximum price limit\n"
                "• Include paid reviewers (remove isFree filter)"
            )

        lines = []
        for index, agent in enumerate(agents, start=1):
            profile = agent.get("marketplaceProfile") or {}
            rating = _rating(profile)
            lines.append(
                f"{index}. **{agent.get('name')}** ({_price(profile)})\n"
                f"   {f'⭐ {rating}/5' if rating else 'No ratings yet'} • "
                f"{profile.get('totalReviewsCompleted') or 0} reviews completed\n"
                f"   Specializations: {', '.join(profile.get('specializations') or []) or 'General review'}\n"
                f"   Avg completion: {profile.get('averageCompletionTime') or 'N/A'} hours\n"
                f"   Agent ID: {agent.get('id')}"
            )

        total_pages = data.get("totalPages") or 1
        return format_text_response(
            f"🔍 **Found {len(agents)} Available Reviewers** (Page {args.page}/{total_pages})\n\n"
            + "\n\n".join(lines)
            + "\n\n**Next Steps:**\n"
            "• Use `get_reviewer_details` to see detailed info and sample reviews\n"
            + pagination_text(args.page, total_pages)
        )

    async def get_reviewer_details(self, args: ReviewerDetailsInput) -> ResponseType:
        try:
            response = await self.client.request(f"/marketplace/agents/{args.agent_id}")
        except ApiRequestError as e:
            if e.status_code == 404:
                raise ApiRequestError(f"Reviewer agent {args.agent_id} not found or not available for hire", 404) from e
            raise

        agent = response.get("data") or {}
        profile = agent.get("marketplaceProfile") or {}
        supervisor = agent.get("supervisor") or {}

        rating = _rating(profile)
        if rating:
            rating_line = f"⭐ {rating}/5.0 ({profile.get('totalReviews') or 0} reviews)"
        else:
            rating_line = "📊 No ratings yet"
        completed = profile.get("totalReviewsCompleted") or 0
        if profile.get("completionRate"):
            completion_line = f"✅ {_percent(profile['completionRate'], 0)} completion rate ({completed} completed)"
        else:
            completion_line = f"✅ {completed} reviews completed"
        hours = profile.get("averageResponseTimeHours")
        response_line = f"⏱️ {hours} hours average" if hours else "⏱️ Response time not tracked"
        pricing = "🆓 Free" if profile.get("isFree") else f"💰 {profile.get('pricePerReview')} {profile.get('currency') or ''}"

        recent = ""
        reviews = [entry.get("review") for entry in agent.get("reviews") or [] if entry.get("review")]
        if reviews:
            recent = "\n**📝 Recent Reviews:**\n" + "\n".join(
                f"{index}. \"{(review.get('paper') or {}).get('title')}\" - Score: {review.get('overallScore')}/10 "
                f"({format_date(review.get('createdAt'))})"
                for index, review in enumerate(reviews, start=1)
            ) + "\n"

        extras = ""
        if profile.get("description"):
            extras += f"\n**📄 Description:**\n{profile['description']}\n"
        if profile.get("termsOfService"):
            extras += f"\n**⚖️ Terms of Service:**\n{profile['termsOfService']}\n"

        return format_text_response(
            "🤖 **Reviewer Agent Details**\n\n"
            f"**Name:** {agent.get('name')}\n"
            f"**Model:** {agent.get('model') or 'Not specified'}\n"
            f"**Agent ID:** {agent.get('id')}\n\n"
            "**🏆 Performance Metrics:**\n"
            f"{rating_line}\n{completion_line}\n{response_line}\n{pricing.rstrip()}\n\n"
            "**👤 Supervisor:**\n"
            f"Name: {supervisor.get('firstName') or ''} {supervisor.get('lastName') or ''} "
            f"(@{supervisor.get('username')})\n"
            f"Institution: {supervisor.get('institution') or 'Not specified'}\n"
            f"Reputation: {supervisor.get('reputationScore') or 0} points\n"
            f"Total Reviews: {supervisor.get('reviewCount') or 0}\n\n"
            "**🔬 Specializations:**\n"
            f"{', '.join(profile.get('specializations') or []) or 'General research'}\n\n"
            "**📋 Service Details:**\n"
            f"Max Concurrent: {profile.get('maxConcurrentReviews') or 'Unlimited'} reviews\n"
            f"Active: {'✅ Yes' if profile.get('isActive') else '❌ No'}\n"
            f"Auto-Accept: {'✅ Yes' if profile.get('autoAcceptRequests') else '❌ Manual approval'}\n"
            + extras
            + recent
            + "\n**Next Steps:**\n"
            "• Use `search_reviewers` to compare with other reviewers"
        )

    async def get_review_requests(self, args: ReviewRequestsInput) -> ResponseType:
        params = {
            "type": None if args.type == "both" else args.type,
            "status": args.status,
            "page": args.page,
            "limit": min(args.limit, MAX_RESULTS),
        }
        data = (await self.client.request("/marketplace/review-requests", params=params)).get("data") or {}
        requests = data.get("requests") or []

        if not requests:
            return format_text_response(
                "📭 **No Review Requests Found**\n\n"
                f"No {args.type} review requests found{_status_suffix(args.status)}.\n\n"
                "**Tips:**\n"
                "• For incoming requests: Create a marketplace profile for your agents\n"
                "• Check different status filters to see all requests"
            )

        lines = []
        for index, request in enumerate(requests, start=1):
            incoming = request.get("type") == "incoming"
            status = request.get("status")
            counterpart = (request.get("requester") or {}).get("username") or (request.get("agent") or {}).get("name")
            lines.append(
                f"{index}. {'📥 Incoming' if incoming else '📤 Outgoing'} {STATUS_EMOJI.get(status, '📝')} **{status}**\n"
                f"   Paper: {(request.get('paper') or {}).get('title') or 'Unknown'}\n"
                f"   {'Requester' if incoming else 'Reviewer'}: {counterpart or 'Unknown'}\n"
                f"   Price: {request.get('offeredPrice') or request.get('agreedPrice') or 0} credits\n"
                f"   Request ID: {request.get('id')}"
            )

        total_pages = data.get("totalPages") or 1
        return format_text_response(
            f"📋 **Review Requests** ({args.type}, Page {args.page}/{total_pages})\n\n"
            + "\n\n".join(lines)
            + "\n\n**Actions:**\n"
            "• Use `pay_with_credits` to pay for accepted requests\n"
            + pagination_text(args.page, total_pages)
        )

    async def get_marketplace_analytics(self, args: MarketplaceAnalyticsInput) -> ResponseType:
        params = {"agentId": args.agent_id, "timeframe": args.timeframe}
        try:
            response = await self.client.request("/marketplace/analytics", params=params)
        except ApiRequestError as e:
            if e.status_code != 404:
                raise
            return format_text_response(
                "📊 **Marketplace Analytics** (Coming Soon)\n\n"
                "The marketplace analytics feature is currently being developed.\n\n"
                "**Alternative ways to track performance:**\n"
                "• Use `get_review_requests` to see your request history\n"
                "• Use `get_credit_balance` to track your earnings\n"
                "• Check individual agent profiles with `get_reviewer_details`"
            )

        analytics = response.get("data") or {}
        scope = f"**Agent:** {analytics.get('agentName') or args.agent_id}" if args.agent_id else "**All Your Agents**"
        average_rating = analytics.get("averageRating")
        rating = f"{float(average_rating):.2f}/5" if average_rating else "N/A"

        specializations = ""
        if analytics.get("topSpecializations"):
            specializations = "**Top Specializations:**\n" + "\n".join(
                f"{index}. {spec.get('name')} ({spec.get('count')} reviews)"
                for index, spec in enumerate(analytics["topSpecializations"], start=1)
            ) + "\n\n"

        return format_text_response(
            f"📊 **Marketplace Analytics** ({args.timeframe})\n\n"
            f"{scope}\n\n"
            "**Performance:**\n"
            f"• Total Reviews: {analytics.get('totalReviews') or 0}\n"
            f"• Completed Reviews: {analytics.get('completedReviews') or 0}\n"
            f"• Pending Reviews: {analytics.get('pendingReviews') or 0}\n"
            f"• Average Rating: {rating}\n"
            f"• Completion Rate: {_percent(analytics.get('completionRate'))}\n\n"
            "**Earnings:**\n"
            f"• Total Earned: {analytics.get('totalEarnings') or 0} credits\n"
            f"• Average Per Review: {analytics.get('averageEarningsPerReview') or 0} credits\n"
            f"• Pending Earnings: {analytics.get('pendingEarnings') or 0} credits\n\n"
            "**Engagement:**\n"
            f"• Review Requests: {analytics.get('totalRequests') or 0}\n"
            f"• Acceptance Rate: {_percent(analytics.get('acceptanceRate'))}\n"
            f"• Average Response Time: {analytics.get('avgResponseTime') or 'N/A'}\n\n"
            + specializations
            + "**💡 Performance Tips:**\n"
            "• Maintain high ratings by providing thorough, constructive reviews\n"
            "• Respond quickly to requests to improve acceptance metrics\n"
            "• Specialize in specific areas to build expertise reputation"
        )

    async def get_incoming_requests(self, args: IncomingRequestsInput) -> ResponseType:
        params = {
            "type": "incoming",
            "agentId": args.agent_id,
            "status": args.status,
            "priority": args.priority,
            "minPrice": args.min_price,
            "page": args.page,
            "limit": min(args.limit, MAX_RESULTS),
        }
        data = (await self.client.request("/marketplace/review-requests", params=params)).get("data") or {}
        requests = data.get("requests") or []

        if not requests:
            return format_text_response(
                "📥 **No Incoming Requests**\n\n"
                f"No incoming review requests found{_status_suffix(args.status)}.\n\n"
                "**To receive requests:**\n"
                "• Create a marketplace profile for your agents on the platform\n"
                "• Set competitive pricing and highlight your specializations\n"
                "• Keep your agent active and responsive to build reputation"
            )

        lines = []
        for index, request in enumerate(requests, start=1):
            deadline = format_date(request["deadline"]) if request.get("deadline") else "Not specified"
            lines.append(
                f"{index}. {PRIORITY_LABELS.get(request.get('priority'), '🟡 Normal')} - "
                f"{(request.get('paper') or {}).get('title') or 'Unknown Paper'}\n"
                f"   Status: {request.get('status')}\n"
                f"   Offered Price: {request.get('offeredPrice') or 0} credits\n"
                f"   Deadline: {deadline}\n"
                f"   Request ID: {request.get('id')}"
            )

        total_pages = data.get("totalPages") or 1
        return format_text_response(
            f"📥 **Incoming Review Requests** (Page {args.page}/{total_pages})\n\n"
            + "\n\n".join(lines)
            + "\n\n"
            + pagination_text(args.page, total_pages)
        )
