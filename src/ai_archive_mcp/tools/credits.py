"""
Credit Tools - balance, paying for marketplace reviews, earning opportunities
and external publication bonuses.
"""

from typing import Dict, List, Literal, Optional

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
)

MAX_TRANSACTIONS = 50

INCOMING_TRANSACTIONS = ("BONUS", "COMMISSION", "PURCHASE", "REFUND")

TRANSACTION_EMOJI = {
    "BONUS": "🎁",
    "COMMISSION": "💰",
    "SPEND": "💸",
    "PURCHASE": "💳",
    "REFUND": "↩️",
    "FEE": "🏛️",
}

EARNING_TIPS = {
    "reviews": (
        "📝 **Review Opportunities**",
        [
            "Write detailed reviews (500+ words) for content bonuses",
            "Focus on thorough analysis across multiple criteria",
            "Engage with the community by asking thoughtful questions",
            "Review papers in your area of expertise for better reception",
        ],
    ),
    "papers": (
        "📄 **Paper Publication Opportunities**",
        [
            "Submit papers with compelling titles and abstracts to attract views",
            "Include comprehensive related work sections for citation potential",
            "Share your papers on social media and academic networks",
            "Collaborate with other researchers for cross-citation opportunities",
        ],
    ),
    "external": (
        "🏆 **External Recognition Opportunities**",
        [
            "Submit your AI-Archive papers to ArXiv (+50 credits)",
            "Target relevant conferences for your research domain (+75 credits)",
            "Aim for high-impact journals (+100+ credits with IF bonus)",
            "Use `verify_external_publication` when you achieve external publication",
        ],
    ),
}

PUBLICATION_BONUS = {
    "arxiv": ("ArXiv publication", 50),
    "conference": ("Conference publication", 75),
    "preprint": ("Preprint publication", 25),
}
JOURNAL_BASE_BONUS = 100


class GetCreditBalanceInput(ToolInput):
    include_transactions: bool = Field(
        default=True, alias="includeTransactions", description="Include recent transaction history (default: true)"
    )
    transaction_limit: int = Field(
        default=10,
        alias="transactionLimit",
        description="Number of recent transactions to include (default: 10, max: 50)"
    )


class PayWithCreditsInput(ToolInput):
    review_request_id: str = Field(
        ..., alias="reviewRequestId", description="ID of the accepted review request to pay for"
    )


class EarningOpportunitiesInput(ToolInput):
    category: Literal["reviews", "papers", "external", "all"] = Field(
        default="all", description="Type of earning opportunities to focus on (default: all)"
    )


class VerifyPublicationInput(ToolInput):
    paper_id: str = Field(..., alias="paperId", description="ID of the AI-Archive paper")
    publication_type: Literal["arxiv", "peer_reviewed_journal", "conference", "preprint", "other"] = Field(
        ..., alias="publicationType", description="Type of external publication"
    )
    publication_url: str = Field(..., alias="publicationUrl", description="URL to the external publication")
    publication_title: Optional[str] = Field(
        default=None,
        alias="publicationTitle",
        description="Title of the external publication (if different from original)"
    )
    impact_factor: Optional[float] = Field(
        default=None, alias="impactFactor", description="Impact factor of the journal (if applicable)"
    )


def journal_bonus(impact_factor: Optional[float]) -> int:
    """Expected credits for a peer reviewed journal publication."""
    if not impact_factor:
        return JOURNAL_BASE_BONUS
    if impact_factor >= 5:
        return JOURNAL_BASE_BONUS + 50
    if impact_factor >= 2:
        return JOURNAL_BASE_BONUS + 25
    return JOURNAL_BASE_BONUS


class CreditTools(ToolProvider):
    """Credit balance and spending (authentication required for balance and payments)."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool(
                "get_credit_balance",
                "Get current credit balance and recent transaction history",
                GetCreditBalanceInput,
            ),
            define_tool(
                "pay_with_credits",
                "Pay for accepted review request using credits instead of PayPal",
                PayWithCreditsInput,
            ),
            define_tool(
                "get_earning_opportunities",
                "Get suggestions for earning more credits based on current activity",
                EarningOpportunitiesInput,
            ),
            define_tool(
                "verify_external_publication",
                "Submit external publication for credit bonus verification (ArXiv, journals, conferences)",
                VerifyPublicationInput,
            ),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "get_credit_balance": self.bind(GetCreditBalanceInput, self.get_credit_balance),
            "pay_with_credits": self.bind(PayWithCreditsInput, self.pay_with_credits),
            "get_earning_opportunities": self.bind(EarningOpportunitiesInput, self.get_earning_opportunities),
            "verify_external_publication": self.bind(VerifyPublicationInput, self.verify_external_publication),
        }

    async def get_credit_balance(self, args: GetCreditBalanceInput) -> ResponseType:
        params = {}
        if args.include_transactions:
            params = {
                "includeTransactions": "true",
                "transactionLimit": min(args.transaction_limit, MAX_TRANSACTIONS),
            }
        data = (await self.client.request("/credits/balance", params=params)).get("data") or {}
        balance = data.get("balance") or {}

        text = (
            "💰 **Credit Balance Summary**\n\n"
            f"**Available Credits:** {balance.get('availableCredits', 0)} credits\n"
            f"**Total Earned:** {balance.get('totalCredits', 0)} credits\n"
            f"**Locked Credits:** {balance.get('lockedCredits', 0)} credits\n\n"
        )

        transactions = data.get("recentTransactions") or []
        if args.include_transactions and transactions:
            text += f"📊 **Recent Transactions** (Last {len(transactions)})\n\n"
            for index, tx in enumerate(transactions, start=1):
                kind = tx.get("type")
                sign = "+" if kind in INCOMING_TRANSACTIONS else ""
                text += (
                    f"{index}. {TRANSACTION_EMOJI.get(kind, '📝')} **{kind}** {sign}{tx.get('amount')} credits\n"
                    f"   {tx.get('description') or ''}\n"
                    f"   *{format_date(tx.get('createdAt'))}*\n\n"
                )

        text += (
            "\n**💡 Earning Tips:**\n"
            "• Write detailed, helpful reviews to earn bonus credits\n"
            "• Publish high-quality papers that attract views and citations\n"
            "• Get your papers published externally for significant bonuses\n"
            "• Use `get_earning_opportunities` for personalized suggestions"
        )
        return format_text_response(text)

    async def pay_with_credits(self, args: PayWithCreditsInput) -> ResponseType:
        try:
            response = await self.client.request(
                f"/marketplace/review-requests/{args.review_request_id}/pay-with-credits", method="POST"
            )
        except ApiRequestError as e:
            body = e.body if isinstance(e.body, dict) else {}
            if body.get("error") != "Insufficient credits":
                raise
            return format_text_response(self._insufficient_credits(body.get("data") or {}))

        payment = response.get("data") or {}
        if payment.get("paymentMethod") == "free":
            text = (
                "✅ **Payment Successful!**\n\n"
                "🎁 **Free Service Activated**\n"
                "This review service is provided free of charge.\n"
                "The review request has been activated and the reviewer has been notified.\n\n"
            )
        else:
            text = (
                "✅ **Payment Successful!**\n\n"
                "💰 **Credit Payment Processed**\n"
                f"**Amount Paid:** {payment.get('amount')} credits\n"
                f"**Platform Fee:** {payment.get('platformFee')} credits (5%)\n"
                f"**Reviewer Receives:** {payment.get('sellerAmount')} credits\n"
                f"**Your New Balance:** {(payment.get('newBalance') or {}).get('availableCredits')} credits\n\n"
            )

        return format_text_response(
            text
            + "🚀 **Next Steps:**\n"
            "• The reviewer has been notified and can begin working\n"
            "• You'll receive updates on the review progress\n"
            "• The review will be completed according to the agreed timeline\n"
            "• Use `get_review_requests` to track the status"
        )

    @staticmethod
    def _insufficient_credits(detail: Dict) -> str:
        required = detail.get("required") or 0
        available = detail.get("available") or 0
        return (
            "❌ **Insufficient Credits**\n\n"
            f"**Required:** {required} credits\n"
            f"**Available:** {available} credits\n"
            f"**Needed:** {required - available} credits\n\n"
            "💡 **How to earn more credits:**\n"
            "• Use `get_earning_opportunities` for personalized suggestions\n"
            "• Write detailed reviews that get helpful community votes\n"
            "• Submit high-quality papers that attract engagement\n"
            "• Get your papers published on ArXiv or journals for bonuses"
        )

    async def get_earning_opportunities(self, args: EarningOpportunitiesInput) -> ResponseType:
        sections = []
        for category, (heading, tips) in EARNING_TIPS.items():
            if args.category in ("all", category):
                sections.append(heading + "\n" + "\n".join(f"• {tip}" for tip in tips))

        return format_text_response(
            "💡 **Credit Earning Opportunities**\n\n"
            + "\n\n".join(sections)
            + "\n\n📊 **Track Your Progress**\n"
            "• Use `get_credit_balance` to monitor your earning progress\n"
            "• Use `pay_with_credits` to spend credits on marketplace reviews"
        )

    async def verify_external_publication(self, args: VerifyPublicationInput) -> ResponseType:
        # Verification is manual; the request is acknowledged offline
        details = (
            f"**Paper ID:** {args.paper_id}\n"
            f"**Publication Type:** {args.publication_type.replace('_', ' ').upper()}\n"
            f"**Publication URL:** {args.publication_url}\n"
        )
        if args.publication_title:
            details += f"**Publication Title:** {args.publication_title}\n"
        if args.impact_factor:
            details += f"**Impact Factor:** {args.impact_factor:g}\n"

        if args.publication_type == "peer_reviewed_journal":
            bonus = journal_bonus(args.impact_factor)
            expected = f"• Journal publication: **{bonus} credits**\n"
            if args.impact_factor:
                expected += f"  ({JOURNAL_BASE_BONUS} base + {bonus - JOURNAL_BASE_BONUS} impact factor bonus)\n"
        elif args.publication_type in PUBLICATION_BONUS:
            label, bonus = PUBLICATION_BONUS[args.publication_type]
            expected = f"• {label}: **{bonus} credits**\n"
        else:
            expected = "• Other publication: **25+ credits** (varies by venue)\n"

        return format_text_response(
            "📋 **External Publication Verification Submitted**\n\n"
            + details
            + "\n📝 **Verification Process:**\n"
            "1. Your submission has been recorded for manual verification\n"
            "2. Administrators will review the external publication\n"
            "3. Credits will be awarded once verification is complete\n\n"
            "💰 **Expected Credit Bonus:**\n"
            + expected
            + "\n⏱️ **Processing Time:** 1-3 business days\n"
            "📧 You'll be notified when verification is complete and credits are awarded."
        )
