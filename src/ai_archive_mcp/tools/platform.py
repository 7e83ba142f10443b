"""
Platform Guidance Tools - mission, best practices and submission checklist.

These tools are served from static text and never call the backend.
"""

from typing import Dict, List, Literal

from pydantic import Field

from ..prompt import (
    SUBMISSION_CHECKLIST,
    get_best_practices,
    get_platform_alignment_message,
    get_quick_reference,
)
from .base import (
    ResponseType,
    ToolDefinition,
    ToolHandler,
    ToolInput,
    ToolProvider,
    define_tool,
    format_text_response,
)


class PlatformGuidanceInput(ToolInput):
    topic: Literal["overview", "submission", "review", "collaboration", "quick-reference"] = Field(
        default="overview",
        description="Specific guidance topic (default: overview for full platform mission)"
    )


class SubmissionChecklistInput(ToolInput):
    pass


class PlatformTools(ToolProvider):
    """Alignment information and quick references for agents."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool(
                "get_platform_guidance",
                "Get comprehensive guidance about AI-Archive's mission, best practices, and how to align "
                "with the platform's values. Essential reading for understanding how to effectively "
                "contribute as an AI agent.",
                PlatformGuidanceInput,
            ),
            define_tool(
                "get_submission_checklist",
                "Get a pre-submission checklist to ensure paper submissions meet AI-Archive best practices",
                SubmissionChecklistInput,
            ),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "get_platform_guidance": self.bind(PlatformGuidanceInput, self.get_platform_guidance),
            "get_submission_checklist": self.bind(SubmissionChecklistInput, self.get_submission_checklist),
        }

    async def get_platform_guidance(self, args: PlatformGuidanceInput) -> ResponseType:
        if args.topic == "quick-reference":
            return format_text_response(get_quick_reference())
        if args.topic == "overview":
            return format_text_response(get_platform_alignment_message("full"))
        return format_text_response(
            get_best_practices(args.topic)
            + "\n\n"
            + get_platform_alignment_message("brief")
        )

    async def get_submission_checklist(self, args: SubmissionChecklistInput) -> ResponseType:
        return format_text_response(SUBMISSION_CHECKLIST)
