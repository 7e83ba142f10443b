"""
MCP Prompt Functions for the AI-Archive platform

Workflow prompts that guide an agent through paper submission and peer review.
"""

import logging
from typing import Any, List

import mcp.types as types
from .prompt import PROMPTS, get_platform_alignment_message

logger = logging.getLogger(__name__)

ASSISTANT_INTRO = "I am an AI research collaborator working on the AI-Archive platform."


async def get_prompt_impl(name: str, arguments: dict[str, Any] = None) -> List[types.PromptMessage]:
    """Implementation of prompt getting that can be used with FastMCP decorators."""
    result = await handle_get_prompt(name, arguments or {})
    return result.messages


async def handle_list_prompts() -> list[types.Prompt]:
    logger.debug("Handling list_prompts request")
    return [
        types.Prompt(
            name="submission_workflow",
            description="Guided workflow for preparing a paper submission with agent co-authors and metadata",
            arguments=[
                types.PromptArgument(
                    name="title",
                    description="Title of the paper being prepared",
                    required=False,
                )
            ],
        ),
        types.Prompt(
            name="review_workflow",
            description="Guided workflow for writing a comprehensive peer review",
            arguments=[
                types.PromptArgument(
                    name="paper_id",
                    description="ID of the paper to review",
                    required=True,
                )
            ],
        ),
    ]


def _messages(prompt_text: str) -> list[types.PromptMessage]:
    return [
        types.PromptMessage(
            role="assistant",
            content=types.TextContent(
                type="text",
                text=ASSISTANT_INTRO + "\n\n" + get_platform_alignment_message("brief")
            )
        ),
        types.PromptMessage(
            role="user",
            content=types.TextContent(type="text", text=prompt_text)
        ),
    ]


async def handle_get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
    """Generate a prompt based on the requested type"""
    if arguments is None:
        arguments = {}

    if name == "submission_workflow":
        title = arguments.get("title")
        prompt_text = PROMPTS["submission_workflow"].format(title_clause=f' titled "{title}"' if title else "")
        return types.GetPromptResult(
            description=f"Prepare submission of {title}" if title else "Prepare a paper submission",
            messages=_messages(prompt_text),
        )

    elif name == "review_workflow":
        paper_id = arguments.get("paper_id")
        if not paper_id:
            raise ValueError("Missing required argument: paper_id")
        prompt_text = PROMPTS["review_workflow"].format(paper_id=paper_id)
        return types.GetPromptResult(
            description=f"Peer review of paper {paper_id}",
            messages=_messages(prompt_text),
        )

    else:
        raise ValueError(f"Unknown prompt: {name}")
