"""
Agent Management Tools - AI agents managed by the authenticated supervisor.
"""

from typing import Any, Dict, List, Optional

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


class GetAgentsInput(ToolInput):
    pass


class CreateAgentInput(ToolInput):
    name: str = Field(..., description="Human-readable name for the agent")
    model: Optional[str] = Field(
        default=None,
        description="RECOMMENDED: AI model used (e.g., 'gpt-4', 'claude-3-opus'). Helps users understand agent capabilities."
    )
    system_prompt: Optional[str] = Field(
        default=None,
        alias="systemPrompt",
        description="RECOMMENDED: System prompt defining the agent's behavior, expertise, and review style."
    )
    additional_info: Optional[str] = Field(
        default=None,
        alias="additionalInfo",
        description="Additional configuration or description (specializations, limitations, intended use)."
    )


class UpdateAgentInput(ToolInput):
    agent_id: str = Field(..., alias="agentId", description="ID of the agent to update")
    name: Optional[str] = Field(default=None, description="New name for the agent")
    model: Optional[str] = Field(default=None, description="AI model used by the agent")
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt", description="Updated system prompt")
    additional_info: Optional[str] = Field(default=None, alias="additionalInfo", description="Updated description")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Activate or deactivate the agent")


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


class AgentTools(ToolProvider):
    """Create, list and update the supervisor's AI agents (authentication required)."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool("get_agents", "Get all agents managed by the authenticated supervisor", GetAgentsInput),
            define_tool(
                "create_agent",
                "Create a new AI agent under supervisor management. RECOMMENDED: Provide model and "
                "systemPrompt to define agent behavior clearly. Ask user about the agent's purpose and capabilities.",
                CreateAgentInput,
            ),
            define_tool("update_agent", "Update an existing agent's configuration", UpdateAgentInput),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "get_agents": self.bind(GetAgentsInput, self.get_agents),
            "create_agent": self.bind(CreateAgentInput, self.create_agent),
            "update_agent": self.bind(UpdateAgentInput, self.update_agent),
        }

    async def get_agents(self, args: GetAgentsInput) -> ResponseType:
        response = await self.client.request("/agents")
        agents = response.get("data") or []

        if not agents:
            return format_text_response("You have 0 agents:\n\nNo agents found.")

        lines = []
        for index, agent in enumerate(agents, start=1):
            prompt = agent.get("systemPrompt")
            lines.append(
                f"{index}. **{agent.get('name')}** (ID: {agent.get('id')})\n"
                f"   Model: {agent.get('model') or 'Not specified'}\n"
                f"   Default: {_yes_no(agent.get('isDefault'))}\n"
                f"   Active: {_yes_no(agent.get('isActive'))}\n"
                f"   Created: {format_date(agent.get('createdAt'))}\n"
                f"   {'System Prompt: ' + truncate(prompt, 100) if prompt else 'No system prompt'}\n"
            )
        return format_text_response(f"You have {len(agents)} agents:\n\n" + "\n".join(lines))

    async def create_agent(self, args: CreateAgentInput) -> ResponseType:
        body = args.model_dump(by_alias=True, exclude_none=True)
        agent = (await self.client.request("/agents", method="POST", json=body)).get("data") or {}

        return format_text_response(
            f'✅ Agent "{agent.get("name")}" created successfully!\n\n'
            "**Agent Details:**\n"
            f"- ID: {agent.get('id')}\n"
            f"- Name: {agent.get('name')}\n"
            f"- Model: {agent.get('model') or 'Not specified'}\n"
            f"- Active: {_yes_no(agent.get('isActive'))}\n"
            f"- Created: {format_date(agent.get('createdAt'))}\n\n"
            "You can now use this agent when submitting papers by including its ID in the selectedAgentIds parameter."
        )

    async def update_agent(self, args: UpdateAgentInput) -> ResponseType:
        body = args.model_dump(by_alias=True, exclude_none=True, exclude={"agent_id"})
        agent = (await self.client.request(f"/agents/{args.agent_id}", method="PUT", json=body)).get("data") or {}

        return format_text_response(
            f'✅ Agent "{agent.get("name")}" updated successfully!\n\n'
            "**Updated Agent Details:**\n"
            f"- ID: {agent.get('id')}\n"
            f"- Name: {agent.get('name')}\n"
            f"- Model: {agent.get('model') or 'Not specified'}\n"
            f"- Active: {_yes_no(agent.get('isActive'))}\n"
            f"- Last Updated: {format_date(agent.get('updatedAt'))}"
        )
