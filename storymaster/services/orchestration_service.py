"""Orchestration service — turns an agent action into a prompt and a session."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import jinja2

from storymaster.exceptions import AgentNotFound
from storymaster.schemas.agent import AgentDefinition
from storymaster.schemas.llm import GenerationOptions
from storymaster.schemas.session import (
    ANONYMOUS_USER,
    DEFAULT_DOCUMENT,
    DEFAULT_PROJECT,
    AgentSession,
    SessionOutputs,
    UsageMetadata,
)
from storymaster.services.agent_loader import AgentRegistry
from storymaster.services.provider_gateway import ProviderGateway

logger = logging.getLogger(__name__)

_PROMPT_TEMPLATE = r"""
You are {{ agent.name }}, {{ agent.persona.role }}.

{{ agent.persona.style }}

Core Principles:
{% for principle in agent.persona.core_principles %}- {{ principle }}{{ "\n" if not loop.last else "" }}{% endfor %}

Current Story Context:
{{ context }}

User Request: {{ action }}

Additional Inputs:
{% for key, value in inputs.items() %}{{ key }}: {{ value }}{{ "\n" if not loop.last else "" }}{% endfor %}

Please provide your expert response as {{ agent.name }}.
"""

_env = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)
_prompt = _env.from_string(_PROMPT_TEMPLATE)


def build_prompt(
    agent: AgentDefinition, action: str, inputs: dict[str, Any], context: str
) -> str:
    """Render the instruction sent to the provider. Pure: same inputs, same text."""
    return _prompt.render(agent=agent, action=action, inputs=inputs, context=context).strip()


class OrchestrationService:
    def __init__(self, registry: AgentRegistry, gateway: ProviderGateway, resources_dir: Path):
        self.registry = registry
        self.gateway = gateway
        self.resources_dir = Path(resources_dir)

    def list_agents(self) -> list[AgentDefinition]:
        return self.registry.list()

    def get_agent(self, agent_id: str) -> AgentDefinition | None:
        return self.registry.get(agent_id)

    def check_dependencies(self, agent: AgentDefinition) -> list[Path]:
        """Return the dependency resources missing on disk (logged, never raised)."""
        missing: list[Path] = []
        for category, names in agent.dependencies.items():
            for name in sorted(names):
                path = self.resources_dir / category / name
                if not path.exists():
                    logger.warning("Dependency not found for agent %s: %s", agent.id, path)
                    missing.append(path)
        return missing

    async def execute_agent_action(
        self,
        agent_id: str,
        action: str,
        inputs: dict[str, Any],
        document_content: str,
        options: GenerationOptions | None = None,
    ) -> AgentSession:
        agent = self.registry.get(agent_id)
        if agent is None:
            raise AgentNotFound(f"Agent {agent_id} not found")

        self.check_dependencies(agent)

        prompt = build_prompt(agent, action, inputs, document_content)
        response = await self.gateway.generate_text(prompt, options)

        now = datetime.now(timezone.utc)
        session = AgentSession(
            id=uuid.uuid4().hex,
            agent_id=agent_id,
            user_id=str(inputs.get("user_id") or ANONYMOUS_USER),
            project_id=str(inputs.get("project_id") or DEFAULT_PROJECT),
            document_id=str(inputs.get("document_id") or DEFAULT_DOCUMENT),
            inputs=dict(inputs),
            outputs=SessionOutputs(response=response.text),
            usage=UsageMetadata(
                provider=response.metadata.provider,
                model=response.metadata.model,
                tokens_used=response.tokens_used,
                cost=response.cost,
                latency_ms=response.metadata.latency_ms,
            ),
            created_at=now,
            updated_at=now,
        )
        logger.info(
            "Agent %s session %s via %s (%d tokens)",
            agent_id,
            session.id,
            session.usage.provider,
            session.usage.tokens_used,
        )
        return session
