"""Agent loader — builds the agent registry from a directory of Markdown files.

Each ``*.md`` file carries one fenced ```yaml block::

    agent:
      id: plot-architect
      name: Plot Architect
      title: Story Structure Specialist
    persona:
      role: Master of narrative architecture
      style: Analytical, structured
      core_principles:
        - Structure serves story
    commands:
      - help: Show numbered list of commands
      - create-outline: Build a three-act outline
    dependencies:
      tasks:
        - create-outline.md

A file that cannot be parsed is skipped with a warning; sections with an
unexpected shape fall back to empty defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from storymaster.schemas.agent import DEPENDENCY_CATEGORIES, AgentDefinition, Persona
from storymaster.utils.markdown import parse_yaml_block

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Read-only, ordered view of loaded agent definitions."""

    def __init__(self, agents: list[AgentDefinition] | None = None):
        self._agents: dict[str, AgentDefinition] = {}
        for agent in agents or []:
            if agent.id in self._agents:
                logger.warning("Duplicate agent id '%s' — later definition wins", agent.id)
            self._agents[agent.id] = agent

    def list(self) -> list[AgentDefinition]:
        return list(self._agents.values())

    def get(self, agent_id: str) -> AgentDefinition | None:
        return self._agents.get(agent_id)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __iter__(self) -> Iterator[AgentDefinition]:
        return iter(self._agents.values())

    def __len__(self) -> int:
        return len(self._agents)


def load_agents(directory: Path) -> AgentRegistry:
    """Scan ``directory`` for agent files; malformed files are skipped."""
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Agent directory %s does not exist — no agents loaded", directory)
        return AgentRegistry()

    agents: list[AgentDefinition] = []
    for path in sorted(directory.glob("*.md")):
        try:
            agents.append(parse_agent_file(path))
        except (OSError, ValueError, yaml.YAMLError) as exc:
            logger.warning("Failed to load agent %s: %s", path.name, exc)

    registry = AgentRegistry(agents)
    logger.info("Loaded %d agents from %s", len(registry), directory)
    return registry


def parse_agent_file(path: Path) -> AgentDefinition:
    data = parse_yaml_block(path.read_text(encoding="utf-8"))
    return build_agent(data, fallback_id=path.stem, source_path=path)


def build_agent(
    data: dict[str, Any], fallback_id: str, source_path: Path | None = None
) -> AgentDefinition:
    agent = _mapping(data.get("agent"))
    persona = _mapping(data.get("persona"))

    return AgentDefinition(
        id=_text(agent.get("id")) or fallback_id,
        name=_text(agent.get("name")),
        title=_text(agent.get("title")),
        persona=Persona(
            role=_text(persona.get("role")),
            style=_text(persona.get("style")),
            core_principles=tuple(_strings(persona.get("core_principles"))),
        ),
        commands=_commands(data.get("commands")),
        dependencies=_dependencies(data.get("dependencies")),
        source_path=source_path,
    )


# ── Shape coercion ───────────────────────────────────────────────────


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def _strings(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [text for text in map(_item_text, value) if text]


def _item_text(item: Any) -> str:
    # "- CRITICAL: stay in character" loads as {"CRITICAL": "stay in character"}
    if isinstance(item, dict):
        return "; ".join(f"{k}: {_text(v)}".strip() for k, v in item.items())
    return _text(item)


def _commands(value: Any) -> dict[str, str]:
    """Accept ``{name: desc}`` or ``[{name: desc}, "name", ...]``."""
    if isinstance(value, dict):
        return {str(k): _text(v) for k, v in value.items()}
    if not isinstance(value, list):
        return {}

    commands: dict[str, str] = {}
    for item in value:
        if isinstance(item, dict):
            for k, v in item.items():
                commands[str(k)] = _text(v)
        elif _text(item):
            commands[_text(item)] = ""
    return commands


def _dependencies(value: Any) -> dict[str, frozenset[str]]:
    deps: dict[str, frozenset[str]] = {}
    for category in DEPENDENCY_CATEGORIES:
        names = _strings(_mapping(value).get(category))
        if names:
            deps[category] = frozenset(names)
    return deps
