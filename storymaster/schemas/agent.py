"""Agent definition records and the execute request/response schemas."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from storymaster.schemas.llm import GenerationOptions

DependencyCategory = Literal["data", "tasks", "templates", "utils"]
DEPENDENCY_CATEGORIES: tuple[str, ...] = ("data", "tasks", "templates", "utils")


class Persona(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str = ""
    style: str = ""
    core_principles: tuple[str, ...] = ()


class AgentDefinition(BaseModel):
    """One agent persona, parsed from an agent library Markdown file."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    title: str = ""
    persona: Persona = Persona()
    commands: dict[str, str] = {}
    dependencies: dict[DependencyCategory, frozenset[str]] = {}
    source_path: Path | None = Field(default=None, exclude=True)


class AgentExecuteRequest(BaseModel):
    action: str = Field(..., min_length=1)
    inputs: dict[str, Any] = {}
    document_id: str | None = None
    content: str = ""  # context used when no document_id is given
    apply: bool = False  # write the response back to the document
    options: GenerationOptions = GenerationOptions()
