"""Shared fixtures: temporary database, agent library, fake providers, API client."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

import storymaster.models  # noqa: F401  (registers tables on Base.metadata)
from storymaster.adapters.base import LLMProvider
from storymaster.database import Base, get_db
from storymaster.exceptions import ProviderError
from storymaster.main import app
from storymaster.schemas.llm import Completion, TokenUsage
from storymaster.services.agent_loader import load_agents
from storymaster.services.auth_service import AuthService
from storymaster.services.billing_service import BillingService
from storymaster.services.orchestration_service import OrchestrationService
from storymaster.services.provider_gateway import ProviderGateway
from storymaster.services.usage_monitor import UsageMonitor

PLOT_ARCHITECT_MD = """\
# Plot Architect

Read the full YAML below to adopt this persona.

```yaml
agent:
  name: Plot Architect
  id: plot-architect
  title: Story Structure Specialist
persona:
  role: Master of narrative architecture
  style: Analytical and structured
  core_principles:
    - Structure serves story
    - Every scene must turn
commands:
  - help: Show numbered list of commands
  - create-outline: Build a three-act outline
dependencies:
  tasks:
    - create-outline.md
  templates:
    - outline-tmpl.yaml
```
"""

CHARACTER_PSYCHOLOGIST_MD = """\
# Character Psychologist

```yaml
agent:
  name: Character Psychologist
  title: Character Development Expert
persona:
  role: Deep diver into character motivation
  style: Empathetic, probing
commands:
  develop-character: Create a character profile
  analyze-motivation: Explore why a character acts
```
"""


class FakeProvider(LLMProvider):
    """Deterministic in-process provider; usage mirrors ``estimate_tokens``."""

    models = {"fast": "fake-fast", "balanced": "fake-1", "quality": "fake-pro"}
    prices = {"fake-1": (0.001, 0.002)}

    def __init__(self, name: str, text: str = "Once upon a time...", fail: bool = False):
        self.name = name
        self.text = text
        self.fail = fail
        self.calls: list[str] = []
        self.max_tokens: list[int] = []

    async def _complete(
        self, prompt: str, *, model: str, max_tokens: int, temperature: float
    ) -> Completion:
        self.calls.append(prompt)
        self.max_tokens.append(max_tokens)
        if self.fail:
            raise ProviderError(f"{self.name} is down")
        return Completion(
            text=self.text,
            usage=TokenUsage(
                prompt_tokens=self.estimate_tokens(prompt),
                completion_tokens=self.estimate_tokens(self.text),
            ),
        )


@pytest.fixture
def make_provider():
    def _make(name: str = "Fake", text: str = "Once upon a time...", fail: bool = False):
        return FakeProvider(name, text=text, fail=fail)

    return _make


@pytest.fixture
def agent_library(tmp_path: Path) -> Path:
    library = tmp_path / "agent-library"
    agents = library / "agents"
    agents.mkdir(parents=True)
    (agents / "plot-architect.md").write_text(PLOT_ARCHITECT_MD)
    (agents / "character-psychologist.md").write_text(CHARACTER_PSYCHOLOGIST_MD)

    tasks = library / "tasks"
    tasks.mkdir()
    (tasks / "create-outline.md").write_text("# Create outline\n")
    return library


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def provider(make_provider) -> FakeProvider:
    return make_provider("Fake", text="The storm broke over the harbour.")


@pytest_asyncio.fixture
async def client(
    engine: AsyncEngine, agent_library: Path, provider: FakeProvider
) -> AsyncIterator[AsyncClient]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db

    auth = AuthService()
    registry = load_agents(agent_library / "agents")
    app.state.orchestration = OrchestrationService(
        registry, ProviderGateway([provider]), agent_library
    )
    app.state.auth = auth
    app.state.billing = BillingService()
    app.state.monitor = UsageMonitor(auth)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient) -> dict[str, str]:
    resp = await client.post(
        "/api/auth/register",
        json={"email": "writer@example.com", "password": "correct-horse", "name": "Writer"},
    )
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['token']}"}
