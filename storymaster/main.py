"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storymaster.config import Settings, settings
from storymaster.database import dispose_db, init_db
from storymaster.exceptions import StoryMasterError
from storymaster.routers import agents, auth, billing, documents, usage
from storymaster.services.agent_loader import load_agents
from storymaster.services.auth_service import AuthService
from storymaster.services.billing_service import BillingService
from storymaster.services.orchestration_service import OrchestrationService
from storymaster.services.provider_gateway import build_gateway
from storymaster.services.usage_monitor import UsageMonitor

# ── Logging setup ────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def init_state(app: FastAPI, config: Settings) -> None:
    """Build the long-lived services and attach them to ``app.state``."""
    registry = load_agents(config.agents_dir)
    gateway = build_gateway(config)
    auth_service = AuthService(token_ttl=timedelta(hours=config.token_ttl_hours))

    app.state.orchestration = OrchestrationService(registry, gateway, config.agent_library_dir)
    app.state.auth = auth_service
    app.state.billing = BillingService()
    app.state.monitor = UsageMonitor(auth_service, capacity=config.session_history_capacity)

    logger.info(
        "Loaded %d agents; provider order: %s",
        len(registry),
        ", ".join(gateway.attempt_order()) or "(none)",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    init_state(app, settings)
    yield
    await dispose_db()


app = FastAPI(
    title="StoryMaster",
    description="Collaborative story drafting with scripted agent personas",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoryMasterError)
async def storymaster_error_handler(request: Request, exc: StoryMasterError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Mount routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(agents.router, prefix="/api/agents", tags=["agents"])
app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
app.include_router(usage.router, prefix="/api/usage", tags=["usage"])
app.include_router(billing.router, prefix="/api/billing", tags=["billing"])


@app.get("/health")
async def health(request: Request):
    monitor: UsageMonitor = request.app.state.monitor
    orchestration: OrchestrationService = request.app.state.orchestration
    report = monitor.get_system_health()
    return {
        "status": report.status,
        "service": "storymaster",
        "agents": len(orchestration.registry),
        "providers": orchestration.gateway.attempt_order(),
    }
