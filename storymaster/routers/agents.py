"""Agent endpoints — list the library and run agent actions."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storymaster.database import get_db
from storymaster.dependencies import (
    current_user,
    get_auth,
    get_monitor,
    get_orchestration,
)
from storymaster.exceptions import AgentNotFound, AllProvidersFailed, QuotaExceeded
from storymaster.schemas.agent import AgentDefinition, AgentExecuteRequest
from storymaster.schemas.auth import User
from storymaster.schemas.session import AgentExecuteResponse
from storymaster.services import document_service
from storymaster.services.auth_service import AuthService
from storymaster.services.orchestration_service import OrchestrationService
from storymaster.services.usage_monitor import UsageMonitor

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[AgentDefinition])
async def list_agents(orchestration: OrchestrationService = Depends(get_orchestration)):
    return orchestration.list_agents()


@router.get("/{agent_id}", response_model=AgentDefinition)
async def get_agent(agent_id: str, orchestration: OrchestrationService = Depends(get_orchestration)):
    agent = orchestration.get_agent(agent_id)
    if not agent:
        raise AgentNotFound(f"Agent {agent_id} not found")
    return agent


@router.post("/{agent_id}/execute", response_model=AgentExecuteResponse)
async def execute_agent(
    agent_id: str,
    body: AgentExecuteRequest,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
    orchestration: OrchestrationService = Depends(get_orchestration),
    auth: AuthService = Depends(get_auth),
    monitor: UsageMonitor = Depends(get_monitor),
):
    if not orchestration.get_agent(agent_id):
        raise AgentNotFound(f"Agent {agent_id} not found")

    inputs = {**body.inputs, "user_id": user.id}
    context = body.content
    doc = None
    if body.document_id:
        doc = await document_service.get_document(db, body.document_id)
        context = doc.content
        inputs["document_id"] = doc.id
        inputs.setdefault("project_id", doc.project_id)

    # Quota is enforced here, before orchestration runs: prompt plus the
    # completion budget must fit in what the plan has left.
    options = body.options
    prompt_tokens = orchestration.gateway.estimate_tokens(body.action + context)
    if "max_tokens" not in options.model_fields_set:
        remaining = user.token_limit - user.tokens_used
        budget = max(1, min(options.max_tokens, remaining - prompt_tokens))
        options = options.model_copy(update={"max_tokens": budget})
    estimated = prompt_tokens + options.max_tokens
    if not auth.check_token_limit(user.id, estimated):
        raise QuotaExceeded(
            details={
                "plan": user.plan,
                "token_limit": user.token_limit,
                "tokens_used": user.tokens_used,
                "requested": estimated,
            }
        )

    try:
        session = await orchestration.execute_agent_action(
            agent_id, body.action, inputs, context, options
        )
    except AllProvidersFailed:
        monitor.record_error(agent_id)
        raise

    monitor.record_session(session)
    auth.update_token_usage(user.id, session.usage.tokens_used)

    document_version = None
    if body.apply and doc is not None:
        doc = await document_service.update_document(
            db,
            doc.id,
            session.outputs.response,
            commit_message=f"Agent {agent_id}: {body.action}",
            updated_by=user.id,
        )
        document_version = doc.version

    return AgentExecuteResponse(session=session, document_version=document_version)
