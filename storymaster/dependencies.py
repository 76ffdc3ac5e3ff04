"""FastAPI dependencies — hand out the services built in the app lifespan."""

from fastapi import Header, Request

from storymaster.exceptions import AuthError, InvalidToken
from storymaster.schemas.auth import User
from storymaster.services.auth_service import AuthService
from storymaster.services.billing_service import BillingService
from storymaster.services.orchestration_service import OrchestrationService
from storymaster.services.provider_gateway import ProviderGateway
from storymaster.services.usage_monitor import UsageMonitor


def get_orchestration(request: Request) -> OrchestrationService:
    return request.app.state.orchestration


def get_gateway(request: Request) -> ProviderGateway:
    return request.app.state.orchestration.gateway


def get_auth(request: Request) -> AuthService:
    return request.app.state.auth


def get_billing(request: Request) -> BillingService:
    return request.app.state.billing


def get_monitor(request: Request) -> UsageMonitor:
    return request.app.state.monitor


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise AuthError()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Expected 'Authorization: Bearer <token>'")
    return token


def current_user(request: Request, authorization: str | None = Header(default=None)) -> User:
    token = bearer_token(authorization)
    user = get_auth(request).validate_token(token)
    if user is None:
        raise InvalidToken()
    return user
