"""Exception hierarchy shared by services and the HTTP layer.

Every error carries the HTTP status code it maps to, so routers can let
them propagate and ``main.py`` renders them with a single handler.
"""

from __future__ import annotations

from typing import Any


class StoryMasterError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


# ── Not found (404) ──────────────────────────────────────────────────


class NotFoundError(StoryMasterError):
    status_code = 404
    default_message = "Resource not found"


class AgentNotFound(NotFoundError):
    default_message = "Agent not found"


class DocumentNotFound(NotFoundError):
    default_message = "Document not found"


class VersionNotFound(NotFoundError):
    default_message = "Version not found"


# ── Providers (502) ──────────────────────────────────────────────────


class ProviderError(StoryMasterError):
    """A single provider failed. The gateway catches these and falls through."""

    status_code = 502
    default_message = "Provider call failed"


class AllProvidersFailed(StoryMasterError):
    status_code = 502
    default_message = "All LLM providers failed"


# ── Auth / billing ───────────────────────────────────────────────────


class AuthError(StoryMasterError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(AuthError):
    default_message = "Invalid credentials"


class InvalidToken(AuthError):
    default_message = "Invalid or expired token"


class UserAlreadyExists(StoryMasterError):
    status_code = 409
    default_message = "User already exists"


class InvalidPlan(StoryMasterError):
    status_code = 400
    default_message = "Invalid plan"


class QuotaExceeded(StoryMasterError):
    status_code = 429
    default_message = "Token quota exceeded for the current plan"
