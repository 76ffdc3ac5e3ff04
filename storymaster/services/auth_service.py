"""Auth service — in-memory users and bearer tokens.

Mock-only: users and tokens live in process memory and vanish on restart.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from storymaster.exceptions import InvalidCredentials, InvalidPlan, UserAlreadyExists
from storymaster.schemas.auth import User
from storymaster.services.billing_service import PLAN_TOKEN_LIMITS
from storymaster.utils.crypto import hash_password, new_token, verify_password

logger = logging.getLogger(__name__)


@dataclass
class _TokenRecord:
    user_id: str
    expires_at: datetime


class AuthService:
    def __init__(self, token_ttl: timedelta = timedelta(hours=24)):
        self.token_ttl = token_ttl
        self._users: dict[str, User] = {}
        self._tokens: dict[str, _TokenRecord] = {}

    def register(self, email: str, password: str, name: str) -> tuple[User, str]:
        if self._find_by_email(email):
            raise UserAlreadyExists(f"User {email} already exists")

        now = _now()
        user = User(
            id=uuid.uuid4().hex,
            email=email,
            name=name,
            plan="free",
            token_limit=PLAN_TOKEN_LIMITS["free"],
            created_at=now,
            last_login_at=now,
            password_hash=hash_password(password),
        )
        self._users[user.id] = user
        logger.info("Registered user %s", user.id)
        return user, self._issue_token(user.id)

    def login(self, email: str, password: str) -> tuple[User, str]:
        user = self._find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        user.last_login_at = _now()
        return user, self._issue_token(user.id)

    def validate_token(self, token: str) -> User | None:
        record = self._tokens.get(token)
        if record is None:
            return None
        if record.expires_at < _now():
            del self._tokens[token]
            return None
        return self._users.get(record.user_id)

    def logout(self, token: str) -> bool:
        return self._tokens.pop(token, None) is not None

    def update_user_plan(self, user_id: str, plan: str) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        if plan not in PLAN_TOKEN_LIMITS:
            raise InvalidPlan(f"Unknown plan '{plan}'")

        user.plan = plan
        user.token_limit = PLAN_TOKEN_LIMITS[plan]
        return True

    def update_token_usage(self, user_id: str, tokens_used: int) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        user.tokens_used += tokens_used
        return True

    def check_token_limit(self, user_id: str, requested_tokens: int) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        return user.tokens_used + requested_tokens <= user.token_limit

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def user_count(self) -> int:
        return len(self._users)

    def cleanup_expired_sessions(self) -> int:
        now = _now()
        expired = [token for token, rec in self._tokens.items() if rec.expires_at < now]
        for token in expired:
            del self._tokens[token]
        return len(expired)

    def _find_by_email(self, email: str) -> User | None:
        email = email.lower()
        return next((u for u in self._users.values() if u.email.lower() == email), None)

    def _issue_token(self, user_id: str) -> str:
        token = new_token()
        self._tokens[token] = _TokenRecord(user_id=user_id, expires_at=_now() + self.token_ttl)
        return token


def _now() -> datetime:
    return datetime.now(timezone.utc)
