import logging
from datetime import timedelta
from typing import Optional

from harmwatch.core.config import Settings
from harmwatch.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from harmwatch.core.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from harmwatch.db.repository import user_repository
from harmwatch.db.store import JsonStore
from harmwatch.metrics.prometheus import auth_events_total
from harmwatch.models import User, UserRole

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, store: JsonStore, settings: Settings):
        self.users = user_repository(store)
        self.settings = settings

    def issue_token(self, user: User) -> str:
        claims = {"sub": user.id, "id": user.id, "email": user.email, "role": user.role}
        return create_access_token(
            claims,
            self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
            expires_in=timedelta(days=self.settings.jwt_expires_days),
        )

    def register(self, username: Optional[str], email: Optional[str], password: Optional[str]) -> tuple[User, str]:
        if not username or not email or not password:
            auth_events_total.labels(event="register", outcome="invalid").inc()
            raise ValidationError("Username, email, and password are required")

        password_hash = hash_password(password, rounds=self.settings.bcrypt_rounds)

        # check-then-insert under the users lock so two registrations cannot
        # both pass the uniqueness check
        with self.users.lock():
            if self.users.find_where(lambda u: u.email == email):
                auth_events_total.labels(event="register", outcome="conflict").inc()
                raise ConflictError("User already exists")

            user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                role=UserRole.viewer.value,
                contribution_score=0,
            )
            self.users.insert(user)

        logger.info("Registered user %s", user.id, extra={"user_id": user.id})
        auth_events_total.labels(event="register", outcome="success").inc()
        return user, self.issue_token(user)

    def login(self, email: Optional[str], password: Optional[str]) -> tuple[User, str]:
        if not email or not password:
            auth_events_total.labels(event="login", outcome="invalid").inc()
            raise ValidationError("Email and password are required")

        matches = self.users.find_where(lambda u: u.email == email)
        if not matches or not verify_password(password, matches[0].password_hash):
            auth_events_total.labels(event="login", outcome="failure").inc()
            raise AuthError("Invalid credentials")

        user = matches[0]
        auth_events_total.labels(event="login", outcome="success").inc()
        return user, self.issue_token(user)

    def verify(self, token: Optional[str]) -> User:
        if not token:
            raise AuthError("Authentication required")

        try:
            claims = decode_access_token(token, self.settings.jwt_secret, self.settings.jwt_algorithm)
        except InvalidTokenError as exc:
            logger.info("Rejected token: %s", exc)
            raise AuthError("Invalid token") from exc

        user_id = claims.get("id")
        user = self.users.find_by_id(user_id) if isinstance(user_id, str) else None
        if user is None:
            raise AuthError("Invalid token")
        return user

    def get_profile(self, user_id: str) -> User:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
