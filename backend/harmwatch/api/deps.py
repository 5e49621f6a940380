from typing import Optional

from fastapi import Depends, Header

from harmwatch.core.config import settings
from harmwatch.core.errors import AuthError
from harmwatch.db.session import get_store
from harmwatch.db.store import JsonStore
from harmwatch.models import User
from harmwatch.services.auth import AuthService
from harmwatch.services.cases import CaseService


def get_auth_service(store: JsonStore = Depends(get_store)) -> AuthService:
    return AuthService(store, settings)


def get_case_service(store: JsonStore = Depends(get_store)) -> CaseService:
    return CaseService(store, settings)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid token")
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    return auth.verify(_bearer_token(authorization))
