from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from harmwatch.api.deps import get_auth_service, get_current_user
from harmwatch.api.responses import envelope
from harmwatch.models import User
from harmwatch.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


# fields are optional so missing ones surface as our own 400 message
class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=201)
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.register(body.username, body.email, body.password)
    return envelope({"user": user.to_public(), "token": token}, message="User registered successfully")


@router.post("/login")
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.login(body.email, body.password)
    return envelope({"user": user.to_public(), "token": token}, message="Login successful")


@router.get("/me")
def me(user: User = Depends(get_current_user), auth: AuthService = Depends(get_auth_service)):
    return envelope(auth.get_profile(user.id).to_public())
