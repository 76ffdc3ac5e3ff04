"""Auth endpoints — register, login, logout and plan changes."""

from fastapi import APIRouter, Depends

from storymaster.dependencies import bearer_token, current_user, get_auth
from storymaster.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, User
from storymaster.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(data: RegisterRequest, auth: AuthService = Depends(get_auth)):
    user, token = auth.register(data.email, data.password, data.name)
    return AuthResponse(user=user, token=token)


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, auth: AuthService = Depends(get_auth)):
    user, token = auth.login(data.email, data.password)
    return AuthResponse(user=user, token=token)


@router.post("/logout", status_code=204)
async def logout(token: str = Depends(bearer_token), auth: AuthService = Depends(get_auth)):
    auth.logout(token)


@router.get("/me", response_model=User)
async def me(user: User = Depends(current_user)):
    return user

