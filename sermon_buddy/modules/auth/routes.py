from fastapi import APIRouter, Depends
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import (
    get_auth_service, get_authenticated_context, get_current_token, get_viewer_profile
)
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
)
from sermon_buddy.modules.auth.service import AuthService
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user (and optionally the church they administer)"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user(
    ctx: RequestContext = Depends(get_authenticated_context),
    supabase: Client = Depends(get_supabase),
):
    """Get current authenticated user with their profile (for frontend UI)."""
    return {**ctx.user, "profile": get_viewer_profile(ctx, supabase)}
