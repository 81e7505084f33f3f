"""
Core dependencies for request context, authentication and church-admin checks
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.exceptions import PermissionFailure, RemoteFailure
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# auto_error=False so public endpoints (feed, search) still work without a token
security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> RequestContext:
    """Build the per-request context. A missing token yields an anonymous viewer; a bad one is rejected."""
    client_key = request.client.host if request.client else "anonymous"
    if credentials is None:
        return RequestContext(client_key=client_key)
    user_data = auth_service.get_current_user(credentials.credentials)
    return RequestContext(viewer_id=user_data["id"], user=user_data, client_key=client_key)


def get_authenticated_context(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not ctx.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ctx


def get_viewer_profile(ctx: RequestContext, supabase: Client) -> Optional[Dict[str, Any]]:
    """Return the viewer's profile row (id, church_id, church_role). Cached on the context."""
    if not ctx.is_authenticated:
        return None
    if "profile" in ctx.cache:
        return ctx.cache["profile"]
    try:
        result = supabase.table("profiles")\
            .select("id, username, church_id, church_role")\
            .eq("id", ctx.viewer_id)\
            .limit(1)\
            .execute()
    except Exception as e:
        logger.error(f"Error loading profile of {ctx.viewer_id}: {e}")
        raise RemoteFailure(str(e))
    profile = result.data[0] if result.data else None
    ctx.cache["profile"] = profile
    return profile


def is_church_admin(profile: Optional[Dict[str, Any]], church_id: str) -> bool:
    """Admin means an explicit church_role of 'admin' on a profile affiliated with that church"""
    if not profile:
        return False
    return profile.get("church_id") == church_id and profile.get("church_role") == "admin"


def check_church_admin(church_id: str, ctx: RequestContext, supabase: Client) -> RequestContext:
    """Raise unless the viewer administers the given church"""
    profile = get_viewer_profile(ctx, supabase)
    if is_church_admin(profile, church_id):
        return ctx
    logger.info(f"Viewer {ctx.viewer_id} denied admin access to church {church_id}")
    raise PermissionFailure("You must be an admin of this church to perform this action")
