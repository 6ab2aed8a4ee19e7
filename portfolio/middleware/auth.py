"""
Portfolio Authentication Middleware
Validates Supabase JWT tokens, loads the caller's profile and gates routes by role
"""

from datetime import datetime, timezone
from typing import Optional
from fastapi import Request, HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from loguru import logger

from portfolio.config import get_settings
from portfolio.database import Database
from portfolio.engines.access_engine import auth_state_for, evaluate_access, normalize_role
from portfolio.engines.role_resolver import create_role_resolver
from portfolio.models import AccessOutcome, AccessRequirement, Role


security = HTTPBearer(auto_error=False)


class AuthMiddleware:
    """JWT authentication middleware for Supabase tokens"""

    def __init__(self):
        self.settings = get_settings()

    def verify_token(self, token: str) -> Optional[dict]:
        """Verify a Supabase JWT token"""
        try:
            # Supabase tokens use HS256 with the JWT secret
            payload = jwt.decode(
                token,
                self.settings.supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated"
            )
            return payload
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            return None

    def extract_user_id(self, payload: dict) -> Optional[str]:
        """Extract the user ID (sub claim) from token payload"""
        return payload.get("sub")


auth_middleware = AuthMiddleware()


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> dict:
    """
    Dependency to get the current authenticated user.
    Auto-creates the profile if the user exists in Supabase Auth but has no profile row,
    resolving its role from the admin allowlist and any access token given at signup.
    """
    logger.info(f"[AUTH] get_current_user called - Path: {request.url.path}, Method: {request.method}")

    if credentials is None:
        logger.warning(f"[AUTH] No credentials provided for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = auth_middleware.verify_token(credentials.credentials)

    if payload is None:
        logger.warning(f"[AUTH] Token verification failed for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    user_id = auth_middleware.extract_user_id(payload)
    logger.info(f"[AUTH] Token verified - user_id: {user_id}")

    if not user_id:
        logger.error("[AUTH] No user id in token payload")
        raise HTTPException(
            status_code=401,
            detail="Invalid token payload"
        )

    db = Database(use_admin=True)
    profile = await db.get_profile(user_id)

    if not profile:
        logger.info(f"[AUTH] Profile not found, auto-creating for user_id: {user_id}")
        profile = await _create_profile(db, user_id, payload)
    else:
        logger.info(f"[AUTH] Profile found: {user_id} ({profile.get('email')}) - role: {profile.get('role')}")

    profile["role"] = normalize_role(profile.get("role")).value
    return profile


async def _create_profile(db: Database, user_id: str, payload: dict) -> dict:
    """Create the profile row for a first-time caller"""
    settings = get_settings()
    user_metadata = payload.get("user_metadata") or {}
    email = payload.get("email") or user_metadata.get("email", "")
    token = user_metadata.get("token")

    resolver = create_role_resolver(db, settings.admin_emails_list)
    role = await resolver.resolve(email, token)

    profile = await db.create_profile({
        "id": user_id,
        "email": email,
        "role": role.value,
        "token_used": token if role == Role.SPECIALIZED else None
    })

    if profile:
        logger.info(f"[AUTH] Profile created: {user_id} ({email}) - role: {role.value}")
        return profile

    # Serve the request with an unsaved profile; only the allowlist is trusted here
    fallback_role = Role.ADMIN if resolver.is_admin_email(email) else Role.REGULAR
    logger.error(f"[AUTH] Failed to persist profile for {user_id}, using {fallback_role.value} in memory")
    now = datetime.now(timezone.utc).isoformat()
    return {
        "id": user_id,
        "email": email,
        "role": fallback_role.value,
        "token_used": None,
        "created_at": now,
        "updated_at": now
    }


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Optional[dict]:
    """
    Dependency to optionally get the current user.
    Returns None if not authenticated.
    """
    if credentials is None:
        return None

    try:
        return await get_current_user(request, credentials)
    except HTTPException:
        return None


def require_access(requirement: AccessRequirement, feature: str = "this page"):
    """
    Build a dependency that gates a route with the access evaluator.
    401 when the caller must log in, 403 (with X-Required-Role) when their role is too low.
    """

    async def dependency(user: Optional[dict] = Depends(get_optional_user)) -> Optional[dict]:
        decision = evaluate_access(auth_state_for(user), requirement, feature)

        if decision.outcome == AccessOutcome.NEEDS_LOGIN:
            raise HTTPException(
                status_code=401,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"}
            )

        if decision.outcome == AccessOutcome.DENIED:
            logger.info(f"[AUTH] Access to {feature} denied for user {user.get('id')} (role: {user.get('role')})")
            raise HTTPException(
                status_code=403,
                detail=decision.message,
                headers={"X-Required-Role": decision.required_role.value}
            )

        return user

    return dependency


require_specialized = require_access(AccessRequirement.SPECIALIZED, "the hours dashboard")
require_admin = require_access(AccessRequirement.ADMIN, "admin tools")
