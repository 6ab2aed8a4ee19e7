"""
Portfolio Admin Routes
Access diagnostics and specialized-access token management
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from portfolio.config import get_settings
from portfolio.database import Database
from portfolio.engines.access_engine import get_permissions, normalize_role
from portfolio.middleware.auth import get_current_user, require_admin
from portfolio.models import AccessTokenCreate, Role


router = APIRouter()


@router.get("/diagnostic")
async def run_diagnostic(user: dict = Depends(get_current_user)):
    """
    Explain what the caller can do and why.
    Flags a stored role that disagrees with the admin allowlist, a missing
    profile row and missing statistics. Role counts are included for admins.
    """
    logger.info(f"[ADMIN] === DIAGNOSTIC === user: {user.get('id')}")
    settings = get_settings()
    db = Database(use_admin=True)

    issues = []
    recommendations = []

    role = normalize_role(user.get("role"))
    permissions = get_permissions(role)
    email = (user.get("email") or "").lower()
    expected_role = Role.ADMIN if email in settings.admin_emails_list else None

    stored_profile = await db.get_profile(user["id"])
    if not stored_profile:
        issues.append("Profile row is missing; the current role is not persisted")
        recommendations.append("Sign out and back in to recreate the profile")

    if expected_role == Role.ADMIN and role != Role.ADMIN:
        issues.append(f"Email is on the admin allowlist but the stored role is {role.value}")
        recommendations.append("Update the role on the user_profiles row to admin")

    statistics = await db.get_statistics(user["id"])
    if permissions.has_hours_access and statistics is None:
        issues.append("No statistics row exists for this account")
        recommendations.append("Call POST /api/stats/recompute to rebuild it")

    projects = await db.get_projects()
    posts = await db.get_blog_posts(user["id"] if permissions.is_admin else None)

    result = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "auth_status": {
            "is_authenticated": True,
            "user_id": user.get("id"),
            "user_email": user.get("email"),
        },
        "profile_status": {
            "profile_exists": stored_profile is not None,
            "current_role": role.value,
            "expected_role": expected_role.value if expected_role else None,
            "token_used": bool(user.get("token_used")),
        },
        "permissions_status": permissions.model_dump(),
        "data_access": {
            "projects_count": len(projects),
            "blog_posts_count": len(posts),
            "has_statistics": statistics is not None,
        },
        "issues": issues,
        "recommendations": recommendations,
    }

    if permissions.is_admin:
        result["role_counts"] = await db.count_profiles_by_role()

    logger.info(f"[ADMIN] Diagnostic complete: {len(issues)} issues")
    return {
        "success": True,
        "data": result
    }


@router.get("/tokens")
async def get_tokens(user: dict = Depends(require_admin)):
    """List specialized-access tokens"""
    db = Database(use_admin=True)
    tokens = await db.get_tokens()
    return {
        "success": True,
        "data": tokens
    }


@router.post("/tokens")
async def create_token(data: AccessTokenCreate, user: dict = Depends(require_admin)):
    """Issue a new specialized-access token"""
    db = Database(use_admin=True)
    token = data.token.strip()

    # Token strings are unique, deactivated ones included
    if await db.get_token(token):
        raise HTTPException(status_code=409, detail="Token already exists")

    created = await db.create_token({
        "token": token,
        "description": data.description,
        "is_active": True
    })
    if not created:
        raise HTTPException(status_code=500, detail="Failed to create token")

    logger.info(f"[ADMIN] Access token {created.get('id')} issued by {user['id']}")
    return {
        "success": True,
        "data": created
    }


@router.delete("/tokens/{token_id}")
async def deactivate_token(token_id: str, user: dict = Depends(require_admin)):
    """Stop a token from granting specialized access; existing accounts keep their role"""
    db = Database(use_admin=True)
    updated = await db.deactivate_token(token_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Token not found")

    logger.info(f"[ADMIN] Access token {token_id} deactivated by {user['id']}")
    return {
        "success": True,
        "data": updated
    }
