"""
Portfolio Auth Routes
Profile, access-token validation and access checks
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from loguru import logger

from portfolio.database import Database
from portfolio.engines.access_engine import auth_state_for, evaluate_access, get_permissions
from portfolio.middleware.auth import get_current_user, get_optional_user
from portfolio.models import AccessDecision, TokenValidationRequest, UserProfile


router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_profile(user: dict = Depends(get_current_user)):
    """Get the current user's profile and permissions"""
    logger.info(f"[AUTH_ROUTE] GET /me - user_id: {user.get('id')}")
    return UserProfile(
        id=user.get("id"),
        email=user.get("email") or "",
        role=user.get("role"),
        token_used=user.get("token_used"),
        permissions=get_permissions(user.get("role"))
    )


@router.post("/validate-token")
async def validate_token(data: TokenValidationRequest):
    """Check an access token before signup"""
    logger.info("[AUTH_ROUTE] POST /validate-token")
    db = Database(use_admin=True)
    valid = await db.is_token_valid(data.token.strip())
    return {"valid": valid}


@router.get("/access", response_model=AccessDecision)
async def check_access(
    requirement: str = Query("authenticated"),
    feature: str = Query("this page"),
    user: Optional[dict] = Depends(get_optional_user)
):
    """Tell the client what to render for a protected view"""
    decision = evaluate_access(auth_state_for(user), requirement, feature)
    logger.info(f"[AUTH_ROUTE] GET /access - requirement: {requirement}, outcome: {decision.outcome.value}")
    return decision
