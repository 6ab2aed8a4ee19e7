"""
Portfolio Access Engine
Decides whether a caller may see a protected view.

Pure functions only: the session snapshot is passed in, nothing is read from
globals, and an unknown or missing role is always treated as regular.
"""

from typing import Optional, Union
from loguru import logger

from portfolio.models import (
    AccessDecision,
    AccessOutcome,
    AccessRequirement,
    AuthState,
    Permissions,
    Role,
)


FALLBACK_COPY = {
    AccessOutcome.NEEDS_LOGIN: (
        "Authentication Required",
        "Please log in to access {feature}. Create an account if you don't have one yet."
    ),
    Role.ADMIN: (
        "Access Denied",
        "Administrator privileges are required to access {feature}. "
        "Contact an administrator if you believe this is an error."
    ),
    Role.SPECIALIZED: (
        "Specialized Access Required",
        "You need specialized access to use {feature}. Contact an administrator for a "
        "specialized access token, then create a new account with that token."
    ),
}


def normalize_role(role: Union[Role, str, None]) -> Role:
    """Map any stored role value onto a Role, failing closed to regular"""
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).strip().lower()) if role else Role.REGULAR
    except ValueError:
        logger.warning(f"[ACCESS] Unknown role {role!r}, treating as regular")
        return Role.REGULAR


def normalize_requirement(requirement: Union[AccessRequirement, str, None]) -> AccessRequirement:
    """Map a requirement value onto AccessRequirement; unknown values mean authenticated"""
    if isinstance(requirement, AccessRequirement):
        return requirement
    if requirement is None:
        return AccessRequirement.NONE
    try:
        return AccessRequirement(str(requirement).strip().lower())
    except ValueError:
        return AccessRequirement.AUTHENTICATED


def evaluate_access(
    auth_state: AuthState,
    requirement: Union[AccessRequirement, str, None],
    feature: str = "this page"
) -> AccessDecision:
    """
    Evaluate a session snapshot against a view's requirement.

    Checks run in a fixed order and the first match wins:
    loading, then login, then admin, then specialized.

    Args:
        auth_state: The caller's session snapshot
        requirement: What the protected view demands
        feature: Human-readable name of the view, used in fallback copy

    Returns:
        The decision plus the copy the caller should render for it
    """
    requirement = normalize_requirement(requirement)
    role = normalize_role(auth_state.role)

    if auth_state.is_loading:
        return AccessDecision(outcome=AccessOutcome.LOADING, requirement=requirement)

    if requirement != AccessRequirement.NONE and not auth_state.is_authenticated:
        return _fallback(AccessOutcome.NEEDS_LOGIN, requirement, feature)

    if requirement == AccessRequirement.ADMIN and role != Role.ADMIN:
        return _fallback(AccessOutcome.DENIED, requirement, feature, Role.ADMIN)

    if requirement == AccessRequirement.SPECIALIZED and role not in (Role.SPECIALIZED, Role.ADMIN):
        return _fallback(AccessOutcome.DENIED, requirement, feature, Role.SPECIALIZED)

    return AccessDecision(outcome=AccessOutcome.ALLOW, requirement=requirement)


def _fallback(
    outcome: AccessOutcome,
    requirement: AccessRequirement,
    feature: str,
    required_role: Optional[Role] = None
) -> AccessDecision:
    title, message = FALLBACK_COPY[required_role or outcome]
    return AccessDecision(
        outcome=outcome,
        requirement=requirement,
        required_role=required_role,
        title=title,
        message=message.format(feature=feature)
    )


def get_permissions(role: Union[Role, str, None]) -> Permissions:
    """Capabilities granted by a role"""
    role = normalize_role(role)
    is_admin = role == Role.ADMIN
    is_specialized = role == Role.SPECIALIZED
    return Permissions(
        is_admin=is_admin,
        is_specialized=is_specialized,
        is_regular=role == Role.REGULAR,
        has_hours_access=is_admin or is_specialized,
        can_comment=is_admin or is_specialized,
        can_edit_content=is_admin
    )


def can_modify_comment(user: Optional[dict], comment: dict) -> bool:
    """
    Admins may touch any comment. Authors may edit or delete their own only
    while their role still allows commenting.
    """
    if not user:
        return False
    permissions = get_permissions(user.get("role"))
    if permissions.is_admin:
        return True
    if not permissions.can_comment:
        return False
    return bool(user.get("id")) and user.get("id") == comment.get("user_id")


def auth_state_for(user: Optional[dict]) -> AuthState:
    """Build the session snapshot for a resolved (or missing) user"""
    if not user:
        return AuthState(is_loading=False, is_authenticated=False, role=None)
    return AuthState(is_loading=False, is_authenticated=True, role=user.get("role"))
