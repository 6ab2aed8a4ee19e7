"""
Portfolio Middleware Module
"""

from portfolio.middleware.auth import (
    get_current_user,
    get_optional_user,
    require_access,
    require_specialized,
    require_admin
)

__all__ = [
    "get_current_user",
    "get_optional_user",
    "require_access",
    "require_specialized",
    "require_admin"
]
