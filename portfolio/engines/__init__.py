"""Portfolio Engines Module - pure access and statistics logic"""

from portfolio.engines.access_engine import evaluate_access, get_permissions, can_modify_comment
from portfolio.engines.stats_engine import StatsEngine, create_stats_engine
from portfolio.engines.role_resolver import RoleResolver, create_role_resolver

__all__ = [
    "evaluate_access",
    "get_permissions",
    "can_modify_comment",
    "StatsEngine",
    "create_stats_engine",
    "RoleResolver",
    "create_role_resolver"
]
