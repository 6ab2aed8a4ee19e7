"""Portfolio Routes Module"""

from portfolio.routes import auth, blog, projects, hours, stats, admin

__all__ = [
    "auth",
    "blog",
    "projects",
    "hours",
    "stats",
    "admin"
]
