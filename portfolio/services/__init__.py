"""
Portfolio Services
Database-backed workflows built on the pure engines
"""

from portfolio.services.statistics_service import refresh_statistics, reconcile_subjects

__all__ = ["refresh_statistics", "reconcile_subjects"]
