"""
Portfolio Role Resolver
Decides which role a new account starts with.
"""

from typing import Awaitable, Callable, List, Optional
from loguru import logger

from portfolio.models import Role


TokenValidator = Callable[[str], Awaitable[bool]]


class RoleResolver:
    """
    Assigns roles at account creation:
    allowlisted emails become admin, a valid access token grants specialized,
    everyone else is regular.
    """

    def __init__(self, admin_emails: List[str], validate_token: TokenValidator):
        self.admin_emails = {email.strip().lower() for email in admin_emails if email}
        self.validate_token = validate_token

    def is_admin_email(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    async def resolve(self, email: Optional[str], token: Optional[str] = None) -> Role:
        """
        Resolve the starting role for an account.

        Args:
            email: The account's email address
            token: Access token supplied at signup, if any

        Returns:
            The role to store on the profile
        """
        if self.is_admin_email(email):
            logger.info(f"[ROLES] {email} is on the admin allowlist")
            return Role.ADMIN

        token = (token or "").strip()
        if token:
            if await self.validate_token(token):
                logger.info(f"[ROLES] Access token redeemed by {email}")
                return Role.SPECIALIZED
            logger.warning(f"[ROLES] Invalid or inactive access token supplied by {email}")

        return Role.REGULAR


def create_role_resolver(db, admin_emails: List[str]) -> RoleResolver:
    """Factory function wiring the resolver to the token table"""
    return RoleResolver(admin_emails, db.is_token_valid)
