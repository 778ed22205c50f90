"""User identity resolution.

Usage:
    from infrastructure.services import CurrentUserDep

    @router.get("/me")
    def me(user: CurrentUserDep):
        return user.model_dump()
"""

from infrastructure.identity.models import ADMIN_ROLE, User
from infrastructure.identity.resolver import IdentityResolver

__all__ = ["ADMIN_ROLE", "IdentityResolver", "User"]
