"""Role-based access control dependencies."""

from fastapi import Depends

from blogdesk.core.errors import AuthError
from blogdesk.core.security import get_current_user
from blogdesk.models.user import Role, User


def require_roles(*roles: Role):
    """Return a FastAPI dependency that admits only users holding one of ``roles``."""
    allowed = frozenset(roles)

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise AuthError("forbidden")
        return user

    return _check


require_admin = require_roles(Role.ADMIN)
require_author_or_admin = require_roles(Role.AUTHOR, Role.ADMIN)
