"""
Talent Trust - Security Layer
Re-exports auth dependencies for API modules.
"""
from fastapi import Depends

from talent_trust.auth import get_current_user
from talent_trust.trust.guard import ADMIN_ROLE, is_admin, require_admin_role


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """Require admin access. Raises Unauthorized (403) for any other role."""
    require_admin_role(user.get("role"))
    return user
