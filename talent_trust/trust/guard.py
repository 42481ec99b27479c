"""
Talent Trust - Access Guard

Only administrators may read or write trust scores. The role comes from the
authentication collaborator and is trusted as-is.
"""
from typing import Optional

from talent_trust.errors import Unauthorized

ADMIN_ROLE = "admin"


def is_admin(role: Optional[str]) -> bool:
    return role == ADMIN_ROLE


def require_admin_role(role: Optional[str]) -> None:
    if not is_admin(role):
        raise Unauthorized()
