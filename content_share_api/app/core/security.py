"""
Acting-user resolution and ownership checks.

Authentication happens upstream of this service: the gateway verifies
the caller and forwards the identity in the ``X-User-Id`` and
``X-User-Role`` headers.  ``get_current_user`` turns those headers into
the ``current_user`` dict that endpoints pass to the services, in the
same shape everywhere: ``{"user_id": ..., "role": ...}``.
"""

from typing import Dict, Optional

from fastapi import Header, HTTPException, status

from .errors import PermissionDenied

ADMIN_ROLE = "admin"
USER_ROLE = "user"


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Dict[str, str]:
    """Dependency that returns the acting user forwarded by the gateway.

    Raises HTTP 401 when no user id is present.  A missing role is
    treated as a regular user.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    role = (x_user_role or USER_ROLE).strip().lower()
    return {"user_id": x_user_id.strip(), "role": role}


def is_admin(current_user: Dict[str, str]) -> bool:
    return current_user.get("role") == ADMIN_ROLE


def ensure_owner_or_admin(owner_id: str, current_user: Dict[str, str]) -> None:
    """Raise ``PermissionDenied`` unless the actor owns the record or is an admin."""
    if is_admin(current_user):
        return
    if current_user.get("user_id") != owner_id:
        raise PermissionDenied("Insufficient permissions")
