"""
Authentication module for the Clinic Portal API.

Two layers:
- API key (X-API-Key): the frontend server proves it is allowed to call the API.
- Acting user (X-User-Id): the frontend forwards the signed-in user's profile id,
  which is resolved to a profile and role for per-operation authorization.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from core.config import API_KEY
from core.dependencies import get_profile_repository
from core.exceptions import AuthenticationError, PermissionDeniedError
from core.logging_config import set_user_id

logger = logging.getLogger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"
USER_ID_HEADER_NAME = "X-User-Id"

# =============================================================================
# ROLES
# =============================================================================

ALL_ROLES = ("owner", "admin", "manager", "doctor", "psych", "nurse", "driver", "patient")
OWNER_ROLES: FrozenSet[str] = frozenset({"owner", "admin"})
STAFF_ROLES: FrozenSet[str] = frozenset({"owner", "admin", "manager", "doctor", "nurse", "psych"})


def is_staff_role(role: Optional[str]) -> bool:
    return role in STAFF_ROLES


def has_owner_access(role: Optional[str]) -> bool:
    return role in OWNER_ROLES


api_key_header = APIKeyHeader(
    name=API_KEY_HEADER_NAME,
    auto_error=False,
    description="API key for authenticating requests. Include in the X-API-Key header.",
)

user_id_header = APIKeyHeader(
    name=USER_ID_HEADER_NAME,
    auto_error=False,
    scheme_name="UserId",
    description="Profile id of the signed-in user, forwarded by the portal frontend.",
)


@dataclass(frozen=True)
class CurrentUser:
    """The profile making the request."""
    id: str
    email: Optional[str]
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return is_staff_role(self.role)

    @property
    def has_owner_access(self) -> bool:
        return has_owner_access(self.role)


async def verify_api_key(
    api_key: Optional[str] = Security(api_key_header),
) -> str:
    """
    Verify the API key from the request header.

    Uses constant-time comparison to prevent timing attacks.

    Raises:
        HTTPException: 401 Unauthorized if key is missing.
        HTTPException: 403 Forbidden if key is invalid.
    """
    if api_key is None:
        logger.warning("API request without authentication header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Include it in the X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not secrets.compare_digest(api_key, API_KEY):
        logger.warning("API request with invalid API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


async def get_current_user(
    user_id: Optional[str] = Security(user_id_header),
    profile_repository=Depends(get_profile_repository),
) -> CurrentUser:
    """
    Resolve the X-User-Id header to a profile.

    Raises:
        AuthenticationError: If the header is missing or names no profile.
    """
    if not user_id:
        raise AuthenticationError()

    profile = profile_repository.get_by_id(user_id)
    if profile is None:
        logger.warning("Request for unknown profile", extra={"user_id": user_id})
        raise AuthenticationError("Profile not found")

    set_user_id(profile["id"])
    return CurrentUser(
        id=profile["id"],
        email=profile.get("email"),
        role=profile.get("role") or "patient",
        first_name=profile.get("first_name"),
        last_name=profile.get("last_name"),
    )


async def get_optional_user(
    user_id: Optional[str] = Security(user_id_header),
    profile_repository=Depends(get_profile_repository),
) -> Optional[CurrentUser]:
    """Like get_current_user, but public form endpoints accept anonymous callers."""
    if not user_id:
        return None
    return await get_current_user(user_id=user_id, profile_repository=profile_repository)


def require_roles(roles: Iterable[str], detail: str = "Permission denied") -> Callable:
    """
    Build a dependency that only admits users with one of the given roles.

    Usage:
        @router.get("", dependencies=[Depends(require_roles({"owner"}))])
    """
    allowed = frozenset(roles)

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                "Role not permitted",
                extra={"role": user.role, "allowed": sorted(allowed)}
            )
            raise PermissionDeniedError(detail)
        return user

    return dependency


require_staff = require_roles(STAFF_ROLES, "Staff access required")
require_owner_access = require_roles(OWNER_ROLES, "Unauthorized - Owner or admin access required")
