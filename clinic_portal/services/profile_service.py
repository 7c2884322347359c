"""
Service layer for profile operations.

Architecture:
    API Layer (routers) → ProfileService → ProfileRepository → Database

Dependency Injection:
    ProfileService receives its repository via constructor injection.
    Use core.dependencies.get_profile_service() in routers with Depends().
"""
import logging
import re
from typing import Any, Dict, List

from repositories import ProfileRepository
from schemas import AvatarUpdate, PatientSearchResult, ProfileCreate, ProfileResponse, ProfileUpdate, StaffMember
from core.auth import STAFF_ROLES
from core.exceptions import DuplicateProfileError, ProfileNotFoundError
from core.validators import normalize_email

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


def display_name(profile: Dict[str, Any]) -> str:
    """'First Last', else the email, else the id."""
    name = " ".join(
        part.strip() for part in (profile.get("first_name"), profile.get("last_name")) if part and part.strip()
    )
    return name or profile.get("email") or profile["id"]


class ProfileService:
    """
    Service layer for profile operations.

    Profiles are created by owners/admins. Users may edit their own name,
    contact details and avatar; staff search patient profiles.
    """

    def __init__(self, profile_repository: ProfileRepository):
        """
        Args:
            profile_repository: ProfileRepository instance for data access.
                                Injected via core.dependencies.get_profile_service().
        """
        self._repo = profile_repository

    def create_profile(self, data: ProfileCreate) -> ProfileResponse:
        """
        Create a profile.

        Raises:
            DuplicateProfileError: If a profile with this email already exists.
        """
        email = normalize_email(data.email)
        logger.info(f"Creating profile with role {data.role}")

        if self._repo.get_by_email(email) is not None:
            raise DuplicateProfileError(email=email)

        values = data.model_dump()
        values["email"] = email
        values["name"] = f"{data.first_name} {data.last_name}".strip()

        created = self._repo.add(values)
        if created is None:
            raise DuplicateProfileError(email=email)

        logger.info(f"Profile created (id={created['id']})")
        return ProfileResponse(**created)

    def get_profile(self, profile_id: str) -> ProfileResponse:
        """
        Raises:
            ProfileNotFoundError: If no profile has this id.
        """
        profile = self._repo.get_by_id(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id=profile_id)
        return ProfileResponse(**profile)

    def list_staff_for_assign(self) -> List[StaffMember]:
        """Staff profiles ordered by first name, for task assignment pickers."""
        return [
            StaffMember(
                id=p["id"],
                name=display_name(p),
                email=p.get("email"),
                role=p["role"],
                designation=p.get("designation"),
            )
            for p in self._repo.list_by_roles(sorted(STAFF_ROLES))
        ]

    def update_profile(self, profile_id: str, data: ProfileUpdate) -> ProfileResponse:
        """
        Apply the fields the user sent to their own profile. The display
        `name` follows first/last name changes.

        Raises:
            ProfileNotFoundError: If no profile has this id.
        """
        current = self._repo.get_by_id(profile_id)
        if current is None:
            raise ProfileNotFoundError(profile_id=profile_id)

        changes = data.model_dump(mode="json", exclude_unset=True)
        if "first_name" in changes or "last_name" in changes:
            first = changes.get("first_name", current.get("first_name")) or ""
            last = changes.get("last_name", current.get("last_name")) or ""
            changes["name"] = f"{first} {last}".strip()

        updated = self._repo.update(profile_id, changes)
        logger.info(f"Profile updated (id={profile_id}, fields={sorted(changes)})")
        return ProfileResponse(**updated)

    def update_avatar(self, profile_id: str, data: AvatarUpdate) -> ProfileResponse:
        """
        Raises:
            ProfileNotFoundError: If no profile has this id.
        """
        updated = self._repo.update(profile_id, {"avatar_url": str(data.avatar_url)})
        if updated is None:
            raise ProfileNotFoundError(profile_id=profile_id)
        return ProfileResponse(**updated)

    def search_patients(self, query: str) -> List[PatientSearchResult]:
        """
        Patients whose name or email contains the query.

        Queries shorter than two characters return nothing. Commas become
        spaces and LIKE wildcards in the query match literally.
        """
        query = re.sub(r"\s+", " ", query.replace(",", " ")).strip()
        if len(query) < SEARCH_MIN_LENGTH:
            return []
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        rows = self._repo.search_patients(f"%{escaped}%", SEARCH_LIMIT)
        return [PatientSearchResult(**row) for row in rows]
