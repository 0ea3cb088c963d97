"""Profile service - candidate profile management."""

import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from models import CandidateProfile

from .base_service import BaseService
from .exceptions import ProfileNotFoundError, ValidationError
from .models import ProfileUpdate

logger = logging.getLogger(__name__)

LIST_FIELDS = (
    "target_titles",
    "target_locations",
    "target_companies",
    "industries",
    "skills",
    "excluded_companies",
    "keyword_blacklist",
)


def dedupe_case_insensitive(values: list[str]) -> list[str]:
    """Trim entries, drop blanks, and keep the first spelling of each value.

    Examples:
        dedupe_case_insensitive(["Acme", " acme ", "", "Globex"]) == ["Acme", "Globex"]
    """
    seen = set()
    result = []
    for value in values:
        cleaned = (value or "").strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def load_resume_text(profile: CandidateProfile) -> str | None:
    """Get the candidate's base resume text.

    Prefers the inline resume_text; otherwise reads resume_path.

    Returns:
        Resume text or None if neither is available.
    """
    if profile.resume_text and profile.resume_text.strip():
        return profile.resume_text

    if not profile.resume_path:
        return None

    path = Path(profile.resume_path).expanduser()
    if not path.exists():
        logger.warning("Resume not found at %s", path)
        return None

    try:
        return path.read_text()
    except OSError as e:
        logger.error("Error reading resume: %s", e)
        return None


class ProfileService(BaseService):
    """Service for candidate profile retrieval and updates."""

    async def get_profile(self, user_id: str) -> CandidateProfile:
        """Get a user's candidate profile.

        Raises:
            ProfileNotFoundError: If the user has no profile.
        """
        return await self._require_profile(user_id)

    async def save_profile(self, user_id: str, update: ProfileUpdate) -> CandidateProfile:
        """Create or replace a user's profile.

        List fields are de-duplicated case-insensitively before saving.

        Args:
            user_id: Owner of the profile.
            update: New profile values.

        Returns:
            The stored profile.
        """
        values = update.model_dump()
        for name in LIST_FIELDS:
            values[name] = dedupe_case_insensitive(values[name])

        if values["resume_path"] and not Path(values["resume_path"]).expanduser().exists():
            raise ValidationError(
                f"Resume file not found: {values['resume_path']}", field="resume_path"
            )

        profile = await self.profiles.save_profile(CandidateProfile(user_id=user_id, **values))
        logger.info("Profile saved for %s", user_id)
        return profile

    async def update_from_dict(self, user_id: str, raw: dict) -> CandidateProfile:
        """Validate a raw mapping (e.g. a JSON file) and save it as the profile.

        Raises:
            ValidationError: If the mapping does not describe a valid profile.
        """
        try:
            update = ProfileUpdate.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid profile: {e}", field="profile") from e
        return await self.save_profile(user_id, update)
