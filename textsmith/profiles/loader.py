"""Loading of rewrite profiles from YAML and the process-wide registry."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from textsmith.profiles.models import Profile, ProfileSummary

logger = logging.getLogger(__name__)

BUILTIN_PROFILES_DIR = Path(__file__).parent / "builtin"


class DuplicateProfileError(ValueError):
    """Two profile files declare the same id."""


class ProfileRegistry:
    """Rewrite profiles by id, in file-name order of the directory they came from."""

    def __init__(self) -> None:
        self._profiles: Dict[str, Profile] = {}
        self._sources: Dict[str, Path] = {}
        self._loaded = False

    def load_from_directory(self, profiles_dir: str | Path) -> None:
        """
        Load every ``*.yaml`` rewrite profile in ``profiles_dir``.

        A missing directory leaves the registry empty but loaded; the engine
        then runs with request settings only.

        Raises:
            yaml.YAMLError: If a profile file cannot be parsed
            ValidationError: If a profile names an unknown tone or style,
                or carries an invalid version or limit
            DuplicateProfileError: If two files declare the same profile id
        """
        profiles_path = Path(profiles_dir)
        self._loaded = True
        if not profiles_path.is_dir():
            logger.warning(f"Rewrite profiles directory not found: {profiles_dir}")
            return

        for yaml_file in sorted(profiles_path.glob("*.yaml")):
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
                if not data:
                    logger.warning(f"Skipping empty profile file: {yaml_file}")
                    continue
                profile = Profile.model_validate(data)
            except (yaml.YAMLError, ValidationError) as e:
                logger.error(f"Invalid rewrite profile {yaml_file}: {e}")
                raise

            if profile.id in self._profiles:
                raise DuplicateProfileError(
                    f"Profile '{profile.id}' in {yaml_file.name} is already "
                    f"defined in {self._sources[profile.id].name}"
                )
            self._profiles[profile.id] = profile
            self._sources[profile.id] = yaml_file
            logger.debug(f"Loaded rewrite profile {profile.id} from {yaml_file}")

        if self._profiles:
            loaded = ", ".join(
                f"{profile.id}@{profile.version}" for profile in self._profiles.values()
            )
            logger.info(f"Rewrite profiles loaded: {loaded}")
        else:
            logger.info("No rewrite profiles loaded")

    def get(self, profile_id: str) -> Optional[Profile]:
        return self._profiles.get(profile_id)

    def list_profiles(self) -> List[ProfileSummary]:
        """Discovery view served by ``GET /v1/profiles``."""
        return [
            ProfileSummary(
                id=profile.id,
                title=profile.title,
                version=profile.version,
                description=profile.description,
            )
            for profile in self._profiles.values()
        ]

    def get_available_ids(self) -> List[str]:
        return list(self._profiles)

    def is_loaded(self) -> bool:
        return self._loaded

    def clear(self) -> None:
        self._profiles.clear()
        self._sources.clear()
        self._loaded = False


_registry: Optional[ProfileRegistry] = None


def get_profile_registry() -> ProfileRegistry:
    global _registry
    if _registry is None:
        _registry = ProfileRegistry()
    return _registry


def reload_profiles(profiles_dir: str | Path | None = None) -> ProfileRegistry:
    """Replace the registry contents; the bundled profiles when no directory is given."""
    registry = get_profile_registry()
    registry.clear()
    registry.load_from_directory(profiles_dir or BUILTIN_PROFILES_DIR)
    return registry
