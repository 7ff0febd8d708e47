"""Profile service - loads timing profiles (decay window, tick cadences) from YAML."""

from pathlib import Path

import yaml

from mongle.schemas.profile import TimingProfile

DATA_DIR = Path(__file__).parent.parent / "data" / "profiles"


class ProfileService:
    def __init__(self):
        self._cache: dict[str, TimingProfile] = {}

    def load_profile(self, name: str) -> TimingProfile:
        """Load a timing profile from its YAML file."""
        if name in self._cache:
            return self._cache[name]

        file_path = DATA_DIR / f"{name}.yaml"
        if not file_path.exists():
            raise FileNotFoundError(f"Timing profile not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)

        profile = TimingProfile(**raw)
        self._cache[name] = profile
        return profile

    def list_profiles(self) -> list[str]:
        """Names of all shipped profiles."""
        return sorted(p.stem for p in DATA_DIR.glob("*.yaml"))


profile_service = ProfileService()
