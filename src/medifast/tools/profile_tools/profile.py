import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional, Tuple

from medifast.core import keys
from medifast.core.models import UserProfile
from medifast.core.ports.cue_port import CuePort
from medifast.core.ports.store_port import StorePort
from medifast.core.status import NotifyKind, UnitSystem
from medifast.utils.custom_exception import StorageError, ValidationError
from medifast.utils.logging_handler import setup_logger

EMAIL_PATTERN = re.compile(r"^[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def format_measurement(value: float) -> str:
    """At most one decimal, no trailing zeros: 72.0 -> '72', 180.34 -> '180.3'."""
    return f"{value:.1f}".rstrip("0").rstrip(".")


@dataclass
class ProfileForm:
    """Profile fields as typed by the user, in the form's current unit system."""
    given_name: str = ""
    family_name: str = ""
    email: str = ""
    weight: str = ""
    height: str = ""
    unit_system: UnitSystem = UnitSystem.METRIC

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ProfileForm":
        weight = profile.weight_in(profile.unit_system)
        height = profile.height_in(profile.unit_system)
        return cls(
            given_name=profile.given_name,
            family_name=profile.family_name,
            email=profile.email,
            weight=format_measurement(weight) if weight is not None else "",
            height=format_measurement(height) if height is not None else "",
            unit_system=profile.unit_system,
        )

    @property
    def validation_message(self) -> Optional[str]:
        try:
            self.build_profile()
        except ValidationError as e:
            return e.message
        return None

    def build_profile(self, existing: Optional[UserProfile] = None,
                      now: Optional[datetime] = None) -> UserProfile:
        """Validates the form and returns a profile in canonical units (kg, cm)."""
        given = self.given_name.strip()
        family = self.family_name.strip()
        email = self.email.strip()

        if not given:
            raise ValidationError("given_name", "First name is required.")
        if not family:
            raise ValidationError("family_name", "Last name is required.")
        if not email:
            raise ValidationError("email", "Email is required.")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("email", "Enter a valid email address.")

        weight = self._parse_measurement(self.weight, "weight") * self.unit_system.weight_factor
        height = self._parse_measurement(self.height, "height") * self.unit_system.height_factor

        values = dict(
            given_name=given,
            family_name=family,
            email=email,
            weight_kg=weight,
            height_cm=height,
            unit_system=self.unit_system,
            updated_at=now or datetime.now(),
        )
        if existing is not None:
            return replace(existing, **values)
        return UserProfile(**values)

    def update_unit_system(self, system: UnitSystem) -> None:
        """Switches units, converting whatever numbers were already typed."""
        if system is self.unit_system:
            return
        self.weight = self._convert(self.weight, self.unit_system.weight_factor, system.weight_factor)
        self.height = self._convert(self.height, self.unit_system.height_factor, system.height_factor)
        self.unit_system = system

    @staticmethod
    def _parse_measurement(raw: str, field: str) -> float:
        text = raw.strip()
        label = field.capitalize()
        if not text:
            raise ValidationError(field, f"{label} is required.")
        try:
            value = float(text.replace(",", "."))
        except ValueError:
            raise ValidationError(field, f"{label} must be a positive number.") from None
        if value <= 0:
            raise ValidationError(field, f"{label} must be a positive number.")
        return value

    @staticmethod
    def _convert(raw: str, from_factor: float, to_factor: float) -> str:
        text = raw.strip()
        if not text:
            return ""
        try:
            value = float(text.replace(",", "."))
        except ValueError:
            return raw
        return format_measurement(value * from_factor / to_factor)


class ProfileService:
    """Loads and saves the user profile through the shared record store."""

    def __init__(self, store: StorePort, cues: CuePort, clock: Optional[Callable[[], datetime]] = None):
        self.logger = setup_logger(__name__)
        self._store = store
        self._cues = cues
        self._clock = clock or datetime.now
        self._profile = self._load()

    @property
    def profile(self) -> UserProfile:
        return self._profile

    def form(self) -> ProfileForm:
        return ProfileForm.from_profile(self._profile)

    def save(self, form: ProfileForm) -> Tuple[bool, str]:
        """Validates and stores the form. Returns (ok, message for the user)."""
        try:
            updated = form.build_profile(existing=self._profile, now=self._clock())
        except ValidationError as ve:
            self.logger.info(f"Profile not saved ({ve.field}): {ve.message}")
            self._notify(NotifyKind.ERROR)
            return False, ve.message

        self._profile = updated
        try:
            self._store.save(keys.USER_PROFILE, updated.to_dict())
        except StorageError as e:
            self.logger.exception(f"Could not persist profile: {e}")
        self._notify(NotifyKind.SUCCESS)
        return True, "Profile updated"

    def _load(self) -> UserProfile:
        try:
            raw = self._store.load(keys.USER_PROFILE)
            return UserProfile.from_dict(raw) if raw is not None else UserProfile()
        except StorageError as e:
            self.logger.warning(f"Ignoring unreadable profile: {e}")
            return UserProfile()

    def _notify(self, kind: NotifyKind) -> None:
        try:
            self._cues.notify(kind)
        except Exception as e:
            self.logger.debug(f"Cue failed: {e}")
