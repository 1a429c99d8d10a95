"""MediFast record models.

Models:
    MeditationPlan: A chain of 1-9 meditation sessions plus cue options.
    CompletedMeditationSession: One finished session of a plan.
    StreakState: Consecutive-day counters shared by meditation and fasting.
    BreathingSettings: Round configuration for the breathing exercise.
    BreathingRoundResult: The outcome of one breathing round.
    Fast: A fasting interval; active while ``end_at`` is None.
    UserProfile: Identity and body metrics in canonical units (kg, cm).

Every model converts to and from JSON-compatible dicts. ``from_dict`` raises
``DecodeError`` when a payload does not match the schema.
"""
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from medifast.core.status import BMICategory, UnitSystem
from medifast.utils.custom_exception import DecodeError
from medifast.utils.time_conversions import parse_iso

MAX_PLAN_SESSIONS = 9
MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 59
DEFAULT_SESSION_MINUTES = 10


def _new_id() -> str:
    return str(uuid.uuid4())


def _clamp(value: int, low: int, high: int) -> int:
    return min(high, max(low, int(value)))


def _iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment is not None else None


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    return parse_iso(value) if value is not None else None


@contextmanager
def _decoding(name: str):
    try:
        yield
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(f"Invalid {name} payload: {e}") from e


def decode_list(model, payload: Any) -> list:
    """Decodes a stored JSON list into model instances."""
    if not isinstance(payload, list):
        raise DecodeError(f"Expected a list of {model.__name__}, got {type(payload).__name__}")
    return [model.from_dict(item) for item in payload]


def encode_list(items) -> List[Dict[str, Any]]:
    return [item.to_dict() for item in items]


# === Meditation ===

@dataclass
class MeditationPlan:
    """A chain of sessions to run back-to-back. Values are clamped on construction."""
    session_minutes: List[int] = field(default_factory=lambda: [DEFAULT_SESSION_MINUTES])
    warmup_seconds: Optional[int] = None  # before the first session only
    midpoint_interval_minutes: Optional[int] = None  # recurring bell, every N minutes
    vibrate_after_session: bool = False
    ding_after_session: bool = False

    def __post_init__(self):
        self.session_minutes = self.clamped(self.session_minutes)
        if self.warmup_seconds is not None and self.warmup_seconds <= 0:
            self.warmup_seconds = None
        if self.midpoint_interval_minutes is not None:
            self.midpoint_interval_minutes = _clamp(
                self.midpoint_interval_minutes, MIN_SESSION_MINUTES, MAX_SESSION_MINUTES
            )

    @staticmethod
    def clamped(values) -> List[int]:
        limited = list(values or [])[:MAX_PLAN_SESSIONS]
        if not limited:
            return [DEFAULT_SESSION_MINUTES]
        return [_clamp(v, MIN_SESSION_MINUTES, MAX_SESSION_MINUTES) for v in limited]

    @property
    def total_minutes(self) -> int:
        return sum(self.session_minutes)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "MeditationPlan":
        with _decoding(cls.__name__):
            return cls(
                session_minutes=[int(v) for v in data["session_minutes"]],
                warmup_seconds=data.get("warmup_seconds"),
                midpoint_interval_minutes=data.get("midpoint_interval_minutes"),
                vibrate_after_session=bool(data.get("vibrate_after_session", False)),
                ding_after_session=bool(data.get("ding_after_session", False)),
            )


@dataclass(frozen=True)
class CompletedMeditationSession:
    started_at: datetime
    ended_at: datetime
    duration: float  # seconds
    id: str = field(default_factory=_new_id)

    @property
    def completed_at(self) -> datetime:
        return self.ended_at

    @property
    def reference_date(self) -> datetime:
        return self.ended_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "started_at": _iso(self.started_at),
            "ended_at": _iso(self.ended_at),
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CompletedMeditationSession":
        with _decoding(cls.__name__):
            return cls(
                id=str(data["id"]),
                started_at=parse_iso(data["started_at"]),
                ended_at=parse_iso(data["ended_at"]),
                duration=float(data["duration"]),
            )


@dataclass(frozen=True)
class StreakState:
    """Consecutive calendar days with at least one completed session."""
    last_session_date: Optional[date] = None
    current_streak: int = 0
    best_streak: int = 0

    def to_dict(self) -> dict:
        return {
            "last_session_date": self.last_session_date.isoformat() if self.last_session_date else None,
            "current_streak": self.current_streak,
            "best_streak": self.best_streak,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StreakState":
        with _decoding(cls.__name__):
            last = data.get("last_session_date")
            return cls(
                last_session_date=date.fromisoformat(last) if last else None,
                current_streak=max(0, int(data["current_streak"])),
                best_streak=max(0, int(data["best_streak"])),
            )


# === Breathing ===

@dataclass
class BreathingSettings:
    rounds: int = 5
    breaths_per_round: int = 30
    recovery_hold_seconds: int = 15
    pace_seconds: int = 3  # seconds per breath during auto-pace
    vibrate_after_round: bool = False
    ding_after_round: bool = False

    def __post_init__(self):
        self.rounds = max(1, int(self.rounds))
        self.breaths_per_round = max(1, int(self.breaths_per_round))
        self.recovery_hold_seconds = max(0, int(self.recovery_hold_seconds))
        self.pace_seconds = max(1, int(self.pace_seconds))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "BreathingSettings":
        # Older payloads have no pace; they decode with the 3s default.
        with _decoding(cls.__name__):
            return cls(
                rounds=data["rounds"],
                breaths_per_round=data["breaths_per_round"],
                recovery_hold_seconds=data["recovery_hold_seconds"],
                pace_seconds=data.get("pace_seconds", 3),
                vibrate_after_round=bool(data.get("vibrate_after_round", False)),
                ding_after_round=bool(data.get("ding_after_round", False)),
            )


@dataclass(frozen=True)
class BreathingRoundResult:
    round_number: int
    breaths_completed: int
    retention_seconds: int
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "BreathingRoundResult":
        with _decoding(cls.__name__):
            return cls(
                id=str(data["id"]),
                round_number=int(data["round_number"]),
                breaths_completed=int(data["breaths_completed"]),
                retention_seconds=int(data["retention_seconds"]),
            )


# === Fasting ===

@dataclass(frozen=True)
class Fast:
    """A fasting interval. Active fasts have no ``end_at``."""
    start_at: datetime
    end_at: Optional[datetime] = None
    duration: Optional[float] = None  # seconds, set when ended
    id: str = field(default_factory=_new_id)

    @property
    def is_active(self) -> bool:
        return self.end_at is None

    @property
    def completed_at(self) -> Optional[datetime]:
        return self.end_at

    @property
    def reference_date(self) -> datetime:
        return self.end_at or self.start_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start_at": _iso(self.start_at),
            "end_at": _iso(self.end_at),
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Fast":
        with _decoding(cls.__name__):
            duration = data.get("duration")
            return cls(
                id=str(data["id"]),
                start_at=parse_iso(data["start_at"]),
                end_at=_from_iso(data.get("end_at")),
                duration=float(duration) if duration is not None else None,
            )


# === Profile ===

@dataclass(frozen=True)
class UserProfile:
    given_name: str = ""
    family_name: str = ""
    email: str = ""
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    unit_system: UnitSystem = UnitSystem.METRIC
    updated_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    @property
    def full_name(self) -> str:
        parts = [p.strip() for p in (self.given_name, self.family_name)]
        return " ".join(p for p in parts if p)

    @property
    def initials(self) -> str:
        parts = [p.strip() for p in (self.given_name, self.family_name)]
        return "".join(p[0] for p in parts if p).upper()

    @property
    def bmi(self) -> Optional[float]:
        if self.weight_kg is None or not self.height_cm or self.height_cm <= 0:
            return None
        meters = self.height_cm / 100
        return self.weight_kg / (meters * meters)

    @property
    def bmi_category(self) -> Optional[BMICategory]:
        bmi = self.bmi
        return BMICategory.from_value(bmi) if bmi is not None else None

    def weight_in(self, system: UnitSystem) -> Optional[float]:
        if self.weight_kg is None:
            return None
        return self.weight_kg / system.weight_factor

    def height_in(self, system: UnitSystem) -> Optional[float]:
        if self.height_cm is None:
            return None
        return self.height_cm / system.height_factor

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "given_name": self.given_name,
            "family_name": self.family_name,
            "email": self.email,
            "weight_kg": self.weight_kg,
            "height_cm": self.height_cm,
            "unit_system": self.unit_system.value,
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        with _decoding(cls.__name__):
            return cls(
                id=str(data["id"]),
                given_name=data.get("given_name", ""),
                family_name=data.get("family_name", ""),
                email=data.get("email", ""),
                weight_kg=data.get("weight_kg"),
                height_cm=data.get("height_cm"),
                unit_system=UnitSystem(data.get("unit_system", UnitSystem.METRIC.value)),
                updated_at=parse_iso(data["updated_at"]),
            )
