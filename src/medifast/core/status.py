# medifast/core/status.py
from enum import Enum


class MeditationPhase(Enum):
    IDLE = "idle"
    WARMUP = "warmup"
    RUNNING = "running"
    COMPLETED = "completed"


class BreathingPhase(Enum):
    IDLE = "idle"
    BREATHING = "breathing"
    RETENTION = "retention"
    RECOVERY = "recovery"
    COMPLETED = "completed"

    @property
    def title(self) -> str:
        return {
            BreathingPhase.IDLE: "Ready",
            BreathingPhase.BREATHING: "Take deep breaths",
            BreathingPhase.RETENTION: "Let go and hold",
            BreathingPhase.RECOVERY: "Recovery breath",
            BreathingPhase.COMPLETED: "Completed",
        }[self]


class BreathSubPhase(Enum):
    INHALE = "inhale"
    EXHALE = "exhale"


class ImpactStrength(Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SOFT = "soft"
    RIGID = "rigid"


class NotifyKind(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class CueSound(Enum):
    SESSION_START = "session-start"
    SESSION_MID = "session-mid"
    SESSION_END = "session-end"


class UnitSystem(Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    @property
    def weight_symbol(self) -> str:
        return "kg" if self is UnitSystem.METRIC else "lb"

    @property
    def height_symbol(self) -> str:
        return "cm" if self is UnitSystem.METRIC else "in"

    @property
    def weight_factor(self) -> float:
        """Kilograms per display unit."""
        return 1.0 if self is UnitSystem.METRIC else 0.45359237

    @property
    def height_factor(self) -> float:
        """Centimeters per display unit."""
        return 1.0 if self is UnitSystem.METRIC else 2.54


class BMICategory(Enum):
    UNDERWEIGHT = "Underweight"
    NORMAL = "Healthy"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"

    @classmethod
    def from_value(cls, bmi: float) -> "BMICategory":
        if bmi < 18.5:
            return cls.UNDERWEIGHT
        if bmi < 25:
            return cls.NORMAL
        if bmi < 30:
            return cls.OVERWEIGHT
        return cls.OBESE
