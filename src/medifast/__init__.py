"""MediFast: meditation, breathing and fasting timers with local history."""

__version__ = "0.1.0"
