from medifast.tools.time_tools.meditation import MeditationSession
from medifast.tools.time_tools.breathing import BreathingSession
from medifast.tools.time_tools.fasting import FastingTracker
from medifast.tools.profile_tools.profile import ProfileService

__all__ = ["MeditationSession", "BreathingSession", "FastingTracker", "ProfileService"]
