"""Store keys (versioned) used across features. Each machine owns its own keys."""

# Meditation
MEDITATION_PLAN = "meditation.plan.v1"
MEDITATION_SESSIONS = "meditation.sessions.v1"  # [CompletedMeditationSession]
MEDITATION_STREAKS = "meditation.streaks.v1"  # StreakState

# Fasting
FASTING_ACTIVE = "fasting.active.v1"  # active Fast, absent when not fasting
FASTING_HISTORY = "fasting.history.v1"  # [Fast], newest first
FASTING_STREAKS = "fasting.streaks.v1"  # StreakState

# Breathing
BREATHING_SETTINGS = "breathing.settings.v1"
BREATHING_HISTORY = "breathing.history.v1"  # [BreathingRoundResult] of the latest session

# Profile
USER_PROFILE = "profile.user.v1"
