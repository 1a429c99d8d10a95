# sd_adapter is imported on demand: sounddevice needs PortAudio at import time.
from medifast.adapters.audio_adapters.logging_cue_adapter import LoggingCueAdapter

__all__ = ["LoggingCueAdapter"]
