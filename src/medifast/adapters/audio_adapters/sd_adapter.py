import sounddevice as sd

from medifast.adapters.audio_adapters import tones
from medifast.core.ports.cue_port import CuePort
from medifast.core.status import CueSound, ImpactStrength, NotifyKind
from medifast.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class SoundDeviceCueAdapter(CuePort):
    """
    Plays cues on the default output device using sounddevice.
    Bells are synthesised once and cached. A desktop has no vibration motor, so
    haptic cues become short clicks when ``haptic_clicks`` is on.
    """
    def __init__(self, rate=tones.SAMPLE_RATE, volume=0.6, haptic_clicks=True):
        self.rate = rate
        self.volume = volume
        self.haptic_clicks = haptic_clicks
        self._bells = {}

    def play_sound(self, name: CueSound) -> None:
        if name not in self._bells:
            self._bells[name] = tones.cue_bell(name, rate=self.rate, volume=self.volume)
        self._play(self._bells[name])

    def impact(self, strength: ImpactStrength = ImpactStrength.MEDIUM) -> None:
        if self.haptic_clicks:
            self._play(tones.click(strength, rate=self.rate))

    def notify(self, kind: NotifyKind = NotifyKind.SUCCESS) -> None:
        if self.haptic_clicks:
            self._play(tones.notify_pattern(kind, rate=self.rate))

    def pulse(self, duration=2.0, interval=0.25, strength=ImpactStrength.MEDIUM) -> None:
        if duration <= 0 or interval <= 0 or not self.haptic_clicks:
            return
        self._play(tones.click_train(duration, interval, strength, rate=self.rate))

    def _play(self, samples):
        """Non-blocking; a new cue cuts off the one still playing."""
        try:
            sd.play(samples, self.rate)
        except Exception as e:
            logger.error("Audio playback error", exc_info=e)

    def close(self):
        try:
            sd.stop()
        except Exception as e:
            logger.error("Audio stop error", exc_info=e)
