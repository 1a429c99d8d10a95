from medifast.core.ports.cue_port import CuePort
from medifast.core.status import CueSound, ImpactStrength, NotifyKind
from medifast.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class LoggingCueAdapter(CuePort):
    """Headless cue emitter: every cue becomes a log line."""

    def impact(self, strength: ImpactStrength = ImpactStrength.MEDIUM) -> None:
        logger.info(f"impact({strength.value})")

    def notify(self, kind: NotifyKind = NotifyKind.SUCCESS) -> None:
        logger.info(f"notify({kind.value})")

    def play_sound(self, name: CueSound) -> None:
        logger.info(f"sound({name.value})")

    def pulse(self, duration=2.0, interval=0.25, strength=ImpactStrength.MEDIUM) -> None:
        logger.info(f"pulse({duration}s every {interval}s, {strength.value})")
