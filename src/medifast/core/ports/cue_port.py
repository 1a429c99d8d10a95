from abc import ABC, abstractmethod

from medifast.core.status import CueSound, ImpactStrength, NotifyKind


class CuePort(ABC):
    """Port for sensory cues (sound, vibration) fired at phase boundaries.

    Cues are fire-and-forget. Machines never let a failing cue change their state.
    """

    @abstractmethod
    def impact(self, strength: ImpactStrength = ImpactStrength.MEDIUM) -> None:
        """Instantaneous tactile pulse."""
        pass

    @abstractmethod
    def notify(self, kind: NotifyKind = NotifyKind.SUCCESS) -> None:
        """Tactile pattern signalling an outcome."""
        pass

    @abstractmethod
    def play_sound(self, name: CueSound) -> None:
        """Play a short bundled audio cue."""
        pass

    @abstractmethod
    def pulse(
        self,
        duration: float = 2.0,
        interval: float = 0.25,
        strength: ImpactStrength = ImpactStrength.MEDIUM,
    ) -> None:
        """Repeated impacts approximating a sustained vibration."""
        pass
