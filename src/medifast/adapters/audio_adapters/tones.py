"""
Cue waveforms synthesised with NumPy, so no audio assets have to ship.

Every function returns a mono int16 array ready for ``sounddevice.play``.
"""
import math

import numpy as np

from medifast.core.status import CueSound, ImpactStrength, NotifyKind

SAMPLE_RATE = 44100

# (fundamental Hz, length s)
BELLS = {
    CueSound.SESSION_START: (528.0, 2.5),
    CueSound.SESSION_MID: (396.0, 1.5),
    CueSound.SESSION_END: (432.0, 4.0),
}

STRENGTH_GAIN = {
    ImpactStrength.SOFT: 0.15,
    ImpactStrength.LIGHT: 0.25,
    ImpactStrength.MEDIUM: 0.5,
    ImpactStrength.RIGID: 0.7,
    ImpactStrength.HEAVY: 0.9,
}

# (strength, gap s) per click
NOTIFY_PATTERNS = {
    NotifyKind.SUCCESS: [(ImpactStrength.LIGHT, 0.12), (ImpactStrength.MEDIUM, 0.0)],
    NotifyKind.WARNING: [(ImpactStrength.MEDIUM, 0.2), (ImpactStrength.MEDIUM, 0.0)],
    NotifyKind.ERROR: [(ImpactStrength.HEAVY, 0.08), (ImpactStrength.HEAVY, 0.08), (ImpactStrength.HEAVY, 0.0)],
}


def to_int16(samples: np.ndarray) -> np.ndarray:
    return (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)


def bell(frequency: float, seconds: float, rate: int = SAMPLE_RATE, volume: float = 0.6) -> np.ndarray:
    """A struck-bell tone: inharmonic partials under an exponential decay."""
    t = np.arange(int(seconds * rate)) / rate
    wave = (
        np.sin(2 * np.pi * frequency * t)
        + 0.5 * np.sin(2 * np.pi * 2.76 * frequency * t)
        + 0.25 * np.sin(2 * np.pi * 5.4 * frequency * t)
    ) / 1.75
    envelope = np.exp(-3.0 * t / seconds)
    attack = min(len(t), int(0.005 * rate))
    envelope[:attack] *= np.linspace(0.0, 1.0, attack)
    return to_int16(wave * envelope * volume)


def cue_bell(name: CueSound, rate: int = SAMPLE_RATE, volume: float = 0.6) -> np.ndarray:
    frequency, seconds = BELLS[name]
    return bell(frequency, seconds, rate=rate, volume=volume)


def _click_samples(strength: ImpactStrength, rate: int, length: float = 0.03) -> np.ndarray:
    t = np.arange(int(length * rate)) / rate
    return np.sin(2 * np.pi * 180.0 * t) * np.exp(-t / (length / 4)) * STRENGTH_GAIN[strength]


def click(strength: ImpactStrength = ImpactStrength.MEDIUM, rate: int = SAMPLE_RATE) -> np.ndarray:
    """A short thump standing in for a haptic impact."""
    return to_int16(_click_samples(strength, rate))


def click_train(duration: float, interval: float, strength: ImpactStrength = ImpactStrength.MEDIUM,
                rate: int = SAMPLE_RATE) -> np.ndarray:
    """Clicks every ``interval`` seconds for ``duration`` seconds (at least one click)."""
    count = max(1, math.ceil(duration / interval))
    step = int(interval * rate)
    single = _click_samples(strength, rate)
    out = np.zeros(step * (count - 1) + len(single))
    for i in range(count):
        out[i * step:i * step + len(single)] += single
    return to_int16(out)


def notify_pattern(kind: NotifyKind, rate: int = SAMPLE_RATE) -> np.ndarray:
    chunks = []
    for strength, gap in NOTIFY_PATTERNS[kind]:
        chunks.append(_click_samples(strength, rate))
        chunks.append(np.zeros(int(gap * rate)))
    return to_int16(np.concatenate(chunks))
