"""Pytest fixtures: in-memory store, recording cues, failing capabilities, fixed clock."""
import os
import tempfile
from datetime import datetime, timedelta

import pytest

# Settings are read at import time, so point logs away from the home directory first.
os.environ.setdefault("MEDIFAST_DATA_DIR", tempfile.mkdtemp(prefix="medifast-data-"))
os.environ.setdefault("MEDIFAST_LOG_DIR", tempfile.mkdtemp(prefix="medifast-logs-"))
os.environ["MEDIFAST_TEST_MODE"] = "0"
os.environ["MEDIFAST_AUDIO"] = "0"

from medifast.adapters.memory_adapters import InMemoryStoreAdapter  # noqa: E402
from medifast.core.ports import CuePort, StorePort  # noqa: E402
from medifast.utils.custom_exception import DecodeError, EncodeError  # noqa: E402

T0 = datetime(2024, 1, 1, 9, 0, 0)


class RecordingCues(CuePort):
    """Collects every cue as a (method, args) tuple."""

    def __init__(self):
        self.calls = []

    def impact(self, strength=None):
        self.calls.append(("impact", strength))

    def notify(self, kind=None):
        self.calls.append(("notify", kind))

    def play_sound(self, name):
        self.calls.append(("play_sound", name))

    def pulse(self, duration=2.0, interval=0.25, strength=None):
        self.calls.append(("pulse", (duration, interval, strength)))

    def named(self, method):
        return [arg for name, arg in self.calls if name == method]


class BrokenCues(CuePort):
    def impact(self, strength=None):
        raise RuntimeError("no motor")

    def notify(self, kind=None):
        raise RuntimeError("no motor")

    def play_sound(self, name):
        raise RuntimeError("no speaker")

    def pulse(self, duration=2.0, interval=0.25, strength=None):
        raise RuntimeError("no motor")


class FailingStore(StorePort):
    """Every read fails to decode and every write fails to encode."""

    def __init__(self):
        self.save_attempts = 0

    def load(self, key):
        raise DecodeError(f"cannot read {key}")

    def save(self, key, value):
        self.save_attempts += 1
        raise EncodeError(f"cannot write {key}")

    def remove(self, key):
        raise DecodeError(f"cannot remove {key}")


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, start=T0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def store():
    return InMemoryStoreAdapter()


@pytest.fixture
def cues():
    return RecordingCues()


@pytest.fixture
def broken_cues():
    return BrokenCues()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def clock():
    return FixedClock()
