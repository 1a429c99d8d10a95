"""MediFast configuration.

Settings are read once from the environment (and an optional ``.env`` file)
when :mod:`medifast.config.settings` is first imported.
"""
from medifast.config import settings

__all__ = ["settings"]
