from medifast.core.ports.cue_port import CuePort
from medifast.core.ports.store_port import StorePort

__all__ = ["CuePort", "StorePort"]
