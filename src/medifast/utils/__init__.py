from medifast.config.settings import BASE_DIR
from medifast.utils.logging_handler import setup_logger
from medifast.utils.event import Event
from medifast.utils import custom_exception

__all__ = ["BASE_DIR", "setup_logger", "Event", "custom_exception"]
