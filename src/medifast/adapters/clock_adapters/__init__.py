from medifast.adapters.clock_adapters.clock_ticker import ClockTicker

__all__ = ["ClockTicker"]
