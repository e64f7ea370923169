"""
Base Service Class.
Provides common utility methods for all services.
"""
import time


class BaseService:
    """
    Base class for all services.
    """

    def elapsed_ms(self, started: float) -> float:
        """Milliseconds since a time.monotonic() reading."""
        return round((time.monotonic() - started) * 1000, 2)
