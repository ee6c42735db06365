"""
Enumerations for search settings and site registry state.
"""

from enum import Enum


class Toggle(str, Enum):
    """Tri-state override for a boolean setting."""
    ON = "ON"
    OFF = "OFF"
    INHERIT = "INHERIT"

    def apply(self, current: bool) -> bool:
        """Collapse the override onto the current value."""
        if self is Toggle.ON:
            return True
        if self is Toggle.OFF:
            return False
        return current


class RegistryState(str, Enum):
    """Where the in-memory site list came from."""
    UNLOADED = "UNLOADED"
    LOCAL_LOADED = "LOCAL_LOADED"
    REMOTE_LOADED = "REMOTE_LOADED"
